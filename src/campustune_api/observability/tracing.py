from __future__ import annotations

import os

from fastapi import FastAPI

_TRUTHY = {"1", "true", "yes", "on"}
_configured = False


def tracing_enabled() -> bool:
    if os.getenv("CT_OTEL_ENABLED", "").strip().lower() in _TRUTHY:
        return True
    return bool(os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT"))


def configure_tracing(app: FastAPI) -> None:
    global _configured
    if _configured or not tracing_enabled():
        return

    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
    from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

    resource = Resource.create(
        {
            "service.name": os.getenv("OTEL_SERVICE_NAME", "campustune-api"),
            "service.version": app.version,
        }
    )
    sample_ratio = float(os.getenv("OTEL_TRACES_SAMPLER_ARG", "1.0"))
    provider = TracerProvider(
        resource=resource,
        sampler=ParentBased(TraceIdRatioBased(sample_ratio)),
    )

    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    exporter = OTLPSpanExporter(endpoint=endpoint) if endpoint else ConsoleSpanExporter()
    provider.add_span_processor(BatchSpanProcessor(exporter))

    # Request spans come from RequestContextMiddleware; only the provider is global.
    trace.set_tracer_provider(provider)
    _configured = True
