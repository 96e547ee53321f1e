from __future__ import annotations

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace.status import Status, StatusCode

from campustune_api.domain.errors import AppError
from campustune_api.observability import metrics

_tracer = trace.get_tracer("campustune_api")


@asynccontextmanager
async def observe_operation(
    operation: str,
    *,
    attributes: dict[str, Any] | None = None,
) -> AsyncIterator[trace.Span]:
    """Wrap an operation in a span and record its outcome and duration metrics."""
    start = time.perf_counter()
    outcome = "success"
    error_code = ""
    with _tracer.start_as_current_span(f"ct.{operation}") as span:
        for key, value in (attributes or {}).items():
            if value is not None:
                span.set_attribute(key, value)
        try:
            yield span
        except AppError as exc:
            outcome = "error"
            error_code = exc.code
            span.set_attribute("app.error_code", exc.code)
            span.set_attribute("app.retryable", exc.retryable)
            span.set_status(Status(StatusCode.ERROR, description=exc.code))
            raise
        except Exception as exc:  # noqa: BLE001
            outcome = "error"
            error_code = "unhandled_exception"
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR))
            raise
        finally:
            metrics.operation_total.labels(
                operation=operation, outcome=outcome, error_code=error_code
            ).inc()
            metrics.operation_duration_seconds.labels(
                operation=operation, outcome=outcome
            ).observe(time.perf_counter() - start)
