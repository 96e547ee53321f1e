from __future__ import annotations

import datetime as dt
import json
import logging
import os
import traceback
from typing import Any

from campustune_api.observability.context import get_payment_event_id, get_request_id

_CONFIGURED = False

# Attributes every LogRecord carries; anything else on the record came from `extra=`.
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {
    "message",
    "asctime",
    "taskName",
    "request_id",
    "payment_event_id",
    "trace_id",
    "span_id",
}

# Webhook handlers must never write credentials or raw signatures to the log stream.
_REDACTED_KEYS = frozenset(
    {
        "authorization",
        "signature",
        "stripe_signature",
        "webhook_secret",
        "secret_key",
    }
)


def _get_trace_context() -> tuple[str | None, str | None]:
    try:
        from opentelemetry.trace import get_current_span
    except Exception:  # noqa: BLE001
        return None, None

    context = get_current_span().get_span_context()
    if not context or not context.is_valid:
        return None, None
    return f"{context.trace_id:032x}", f"{context.span_id:016x}"


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        record.payment_event_id = get_payment_event_id()
        record.trace_id, record.span_id = _get_trace_context()
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": dt.datetime.now(dt.UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in ("request_id", "payment_event_id", "trace_id", "span_id"):
            value = getattr(record, key, None)
            if value:
                payload[key] = value

        if record.exc_info:
            payload["exc_type"] = record.exc_info[0].__name__
            payload["exc"] = "".join(traceback.format_exception(*record.exc_info)).rstrip()

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or value is None:
                continue
            payload[key] = "[redacted]" if key.lower() in _REDACTED_KEYS else value

        return json.dumps(payload, default=str)


def configure_logging(*, default_level: str = "INFO") -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return

    level = os.getenv("LOG_LEVEL", default_level).upper()
    log_format = os.getenv("LOG_FORMAT", "json").lower()

    handler: logging.Handler = logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s %(message)s"))
    handler.addFilter(RequestContextFilter())

    base = logging.getLogger("campustune_api")
    base.setLevel(level)
    base.propagate = False
    if not base.handlers:
        base.addHandler(handler)

    _CONFIGURED = True


def access_log(event: dict[str, object]) -> None:
    logging.getLogger("campustune_api.access").info("http_request", extra=event)
