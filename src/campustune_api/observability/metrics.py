from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.responses import Response

operation_total = Counter(
    "ct_operation_total",
    "Count of critical operations.",
    labelnames=("operation", "outcome", "error_code"),
)
operation_duration_seconds = Histogram(
    "ct_operation_duration_seconds",
    "Duration of critical operations in seconds.",
    labelnames=("operation", "outcome"),
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

webhook_event_total = Counter(
    "ct_webhook_event_total",
    "Payment webhook events by type and disposition.",
    labelnames=("event_type", "outcome"),
)

tip_settlement_total = Counter(
    "ct_tip_settlement_total",
    "Tip settlement attempts by outcome.",
    labelnames=("outcome",),
)

tip_settled_amount_cents_total = Counter(
    "ct_tip_settled_amount_cents_total",
    "Sum of newly settled tip amounts, in minor currency units.",
)


def render_metrics() -> Response:
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
