from __future__ import annotations

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager

request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
payment_event_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "payment_event_id", default=None
)


def get_request_id() -> str | None:
    return request_id_var.get()


def get_payment_event_id() -> str | None:
    return payment_event_id_var.get()


@contextmanager
def bind_payment_event(event_id: str | None) -> Iterator[None]:
    """Tag every log line emitted inside the block with the provider event id."""
    token = payment_event_id_var.set(event_id)
    try:
        yield
    finally:
        payment_event_id_var.reset(token)
