from __future__ import annotations

import re
import time
import uuid
from collections.abc import Awaitable, Callable

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from campustune_api.observability.context import request_id_var
from campustune_api.observability.tracing import tracing_enabled

_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.:-]{0,127}$")


def _header(scope: Scope, name: bytes) -> str | None:
    for key, value in scope.get("headers") or []:
        if key == name:
            return value.decode("latin-1").strip()
    return None


def _extract_request_id(scope: Scope, header_name: bytes) -> str | None:
    value = _header(scope, header_name)
    if value and _REQUEST_ID_RE.fullmatch(value):
        return value
    return None


class RequestContextMiddleware:
    """Assigns a request id, echoes it on the response, and writes one access log line.

    Payment providers retry on any 5xx, so the access log records whether the
    inbound request carried a webhook signature without recording its value.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        header_name: str = "x-request-id",
        access_log: Callable[[dict[str, object]], None] | None = None,
    ) -> None:
        self._app = app
        self._header_name = header_name.lower().encode("ascii")
        self._access_log = access_log

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self._app(scope, receive, send)
            return

        request_id = _extract_request_id(scope, self._header_name) or str(uuid.uuid4())
        token = request_id_var.set(request_id)
        start = time.perf_counter()
        status_code: int | None = None

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = int(message["status"])
                headers = list(message.get("headers") or [])
                headers.append((self._header_name, request_id.encode("ascii")))
                message["headers"] = headers
            await send(message)

        async def call_next() -> None:
            await self._app(scope, receive, send_wrapper)

        try:
            if tracing_enabled():
                await _call_with_span(scope, request_id, call_next, lambda: status_code)
            else:
                await call_next()
        finally:
            if self._access_log is not None:
                self._access_log(
                    {
                        "request_id": request_id,
                        "method": scope.get("method"),
                        "path": scope.get("path"),
                        "status_code": status_code,
                        "duration_ms": (time.perf_counter() - start) * 1000.0,
                        "client": (scope.get("client") or [None, None])[0],
                        "signed": _header(scope, b"stripe-signature") is not None,
                    }
                )
            request_id_var.reset(token)


async def _call_with_span(
    scope: Scope,
    request_id: str,
    call_next: Callable[[], Awaitable[None]],
    get_status_code: Callable[[], int | None],
) -> None:
    from opentelemetry import trace
    from opentelemetry.propagate import extract
    from opentelemetry.trace import SpanKind
    from opentelemetry.trace.status import Status, StatusCode

    carrier = {
        key.decode("latin-1"): value.decode("latin-1")
        for key, value in (scope.get("headers") or [])
    }
    method = scope.get("method") or "UNKNOWN"
    path = scope.get("path") or ""
    tracer = trace.get_tracer("campustune_api")
    with tracer.start_as_current_span(
        name=f"{method} {path}",
        context=extract(carrier),
        kind=SpanKind.SERVER,
        attributes={"http.method": method, "http.target": path, "request.id": request_id},
    ) as span:
        try:
            await call_next()
        except Exception as exc:  # noqa: BLE001
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR))
            raise
        finally:
            status_code = get_status_code()
            if status_code is not None:
                span.set_attribute("http.status_code", status_code)
                span.set_status(
                    Status(StatusCode.ERROR if status_code >= 500 else StatusCode.OK)
                )
