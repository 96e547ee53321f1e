from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from campustune_api.domain.errors import AppError

logger = logging.getLogger(__name__)

_RETRY_AFTER_SECONDS = "30"


def _error_body(code: str, message: str, details: dict | None = None) -> dict:
    return {"error": {"code": code, "message": message, "details": details or {}}}


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        headers: dict[str, str] = {}
        if exc.retryable:
            logger.warning(
                "Retryable application error",
                extra={"code": exc.code, "path": request.url.path, "method": request.method},
            )
            if exc.status_code == status.HTTP_503_SERVICE_UNAVAILABLE:
                headers["Retry-After"] = _RETRY_AFTER_SECONDS
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message, exc.details),
            headers=headers or None,
        )

    @app.exception_handler(Exception)
    async def _handle_unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            extra={"path": request.url.path, "method": request.method},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("internal_server_error", "An internal server error occurred"),
        )
