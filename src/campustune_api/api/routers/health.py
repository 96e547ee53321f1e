from __future__ import annotations

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from campustune_api.api.schemas import HealthResponse
from campustune_api.db.session import DbSessionDep
from campustune_api.domain.errors import AppError

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


@router.get("/health/ready", response_model=HealthResponse)
async def ready(db: DbSessionDep) -> HealthResponse:
    """Report ready only when the ledger database answers."""
    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        raise AppError(
            code="database_unavailable",
            message="Ledger database is unavailable",
            status_code=503,
        ) from exc
    return HealthResponse()
