"""Apply a verified tip to the support ledger and the artist's wallet exactly once.

The pre-check on the transaction id is only an optimization. Two deliveries of
the same checkout session can both pass it; the unique constraint on
``supports.transaction_id`` then rejects the later insert and that attempt is
reported as a duplicate. No application lock is taken.
"""

from __future__ import annotations

import datetime as dt
import logging
import uuid
from dataclasses import dataclass
from enum import StrEnum

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campustune_api.domain import ledger
from campustune_api.domain.errors import AppError
from campustune_api.domain.ledger_types import TipPayment
from campustune_api.observability import metrics
from campustune_api.observability.ops import observe_operation

logger = logging.getLogger(__name__)


class SettlementOutcome(StrEnum):
    SETTLED = "settled"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class SettlementResult:
    outcome: SettlementOutcome
    transaction_id: str
    support_id: uuid.UUID | None = None


def _validate_tip(tip: TipPayment) -> None:
    if isinstance(tip.amount, bool) or not isinstance(tip.amount, int) or tip.amount <= 0:
        raise AppError(
            code="invalid_tip_amount",
            message="Tip amount must be a positive integer",
            status_code=400,
            details={"amount": tip.amount},
        )
    missing = [
        name
        for name in ("transaction_id", "artist_id", "supporter_id")
        if not getattr(tip, name).strip()
    ]
    if missing:
        raise AppError(
            code="invalid_tip",
            message="Tip is missing required identifiers",
            status_code=400,
            details={"missing": missing},
        )


def _duplicate(tip: TipPayment, support_id: uuid.UUID | None, *, detected_by: str) -> SettlementResult:
    logger.info(
        "tip_settlement_duplicate",
        extra={
            "transaction_id": tip.transaction_id,
            "artist_id": tip.artist_id,
            "detected_by": detected_by,
        },
    )
    return SettlementResult(
        outcome=SettlementOutcome.DUPLICATE,
        transaction_id=tip.transaction_id,
        support_id=support_id,
    )


async def settle_tip(db: AsyncSession, tip: TipPayment, *, now: dt.datetime) -> SettlementResult:
    """Record ``tip`` once; replays of the same transaction id are successful no-ops.

    ``db`` must not have a transaction in progress. Storage failures roll back
    both the support insert and the wallet credit and surface as a retryable
    ``ledger_unavailable`` error.
    """
    _validate_tip(tip)

    async with observe_operation(
        "tip_settlement",
        attributes={"tip.transaction_id": tip.transaction_id, "tip.artist_id": tip.artist_id},
    ):
        try:
            async with db.begin():
                existing_id = await ledger.find_support_by_transaction_id(db, tip.transaction_id)
                if existing_id is not None:
                    result = _duplicate(tip, existing_id, detected_by="precheck")
                else:
                    support = await ledger.insert_support(db, tip=tip, now=now)
                    await ledger.credit_wallet(
                        db, artist_id=tip.artist_id, amount=tip.amount, now=now
                    )
                    result = SettlementResult(
                        outcome=SettlementOutcome.SETTLED,
                        transaction_id=tip.transaction_id,
                        support_id=support.id,
                    )
        except IntegrityError as exc:
            if not ledger.is_transaction_id_conflict(exc):
                logger.error(
                    "tip_settlement_rejected",
                    exc_info=exc,
                    extra={"transaction_id": tip.transaction_id, "artist_id": tip.artist_id},
                )
                raise AppError(
                    code="ledger_integrity_error",
                    message="Ledger rejected the settlement",
                    status_code=500,
                    details={"transaction_id": tip.transaction_id},
                ) from exc
            result = _duplicate(tip, None, detected_by="constraint")
        except (SQLAlchemyError, OSError) as exc:
            logger.warning(
                "tip_settlement_failed",
                exc_info=exc,
                extra={"transaction_id": tip.transaction_id, "artist_id": tip.artist_id},
            )
            raise AppError(
                code="ledger_unavailable",
                message="Ledger is temporarily unavailable",
                status_code=503,
                details={"transaction_id": tip.transaction_id},
            ) from exc

    metrics.tip_settlement_total.labels(outcome=result.outcome.value).inc()
    if result.outcome is SettlementOutcome.SETTLED:
        metrics.tip_settled_amount_cents_total.inc(tip.amount)
        logger.info(
            "tip_settled",
            extra={
                "transaction_id": tip.transaction_id,
                "artist_id": tip.artist_id,
                "supporter_id": tip.supporter_id,
                "amount": tip.amount,
                "support_id": str(result.support_id),
            },
        )
    return result
