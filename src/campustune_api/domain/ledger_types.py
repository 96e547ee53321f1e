from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

PAYMENT_METHOD_STRIPE = "stripe"

# Width of supports.message; longer supporter messages cannot be stored.
SUPPORT_MESSAGE_MAX_LENGTH = 500


class SupportStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class TipPayment:
    """A tip ready for settlement, keyed by the provider's checkout session id."""

    transaction_id: str
    artist_id: str
    supporter_id: str
    amount: int
    message: str | None = None


def format_minor_units(amount: int) -> str:
    sign = "-" if amount < 0 else ""
    whole, cents = divmod(abs(amount), 100)
    return f"{sign}${whole}.{cents:02d}"
