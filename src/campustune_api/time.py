from __future__ import annotations

import datetime as dt
from typing import Callable


UtcNow = Callable[[], dt.datetime]


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


def get_utcnow() -> UtcNow:
    return utcnow


def fixed_clock(at: dt.datetime) -> UtcNow:
    if at.tzinfo is None:
        raise ValueError("fixed_clock requires a timezone-aware datetime")
    return lambda: at
