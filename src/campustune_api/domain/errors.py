from __future__ import annotations

from dataclasses import dataclass
from typing import Any


# Not frozen: contextlib assigns __traceback__ on exceptions re-raised through
# context managers such as observe_operation.
@dataclass(eq=False)
class AppError(Exception):
    code: str
    message: str
    status_code: int = 400
    details: dict[str, Any] | None = None

    @property
    def retryable(self) -> bool:
        """Whether a webhook sender should redeliver after this error."""
        return self.status_code >= 500
