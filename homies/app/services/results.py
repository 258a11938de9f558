"""
Outcome of a service operation that can be refused.

Joining, leaving and editing an event can fail because the event does
not exist, because the caller is not allowed to touch it, or because
the change was already made.  ``ServiceResult`` keeps those cases
apart so a caller can answer with the right status instead of a bare
``False``.  A result is truthy only when the operation succeeded.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class Outcome(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class ServiceResult:
    """Outcome plus an optional payload for successful operations."""

    outcome: Outcome
    value: Optional[Any] = None

    def __bool__(self) -> bool:
        return self.outcome is Outcome.OK

    @classmethod
    def ok(cls, value: Optional[Any] = None) -> "ServiceResult":
        return cls(Outcome.OK, value)

    @classmethod
    def not_found(cls) -> "ServiceResult":
        return cls(Outcome.NOT_FOUND)

    @classmethod
    def forbidden(cls) -> "ServiceResult":
        return cls(Outcome.FORBIDDEN)

    @classmethod
    def conflict(cls) -> "ServiceResult":
        return cls(Outcome.CONFLICT)
