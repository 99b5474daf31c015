from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Paste:
    """
    A stored text snippet.

    ``remaining_views`` is present iff ``max_views`` is present. Instances are
    snapshots: the stores hand out fresh copies and the engine never mutates
    them.
    """

    id: str
    content: str
    created_at: datetime
    expires_at: Optional[datetime] = None
    max_views: Optional[int] = None
    remaining_views: Optional[int] = None

    @property
    def has_view_budget(self) -> bool:
        return self.max_views is not None


@dataclass(frozen=True)
class PasteView:
    """Result of a successful fetch."""

    content: str
    remaining_views: Optional[int]
    expires_at: Optional[datetime]


class Unavailable:
    """Outcome of a fetch for a paste that is missing, expired or exhausted."""

    _instance: Optional["Unavailable"] = None

    def __new__(cls) -> "Unavailable":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNAVAILABLE"


UNAVAILABLE = Unavailable()


class DecrementStatus(str, enum.Enum):
    APPLIED = "APPLIED"
    GUARD_FAILED = "GUARD_FAILED"
    NOT_FOUND = "NOT_FOUND"


@dataclass(frozen=True)
class DecrementResult:
    """Outcome of a guarded view decrement."""

    status: DecrementStatus
    remaining_views: Optional[int] = None

    @classmethod
    def applied(cls, remaining_views: int) -> "DecrementResult":
        return cls(DecrementStatus.APPLIED, remaining_views)

    @classmethod
    def guard_failed(cls) -> "DecrementResult":
        return cls(DecrementStatus.GUARD_FAILED)

    @classmethod
    def not_found(cls) -> "DecrementResult":
        return cls(DecrementStatus.NOT_FOUND)
