from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """Source of the current instant. Inject a fixed clock in tests."""

    def now(self) -> datetime: ...


class SystemClock:
    """Default wall-clock implementation (UTC)."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


@dataclass(frozen=True)
class FixedClock:
    """Clock that always returns the same instant."""

    fixed_time: datetime

    def now(self) -> datetime:
        return ensure_utc(self.fixed_time)

    @classmethod
    def from_epoch_ms(cls, millis: int) -> "FixedClock":
        return cls(datetime.fromtimestamp(millis / 1000, tz=timezone.utc))


def ensure_utc(value: datetime) -> datetime:
    """Normalize a datetime to UTC, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
