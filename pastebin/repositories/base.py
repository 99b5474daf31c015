"""Persistence contract the paste engine relies on."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from pastebin.domain.models import DecrementResult, Paste


# Key under which the app factory registers the store in ``app.extensions``.
STORE_EXTENSION_KEY = "pastebin.store"


class PasteStore(ABC):
    """Abstract base for paste storage backends.

    Every method is all-or-nothing. Backend failures are raised as
    ``StorageError``; nothing else leaks out of an implementation.
    """

    @abstractmethod
    def insert(self, paste: Paste) -> None:
        """Persist a new paste. An id collision is a ``StorageError``."""
        ...

    @abstractmethod
    def find_by_id(self, paste_id: str) -> Paste | None:
        """Return the paste, or ``None`` if not found."""
        ...

    @abstractmethod
    def decrement_remaining_views(self, paste_id: str, now: datetime) -> DecrementResult:
        """Consume one view in a single indivisible step.

        The decrement applies only when ``remaining_views > 0`` and the paste
        has not expired at ``now``. Returns the post-decrement value, or the
        reason nothing was applied.
        """
        ...

    @abstractmethod
    def purge_unavailable(self, now: datetime) -> int:
        """Delete pastes that can no longer be served; return how many."""
        ...

    @abstractmethod
    def ping(self) -> bool:
        """Return ``True`` if the backend is reachable."""
        ...
