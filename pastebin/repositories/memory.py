"""In-process paste store for development and tests. Data is lost on exit."""

from __future__ import annotations

import dataclasses
import threading
from datetime import datetime

from pastebin.domain.availability import is_available
from pastebin.domain.errors import StorageError
from pastebin.domain.models import DecrementResult, Paste
from pastebin.repositories.base import PasteStore


class InMemoryPasteStore(PasteStore):
    """Dict-backed store; one lock serializes every mutation."""

    def __init__(self) -> None:
        self._pastes: dict[str, Paste] = {}
        self._lock = threading.Lock()

    def insert(self, paste: Paste) -> None:
        with self._lock:
            if paste.id in self._pastes:
                raise StorageError(f"Paste with id {paste.id} already exists.")
            self._pastes[paste.id] = paste

    def find_by_id(self, paste_id: str) -> Paste | None:
        with self._lock:
            return self._pastes.get(paste_id)

    def decrement_remaining_views(self, paste_id: str, now: datetime) -> DecrementResult:
        with self._lock:
            paste = self._pastes.get(paste_id)
            if paste is None:
                return DecrementResult.not_found()
            if paste.remaining_views is None or not is_available(paste, now):
                return DecrementResult.guard_failed()

            updated = dataclasses.replace(paste, remaining_views=paste.remaining_views - 1)
            self._pastes[paste_id] = updated
            return DecrementResult.applied(updated.remaining_views)

    def purge_unavailable(self, now: datetime) -> int:
        with self._lock:
            stale = [pid for pid, paste in self._pastes.items() if not is_available(paste, now)]
            for pid in stale:
                del self._pastes[pid]
            return len(stale)

    def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._pastes)
