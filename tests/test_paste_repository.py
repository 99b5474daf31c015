from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from pastebin.domain.errors import StorageError
from pastebin.domain.models import DecrementStatus, Paste
from pastebin.repositories.base import PasteStore
from pastebin.repositories.paste_repository import SqlAlchemyPasteStore


def _paste(t0: datetime, paste_id: str = "p1", **overrides) -> Paste:
    fields = {"id": paste_id, "content": "stored text", "created_at": t0}
    fields.update(overrides)
    return Paste(**fields)


# ---------------------------------------------------------------------------
# Contract shared by every backend.
# ---------------------------------------------------------------------------


def test_insert_and_find(store: PasteStore, t0: datetime) -> None:
    paste = _paste(t0, expires_at=t0 + timedelta(minutes=5), max_views=3, remaining_views=3)
    store.insert(paste)

    assert store.find_by_id("p1") == paste
    assert store.find_by_id("missing") is None


def test_duplicate_id_is_storage_error(store: PasteStore, t0: datetime) -> None:
    store.insert(_paste(t0))
    with pytest.raises(StorageError):
        store.insert(_paste(t0))


def test_guarded_decrement_stops_at_zero(store: PasteStore, t0: datetime) -> None:
    store.insert(_paste(t0, max_views=2, remaining_views=2))

    first = store.decrement_remaining_views("p1", t0)
    second = store.decrement_remaining_views("p1", t0)
    third = store.decrement_remaining_views("p1", t0)

    assert (first.status, first.remaining_views) == (DecrementStatus.APPLIED, 1)
    assert (second.status, second.remaining_views) == (DecrementStatus.APPLIED, 0)
    assert third.status is DecrementStatus.GUARD_FAILED
    assert store.find_by_id("p1").remaining_views == 0


def test_decrement_rechecks_expiry(store: PasteStore, t0: datetime) -> None:
    store.insert(_paste(t0, expires_at=t0 + timedelta(seconds=10), max_views=5, remaining_views=5))

    at_boundary = store.decrement_remaining_views("p1", t0 + timedelta(seconds=10))
    too_late = store.decrement_remaining_views("p1", t0 + timedelta(seconds=10, milliseconds=1))

    assert at_boundary.status is DecrementStatus.APPLIED
    assert too_late.status is DecrementStatus.GUARD_FAILED
    assert store.find_by_id("p1").remaining_views == 4


def test_decrement_without_view_budget_is_guard_failure(store: PasteStore, t0: datetime) -> None:
    store.insert(_paste(t0))
    assert store.decrement_remaining_views("p1", t0).status is DecrementStatus.GUARD_FAILED


def test_decrement_missing_paste(store: PasteStore, t0: datetime) -> None:
    assert store.decrement_remaining_views("nope", t0).status is DecrementStatus.NOT_FOUND


def test_purge_removes_only_unavailable(store: PasteStore, t0: datetime) -> None:
    store.insert(_paste(t0, "expired", expires_at=t0 - timedelta(seconds=1)))
    store.insert(_paste(t0, "exhausted", max_views=1, remaining_views=0))
    store.insert(_paste(t0, "boundary", expires_at=t0))
    store.insert(_paste(t0, "live", max_views=1, remaining_views=1))
    store.insert(_paste(t0, "forever"))

    assert store.purge_unavailable(t0) == 2
    assert store.find_by_id("expired") is None
    assert store.find_by_id("exhausted") is None
    for kept in ("boundary", "live", "forever"):
        assert store.find_by_id(kept) is not None


def test_ping(store: PasteStore) -> None:
    assert store.ping() is True


# ---------------------------------------------------------------------------
# Relational backend failure handling.
# ---------------------------------------------------------------------------


class _BrokenSession:
    def __init__(self) -> None:
        self.rolled_back = False
        self.closed = False

    def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    def add(self, *args, **kwargs) -> None:
        pass

    def flush(self) -> None:
        raise OperationalError("INSERT", {}, Exception("connection refused"))

    def commit(self) -> None:  # pragma: no cover - never reached
        raise AssertionError("commit after failure")

    def rollback(self) -> None:
        self.rolled_back = True

    def close(self) -> None:
        self.closed = True


def test_backend_errors_surface_as_storage_error(t0: datetime) -> None:
    sessions: list[_BrokenSession] = []

    def factory() -> _BrokenSession:
        session = _BrokenSession()
        sessions.append(session)
        return session

    store = SqlAlchemyPasteStore(session_factory=factory)  # type: ignore[arg-type]

    with pytest.raises(StorageError):
        store.insert(_paste(t0))
    with pytest.raises(StorageError):
        store.find_by_id("p1")
    with pytest.raises(StorageError):
        store.decrement_remaining_views("p1", t0)
    assert store.ping() is False

    assert all(s.rolled_back and s.closed for s in sessions)
