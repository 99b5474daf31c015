from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import Select, Update, delete, or_, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pastebin.domain.errors import StorageError
from pastebin.domain.models import DecrementResult, Paste
from pastebin.observability import get_correlation_id
from pastebin.repositories.base import PasteStore
from pastebin.repositories.records import PasteRecord


logger = logging.getLogger(__name__)


class SqlAlchemyPasteStore(PasteStore):
    """
    Relational paste store.

    Owns session lifecycle: creates a session per operation, commits on
    success, rolls back on exception, and closes the session in a finally
    block. Returns ``Paste`` snapshots; no ORM entities escape this layer.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.warning(
                "Paste store operation failed",
                extra={
                    "event": "paste_storage_error",
                    "error_type": type(exc).__name__,
                    "correlation_id": get_correlation_id(),
                },
            )
            raise StorageError(f"Paste store {operation} failed: {exc}") from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def insert(self, paste: Paste) -> None:
        with self._session("insert") as session:
            session.add(PasteRecord.from_paste(paste))
            session.flush()

    def find_by_id(self, paste_id: str) -> Paste | None:
        with self._session("lookup") as session:
            stmt: Select[tuple[PasteRecord]] = select(PasteRecord).where(
                PasteRecord.id == paste_id
            )
            record = session.execute(stmt).scalar_one_or_none()
            return record.to_paste() if record is not None else None

    def decrement_remaining_views(self, paste_id: str, now: datetime) -> DecrementResult:
        """
        Atomically consume one view.

        A single guarded ``UPDATE ... RETURNING`` closes the race between
        concurrent readers: the row only matches while views remain and the
        paste is unexpired at ``now``.
        """

        with self._session("decrement") as session:
            stmt: Update = (
                update(PasteRecord)
                .where(
                    PasteRecord.id == paste_id,
                    PasteRecord.remaining_views > 0,
                    or_(
                        PasteRecord.expires_at.is_(None),
                        PasteRecord.expires_at >= now,
                    ),
                )
                .values(remaining_views=PasteRecord.remaining_views - 1)
                .returning(PasteRecord.remaining_views)
                .execution_options(synchronize_session=False)
            )
            row = session.execute(stmt).one_or_none()
            if row is not None:
                (new_value,) = row
                return DecrementResult.applied(int(new_value))

            exists = session.execute(
                select(PasteRecord.id).where(PasteRecord.id == paste_id)
            ).first()
            if exists is None:
                return DecrementResult.not_found()
            return DecrementResult.guard_failed()

    def purge_unavailable(self, now: datetime) -> int:
        with self._session("purge") as session:
            stmt = (
                delete(PasteRecord)
                .where(
                    or_(
                        PasteRecord.expires_at < now,
                        PasteRecord.remaining_views <= 0,
                    )
                )
                .execution_options(synchronize_session=False)
            )
            result = session.execute(stmt)
            return int(result.rowcount or 0)

    def ping(self) -> bool:
        try:
            with self._session("ping") as session:
                session.execute(text("SELECT 1"))
        except StorageError:
            return False
        return True
