from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from pastebin.db import Base
from pastebin.domain.clock import ensure_utc
from pastebin.domain.models import Paste


class PasteRecord(Base):
    """Paste row persisted via SQLAlchemy."""

    __tablename__ = "pastes"
    __table_args__ = (
        CheckConstraint("max_views >= 1", name="ck_pastes_max_views_min_1"),
        CheckConstraint(
            "remaining_views >= 0",
            name="ck_pastes_remaining_views_non_negative",
        ),
        CheckConstraint(
            "remaining_views <= max_views",
            name="ck_pastes_remaining_views_le_max_views",
        ),
        CheckConstraint(
            "(max_views IS NULL) = (remaining_views IS NULL)",
            name="ck_pastes_view_budget_paired",
        ),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    max_views: Mapped[int | None] = mapped_column(Integer, nullable=True)
    remaining_views: Mapped[int | None] = mapped_column(Integer, nullable=True)

    @validates("content")
    def _validate_immutable_content(self, key: str, value: str) -> str:
        """
        Enforce that ``content`` is immutable after initial creation.

        The value can be set on new instances, but any subsequent attempt to
        change it will raise an error.
        """

        if getattr(self, "content", None) is not None and self.content != value:
            raise ValueError("Paste content is immutable and cannot be modified.")
        return value

    @classmethod
    def from_paste(cls, paste: Paste) -> "PasteRecord":
        return cls(
            id=paste.id,
            content=paste.content,
            created_at=paste.created_at,
            expires_at=paste.expires_at,
            max_views=paste.max_views,
            remaining_views=paste.remaining_views,
        )

    def to_paste(self) -> Paste:
        # SQLite hands back naive datetimes; stored values are always UTC.
        return Paste(
            id=self.id,
            content=self.content,
            created_at=ensure_utc(self.created_at),
            expires_at=ensure_utc(self.expires_at) if self.expires_at is not None else None,
            max_views=self.max_views,
            remaining_views=self.remaining_views,
        )
