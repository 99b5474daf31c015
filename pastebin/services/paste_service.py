from __future__ import annotations

import logging
import math
import secrets
from dataclasses import dataclass, field
from datetime import timedelta
from numbers import Real
from typing import Any, NoReturn, Optional

from pastebin.domain.availability import unavailability_reason
from pastebin.domain.clock import Clock, SystemClock
from pastebin.domain.errors import InvalidPasteParameters, PasteNotFoundError
from pastebin.domain.models import (
    UNAVAILABLE,
    DecrementStatus,
    Paste,
    PasteView,
    Unavailable,
)
from pastebin.observability import get_correlation_id
from pastebin.repositories.base import PasteStore


logger = logging.getLogger(__name__)

# 64 random bits, rendered as 16 hex characters.
PASTE_ID_BYTES = 8

# Upper bound of the INTEGER column holding the view budget.
MAX_VIEWS_LIMIT = 2**31 - 1


def generate_paste_id() -> str:
    return secrets.token_hex(PASTE_ID_BYTES)


def _is_view_budget(value: Any) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and 0 < value <= MAX_VIEWS_LIMIT
    )


def _is_positive_number(value: Any) -> bool:
    return (
        isinstance(value, Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value > 0
    )


@dataclass
class PasteService:
    """
    Expiry and view-accounting engine.

    Holds no mutable state of its own: every decision is made against the
    injected ``store`` and ``clock``, so one instance may serve many
    concurrent callers. Returns domain dataclasses; serialization belongs to
    the boundary layer.
    """

    store: PasteStore
    clock: Clock = field(default_factory=SystemClock)

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------
    def create(
        self,
        content: Optional[str],
        ttl_seconds: Optional[float] = None,
        max_views: Optional[int] = None,
    ) -> Paste:
        """
        Create a new paste enforcing business rules:

        - ``content`` must be a non-empty string
        - ``ttl_seconds`` (if provided) must be a positive number whose expiry
          is a representable datetime
        - ``max_views`` (if provided) must be a positive integer that fits
          the storage column (``MAX_VIEWS_LIMIT``)

        Invalid input raises ``InvalidPasteParameters`` before anything is
        written. Storage failures surface as ``StorageError``.
        """
        if not isinstance(content, str) or content == "":
            self._reject("content must be a non-empty string.")
        if ttl_seconds is not None and not _is_positive_number(ttl_seconds):
            self._reject("ttl_seconds must be a positive number.")
        if max_views is not None and not _is_view_budget(max_views):
            self._reject(
                f"max_views must be a positive integer no greater than {MAX_VIEWS_LIMIT}."
            )

        created_at = self.clock.now()
        expires_at = None
        if ttl_seconds is not None:
            try:
                expires_at = created_at + timedelta(seconds=ttl_seconds)
            except OverflowError:
                self._reject("ttl_seconds is out of range.")

        paste = Paste(
            id=generate_paste_id(),
            content=content,
            created_at=created_at,
            expires_at=expires_at,
            max_views=max_views,
            remaining_views=max_views,
        )
        self.store.insert(paste)

        logger.info(
            "Paste created",
            extra={
                "event": "paste_created",
                "paste_id": paste.id,
                "correlation_id": get_correlation_id(),
            },
        )
        return paste

    # -------------------------------------------------------------------------
    # Retrieval
    # -------------------------------------------------------------------------
    def fetch(self, paste_id: str) -> PasteView | Unavailable:
        """
        Fetch a paste, consuming one view if it has a view budget.

        Missing, expired and exhausted pastes all yield ``UNAVAILABLE``.
        ``remaining_views`` in the result is the post-decrement value.
        """
        logger.info(
            "Paste access attempt",
            extra={
                "event": "paste_access_attempt",
                "paste_id": paste_id,
                "correlation_id": get_correlation_id(),
            },
        )

        try:
            paste = self._load(paste_id)
        except PasteNotFoundError:
            return self._unavailable(paste_id, "not_found")

        now = self.clock.now()
        reason = unavailability_reason(paste, now)
        if reason is not None:
            return self._unavailable(paste_id, reason)

        remaining_views: Optional[int] = None
        if paste.has_view_budget:
            # Re-checks both expiry axes at ``now`` in the same step as the
            # decrement.
            result = self.store.decrement_remaining_views(paste_id, now)
            if result.status is DecrementStatus.NOT_FOUND:
                return self._unavailable(paste_id, "not_found")
            if result.status is DecrementStatus.GUARD_FAILED:
                return self._unavailable(paste_id, "guard_failed")
            remaining_views = result.remaining_views

        logger.info(
            "Paste access successful",
            extra={
                "event": "paste_access_success",
                "paste_id": paste_id,
                "remaining_views": remaining_views,
                "correlation_id": get_correlation_id(),
            },
        )
        return PasteView(
            content=paste.content,
            remaining_views=remaining_views,
            expires_at=paste.expires_at,
        )

    def _load(self, paste_id: str) -> Paste:
        paste = self.store.find_by_id(paste_id)
        if paste is None:
            raise PasteNotFoundError(f"Paste with id {paste_id} not found.")
        return paste

    def _unavailable(self, paste_id: str, reason: str) -> Unavailable:
        logger.info(
            "Paste unavailable",
            extra={
                "event": "paste_unavailable",
                "paste_id": paste_id,
                "reason": reason,
                "correlation_id": get_correlation_id(),
            },
        )
        return UNAVAILABLE

    def _reject(self, message: str) -> NoReturn:
        logger.warning(
            "Invalid parameters when creating paste",
            extra={
                "event": "paste_create_invalid_parameters",
                "correlation_id": get_correlation_id(),
            },
        )
        raise InvalidPasteParameters(message)
