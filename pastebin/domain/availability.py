from __future__ import annotations

from datetime import datetime
from typing import Optional

from .clock import ensure_utc
from .models import Paste


REASON_EXPIRED = "expired"
REASON_EXHAUSTED = "exhausted"


def unavailability_reason(paste: Paste, now: datetime) -> Optional[str]:
    """
    Return why ``paste`` cannot be served at ``now``, or ``None`` if it can.

    - Time expiry is exclusive of the boundary: ``now == expires_at`` is
      still available, anything strictly later is not.
    - A paste with a view budget and ``remaining_views <= 0`` is exhausted.
    """

    if paste.expires_at is not None and ensure_utc(now) > ensure_utc(paste.expires_at):
        return REASON_EXPIRED

    if paste.max_views is not None and (paste.remaining_views or 0) <= 0:
        return REASON_EXHAUSTED

    return None


def is_available(paste: Paste, now: datetime) -> bool:
    return unavailability_reason(paste, now) is None
