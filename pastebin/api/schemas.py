from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from pastebin.domain.models import PasteView
from pastebin.services.paste_service import MAX_VIEWS_LIMIT


class PasteCreateRequest(BaseModel):
    content: str = Field(..., description="Paste content")
    ttl_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Optional time-to-live in seconds (> 0)",
    )
    max_views: Optional[int] = Field(
        default=None,
        ge=1,
        le=MAX_VIEWS_LIMIT,
        description="Optional maximum number of views (1 to MAX_VIEWS_LIMIT)",
    )

    @field_validator("ttl_seconds", "max_views", mode="before")
    @classmethod
    def blank_as_missing(cls, value: Any) -> Any:
        # HTML forms submit untouched number inputs as empty strings.
        if isinstance(value, str) and not value.strip():
            return None
        return value


class PasteCreateResponse(BaseModel):
    id: str
    url: str


class PasteFetchResponse(BaseModel):
    content: str
    remaining_views: Optional[int]
    expires_at: Optional[datetime]

    @classmethod
    def from_view(cls, view: PasteView) -> "PasteFetchResponse":
        return cls(
            content=view.content,
            remaining_views=view.remaining_views,
            expires_at=view.expires_at,
        )


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class HealthResponse(BaseModel):
    ok: bool = True
