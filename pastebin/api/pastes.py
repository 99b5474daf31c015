from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, render_template, request
from pydantic import ValidationError

from pastebin.api.schemas import (
    ErrorResponse,
    HealthResponse,
    PasteCreateRequest,
    PasteCreateResponse,
    PasteFetchResponse,
)
from pastebin.domain.clock import Clock, FixedClock, SystemClock
from pastebin.domain.errors import InvalidPasteParameters, StorageError
from pastebin.domain.models import Paste, PasteView
from pastebin.repositories.base import STORE_EXTENSION_KEY, PasteStore
from pastebin.services.paste_service import PasteService

api_bp = Blueprint("api", __name__)

TEST_NOW_HEADER = "X-Test-Now-Ms"


def _store() -> PasteStore:
    return current_app.extensions[STORE_EXTENSION_KEY]


def _request_clock() -> Clock:
    """
    Clock for the current request.

    With ``TEST_MODE`` on, a valid ``X-Test-Now-Ms`` header pins "now" to that
    many milliseconds since the Unix epoch. Anything else reads wall time.
    """
    if current_app.config.get("TEST_MODE", False):
        raw = request.headers.get(TEST_NOW_HEADER)
        if raw:
            try:
                return FixedClock.from_epoch_ms(int(raw))
            except (ValueError, OverflowError, OSError):
                pass
    return SystemClock()


def _paste_service() -> PasteService:
    return PasteService(store=_store(), clock=_request_clock())


def _share_url(paste_id: str) -> str:
    base_url = current_app.config.get("BASE_URL") or request.host_url
    return f"{base_url.rstrip('/')}/p/{paste_id}"


def _create_from(data: dict) -> Paste:
    payload = PasteCreateRequest.model_validate(data)
    return _paste_service().create(
        payload.content,
        ttl_seconds=payload.ttl_seconds,
        max_views=payload.max_views,
    )


def _error(message: str, status: HTTPStatus, details: str | None = None) -> tuple[dict, int]:
    return ErrorResponse(error=message, details=details).model_dump(exclude_none=True), status


@api_bp.route("/api/healthz", methods=["GET"])
def health() -> tuple[dict, int]:
    """Health check: reports whether the paste store answers."""

    ok = _store().ping()
    body = HealthResponse(ok=ok).model_dump()
    return body, HTTPStatus.OK if ok else HTTPStatus.SERVICE_UNAVAILABLE


@api_bp.route("/api/pastes", methods=["POST"])
def create_paste() -> tuple[dict, int]:
    """
    Create a new paste.

    Accepts a JSON body or form fields. Shape is checked by Pydantic; the
    engine enforces the business rules.
    """
    if request.is_json:
        data = request.get_json(silent=True) or {}
    else:
        data = request.form.to_dict()

    try:
        paste = _create_from(data)
    except ValidationError as exc:
        return _error("Invalid request body", HTTPStatus.BAD_REQUEST, str(exc))
    except InvalidPasteParameters as exc:
        return _error(str(exc), HTTPStatus.BAD_REQUEST)
    except StorageError:
        return _error("Storage unavailable", HTTPStatus.SERVICE_UNAVAILABLE)

    body = PasteCreateResponse(id=paste.id, url=_share_url(paste.id))
    return body.model_dump(), HTTPStatus.CREATED


@api_bp.route("/api/pastes/<paste_id>", methods=["GET"])
def fetch_paste(paste_id: str) -> tuple[dict, int]:
    """Fetch a paste as JSON. Each successful fetch counts as a view."""
    try:
        result = _paste_service().fetch(paste_id)
    except StorageError:
        return _error("Storage unavailable", HTTPStatus.SERVICE_UNAVAILABLE)

    if not isinstance(result, PasteView):
        return _error("Paste unavailable", HTTPStatus.NOT_FOUND)

    return PasteFetchResponse.from_view(result).model_dump(mode="json"), HTTPStatus.OK


@api_bp.route("/p/<paste_id>", methods=["GET"])
def view_paste(paste_id: str) -> tuple[str, int]:
    """Render a paste as an HTML document. Counts as a view, like the API."""
    try:
        result = _paste_service().fetch(paste_id)
    except StorageError:
        return render_template("unavailable.html", message="Storage unavailable"), HTTPStatus.SERVICE_UNAVAILABLE

    if not isinstance(result, PasteView):
        return render_template("unavailable.html", message="Paste unavailable"), HTTPStatus.NOT_FOUND

    return render_template("paste.html", paste_id=paste_id, view=result), HTTPStatus.OK


@api_bp.route("/", methods=["GET"])
def home() -> str:
    """Create-paste form."""
    return render_template("index.html")


@api_bp.route("/ui/create", methods=["POST"])
def create_paste_from_form() -> tuple[str, int]:
    """Create a paste from the home form and show its share link."""
    try:
        paste = _create_from(request.form.to_dict())
    except ValidationError:
        return render_template("created.html", error="Invalid request body"), HTTPStatus.BAD_REQUEST
    except InvalidPasteParameters as exc:
        return render_template("created.html", error=str(exc)), HTTPStatus.BAD_REQUEST
    except StorageError:
        return render_template("created.html", error="Storage unavailable"), HTTPStatus.SERVICE_UNAVAILABLE

    return render_template("created.html", share_url=_share_url(paste.id)), HTTPStatus.CREATED
