from __future__ import annotations

import logging
import threading

from flask import Flask

from pastebin.domain.clock import Clock, SystemClock
from pastebin.domain.errors import StorageError
from pastebin.repositories.base import STORE_EXTENSION_KEY, PasteStore


logger = logging.getLogger(__name__)

WORKER_CORRELATION_ID = "purge-worker"

_worker_started = False
_worker_lock = threading.Lock()


def purge_once(store: PasteStore, clock: Clock) -> int:
    """Delete every paste that can no longer be served; return the count."""

    purged = store.purge_unavailable(clock.now())
    logger.info(
        "Purge worker: removed unavailable pastes",
        extra={
            "event": "purge_worker_cycle",
            "purged": purged,
            "correlation_id": WORKER_CORRELATION_ID,
        },
    )
    return purged


def _purge_loop(store: PasteStore, interval: float, stop: threading.Event) -> None:
    """Background loop that periodically purges unavailable pastes."""

    clock = SystemClock()
    while not stop.wait(interval):
        try:
            purge_once(store, clock)
        except StorageError:
            logger.warning(
                "Purge worker: store unavailable; skipping cycle",
                extra={
                    "event": "purge_worker_error",
                    "correlation_id": WORKER_CORRELATION_ID,
                },
            )
        except Exception:  # pragma: no cover - keep the thread alive
            logger.exception(
                "Error in purge worker loop",
                extra={
                    "event": "purge_worker_error",
                    "correlation_id": WORKER_CORRELATION_ID,
                },
            )


def start_purge_worker(app: Flask) -> threading.Event | None:
    """
    Start the purge worker in a background thread.

    This function is idempotent and will only start a single worker thread.
    Returns the event that stops the loop, or ``None`` when nothing started.
    """

    global _worker_started
    interval = float(app.config.get("PURGE_INTERVAL_SECONDS", 0) or 0)
    if interval <= 0:
        return None

    with _worker_lock:
        if _worker_started:
            return None

        stop = threading.Event()
        thread = threading.Thread(
            target=_purge_loop,
            args=(app.extensions[STORE_EXTENSION_KEY], interval, stop),
            name="purge-worker",
            daemon=True,
        )
        thread.start()
        _worker_started = True
        return stop
