"""Telemetry for playlist analysis, watch schedules and daily topic plans.

Events are fanned out to in-process listeners and written to the
``companion.telemetry`` logger as one ``TELEMETRY {json}`` line each.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from threading import RLock
from typing import Any, Callable, Dict, Iterator, List

from pydantic import BaseModel

logger = logging.getLogger("companion.telemetry")

PLAYLIST_ANALYZED = "playlist_analyzed"
WATCH_SCHEDULE_GENERATED = "watch_schedule_generated"
DAILY_TOPICS_PLANNED = "daily_topics_planned"


@dataclass(frozen=True)
class TelemetryEvent:
    name: str
    payload: Dict[str, Any]


Listener = Callable[[TelemetryEvent], None]

_listeners: List[Listener] = []
_lock = RLock()


def register_listener(listener: Listener) -> Callable[[], None]:
    """Register ``listener`` and return a callable that unregisters it."""
    with _lock:
        _listeners.append(listener)

    def _unregister() -> None:
        with _lock:
            if listener in _listeners:
                _listeners.remove(listener)

    return _unregister


def clear_listeners() -> None:
    with _lock:
        _listeners.clear()


@contextmanager
def capture_events(*names: str) -> Iterator[List[TelemetryEvent]]:
    """Collect events emitted inside the block, optionally filtered by name."""
    captured: List[TelemetryEvent] = []

    def _collect(event: TelemetryEvent) -> None:
        if not names or event.name in names:
            captured.append(event)

    unregister = register_listener(_collect)
    try:
        yield captured
    finally:
        unregister()


def emit_event(name: str, **fields: Any) -> None:
    payload = {key: _plain(value) for key, value in fields.items()}
    event = TelemetryEvent(name=name, payload=payload)

    with _lock:
        listeners = list(_listeners)

    for listener in listeners:
        try:
            listener(event)
        except Exception:  # noqa: BLE001
            logger.exception("Telemetry listener failed for %s", name)

    logger.info("TELEMETRY %s", json.dumps({"event": name, **payload}, default=str))


def _plain(value: Any) -> Any:
    # Dates (and datetimes) travel as ISO strings, models as JSON-ready dicts.
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return value


__all__ = [
    "DAILY_TOPICS_PLANNED",
    "PLAYLIST_ANALYZED",
    "TelemetryEvent",
    "WATCH_SCHEDULE_GENERATED",
    "capture_events",
    "clear_listeners",
    "emit_event",
    "register_listener",
]
