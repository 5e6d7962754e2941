"""Structured telemetry events for insight generation and profile updates."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import RLock
from typing import Any, Callable, Dict, List

logger = logging.getLogger("career_coach.telemetry")

Listener = Callable[["TelemetryEvent"], None]


@dataclass(frozen=True)
class TelemetryEvent:
    name: str
    payload: Dict[str, Any]
    emitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_log_record(self) -> str:
        return json.dumps(
            {"event": self.name, "emitted_at": self.emitted_at.isoformat(), **self.payload},
            default=str,
            sort_keys=True,
        )


class TelemetryHub:
    """Fans events out to in-process listeners, then logs them as JSON."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []
        self._lock = RLock()

    def register(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def clear(self) -> None:
        with self._lock:
            self._listeners.clear()

    def emit(self, name: str, fields: Dict[str, Any]) -> TelemetryEvent:
        event = TelemetryEvent(
            name=name,
            payload={key: value.isoformat() if isinstance(value, datetime) else value for key, value in fields.items()},
        )
        with self._lock:
            listeners = tuple(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:  # noqa: BLE001
                logger.exception("Telemetry listener failed for %s", name)
        logger.info("TELEMETRY %s", event.as_log_record())
        return event


hub = TelemetryHub()


def register_listener(listener: Listener) -> None:
    """Subscribe to every emitted event (tests use this to assert on events)."""
    hub.register(listener)


def clear_listeners() -> None:
    hub.clear()


def emit_event(name: str, **fields: Any) -> None:
    hub.emit(name, fields)


__all__ = [
    "TelemetryEvent",
    "TelemetryHub",
    "clear_listeners",
    "emit_event",
    "hub",
    "register_listener",
]
