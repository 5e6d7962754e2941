"""Connection pool and transaction outcome counters for the database health check."""

from __future__ import annotations

import os
import time
from dataclasses import asdict, dataclass
from typing import Dict
from weakref import WeakKeyDictionary

from sqlalchemy import event
from sqlalchemy.engine import Engine

from ..telemetry import emit_event


@dataclass
class EngineCounters:
    connects: int = 0
    checkouts: int = 0
    commits: int = 0
    rollbacks: int = 0
    last_emit: float = 0.0


_COUNTERS: "WeakKeyDictionary[Engine, EngineCounters]" = WeakKeyDictionary()
_TELEMETRY_INTERVAL = float(os.getenv("CAREER_COACH_DB_TELEMETRY_INTERVAL", "30"))


def instrument_engine(engine: Engine) -> None:
    """Count pool and transaction events; emit a throttled ``db_pool_status`` event."""
    if engine in _COUNTERS:
        return
    counters = EngineCounters()
    _COUNTERS[engine] = counters

    def bump(attribute: str) -> None:
        setattr(counters, attribute, getattr(counters, attribute) + 1)
        now = time.monotonic()
        if _TELEMETRY_INTERVAL > 0 and counters.last_emit and now - counters.last_emit < _TELEMETRY_INTERVAL:
            return
        counters.last_emit = now
        emit_event("db_pool_status", trigger=attribute, **get_pool_snapshot(engine))

    event.listen(engine, "connect", lambda *_: bump("connects"))
    event.listen(engine, "checkout", lambda *_: bump("checkouts"))
    # Rollbacks include transactions cancelled by the profile update timeout.
    event.listen(engine, "commit", lambda *_: bump("commits"))
    event.listen(engine, "rollback", lambda *_: bump("rollbacks"))


def get_pool_snapshot(engine: Engine) -> Dict[str, object]:
    counters = _COUNTERS.get(engine) or EngineCounters()
    snapshot: Dict[str, object] = {key: value for key, value in asdict(counters).items() if key != "last_emit"}
    snapshot["status"] = _pool_status(engine)
    return snapshot


def _pool_status(engine: Engine) -> str:
    try:
        return engine.pool.status()  # type: ignore[no-untyped-call]
    except Exception as exc:  # pragma: no cover - pool implementations without status()
        return f"unavailable: {exc}"


__all__ = [
    "EngineCounters",
    "get_pool_snapshot",
    "instrument_engine",
]
