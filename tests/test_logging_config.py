from __future__ import annotations

from career_coach.logging_config import build_logging_config


def test_level_defaults_to_environment(monkeypatch) -> None:
    monkeypatch.setenv("CAREER_COACH_LOG_LEVEL", "warning")
    monkeypatch.delenv("CAREER_COACH_TELEMETRY_LOG_LEVEL", raising=False)

    config = build_logging_config()

    assert config["root"]["level"] == "WARNING"
    assert config["loggers"]["career_coach.telemetry"]["level"] == "WARNING"


def test_debug_flags_raise_library_loggers(monkeypatch) -> None:
    monkeypatch.setenv("CAREER_COACH_DEBUG_SQL", "1")
    monkeypatch.delenv("CAREER_COACH_DEBUG_HTTP", raising=False)

    loggers = build_logging_config("info")["loggers"]

    assert loggers["sqlalchemy.engine"] == {"level": "INFO"}
    assert "httpx" not in loggers
