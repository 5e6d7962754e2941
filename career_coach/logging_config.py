import logging
import os
from logging.config import dictConfig
from typing import Any, Dict, Optional

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Opt-in verbose loggers, keyed by the environment flag that enables them.
DEBUG_FLAGS = {
    "CAREER_COACH_DEBUG_SQL": {"sqlalchemy.engine": "INFO"},
    "CAREER_COACH_DEBUG_HTTP": {"httpx": "DEBUG", "openai": "DEBUG", "uvicorn.access": "DEBUG"},
}


def build_logging_config(level: Optional[str] = None) -> Dict[str, Any]:
    level = (level or os.getenv("CAREER_COACH_LOG_LEVEL", "INFO")).upper()
    loggers: Dict[str, Dict[str, Any]] = {
        "career_coach.telemetry": {"level": os.getenv("CAREER_COACH_TELEMETRY_LOG_LEVEL", level).upper()},
    }
    for flag, overrides in DEBUG_FLAGS.items():
        if os.getenv(flag, "0") == "1":
            for name, override in overrides.items():
                loggers[name] = {"level": override}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": DEFAULT_LOG_FORMAT}},
        "handlers": {"default": {"class": "logging.StreamHandler", "formatter": "default"}},
        "loggers": loggers,
        "root": {"handlers": ["default"], "level": level},
    }


def configure_logging(level: Optional[str] = None) -> None:
    """Configure process-wide logging from environment flags."""
    dictConfig(build_logging_config(level))
    logging.getLogger(__name__).debug("Logging configured at %s", logging.getLevelName(logging.getLogger().level))
