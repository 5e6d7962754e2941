"""Upgrade the career coach schema once the database accepts connections.

Deploys run this before starting the API so ``users`` and
``industry_insights`` exist with their unique indexes.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from career_coach.config import get_settings
from career_coach.logging_config import configure_logging

LOGGER = logging.getLogger("career_coach.migrations")
PROJECT_ROOT = Path(__file__).resolve().parent.parent


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply career coach database migrations.")
    parser.add_argument("--revision", default="head", help="Target revision (default: head).")
    parser.add_argument(
        "--timeout",
        type=int,
        default=int(os.getenv("CAREER_COACH_DB_MIGRATION_TIMEOUT", "60")),
        help="Seconds to wait for the database before giving up.",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=float(os.getenv("CAREER_COACH_DB_MIGRATION_POLL_INTERVAL", "3")),
        help="Seconds between readiness probes.",
    )
    parser.add_argument("--config", default=str(PROJECT_ROOT / "alembic.ini"), help="Path to alembic.ini.")
    return parser.parse_args(argv)


def get_alembic_config(config_path: str) -> Config:
    config = Config(config_path)
    config.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    return config


def resolve_database_url(config: Config) -> str:
    """Prefer an explicit ``sqlalchemy.url``; otherwise use the application setting."""
    url = config.get_main_option("sqlalchemy.url") or os.getenv("CAREER_COACH_DATABASE_URL")
    if not url:
        raise RuntimeError("CAREER_COACH_DATABASE_URL must be set before running migrations.")
    config.set_main_option("sqlalchemy.url", url)
    return url


def wait_for_database(database_url: str, *, timeout: int, poll_interval: float) -> None:
    deadline = time.monotonic() + timeout
    engine = create_engine(database_url, pool_pre_ping=True)
    attempts = 0
    last_error: Optional[Exception] = None
    try:
        while True:
            attempts += 1
            try:
                with engine.connect() as connection:
                    connection.execute(text("SELECT 1"))
            except OperationalError as exc:
                last_error = exc
                LOGGER.warning("Database not ready (attempt %d): %s", attempts, exc)
            except SQLAlchemyError as exc:
                raise RuntimeError(f"Database probe failed: {exc}") from exc
            else:
                LOGGER.info("Database reachable after %d attempt(s).", attempts)
                return
            if time.monotonic() >= deadline:
                break
            time.sleep(poll_interval)
    finally:
        engine.dispose()

    raise RuntimeError(f"Database did not become ready within {timeout}s.") from last_error


def run_migrations(
    revision: str,
    *,
    timeout: int,
    poll_interval: float,
    config: Optional[Config] = None,
) -> None:
    config = config or get_alembic_config(str(PROJECT_ROOT / "alembic.ini"))
    database_url = resolve_database_url(config)
    wait_for_database(database_url, timeout=timeout, poll_interval=poll_interval)
    LOGGER.info("Upgrading schema to %s", revision)
    command.upgrade(config, revision)


def main(argv: Optional[list[str]] = None) -> int:
    configure_logging()
    args = parse_args(argv)
    try:
        settings = get_settings()
        config = get_alembic_config(args.config)
        if settings.database_url and not config.get_main_option("sqlalchemy.url"):
            config.set_main_option("sqlalchemy.url", settings.database_url)
        run_migrations(args.revision, timeout=args.timeout, poll_interval=args.poll_interval, config=config)
    except Exception:  # noqa: BLE001
        LOGGER.exception("Migration run failed")
        return 1
    LOGGER.info("Migrations complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
