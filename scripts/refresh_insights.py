"""Regenerate industry insights whose refresh date has passed.

Meant to run on a weekly schedule (cron, Kubernetes CronJob, etc.).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from career_coach.config import get_settings
from career_coach.db.session import SessionManager
from career_coach.insight_generator import AgentInsightGenerator, InsightGenerator
from career_coach.insight_store import InsightStore
from career_coach.logging_config import configure_logging

LOGGER = logging.getLogger("career_coach.refresh_insights")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Refresh stale industry insights.")
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of industries to refresh in this run.",
    )
    return parser.parse_args(argv)


async def refresh_insights(
    *,
    limit: Optional[int] = None,
    generator: Optional[InsightGenerator] = None,
    session_factory: Optional[SessionManager] = None,
) -> List[str]:
    settings = get_settings()
    store = InsightStore(
        generator or AgentInsightGenerator(settings),
        session_factory=session_factory,
        refresh_days=settings.insight_refresh_days,
    )
    refreshed = await store.refresh_stale(limit=limit)
    LOGGER.info("Refreshed %d industry insights: %s", len(refreshed), ", ".join(refreshed) or "-")
    return refreshed


def main(argv: Optional[list[str]] = None) -> int:
    configure_logging()
    args = parse_args(argv)
    try:
        asyncio.run(refresh_insights(limit=args.limit))
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Insight refresh failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
