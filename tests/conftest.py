from __future__ import annotations

import asyncio
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional

import pytest
from sqlalchemy import Engine, create_engine, func, select
from sqlalchemy.orm import Session, sessionmaker

os.environ.setdefault("CAREER_COACH_DATABASE_URL", "sqlite://")

from career_coach.db.base import Base  # noqa: E402
from career_coach.db.models import IndustryInsightModel, UserModel  # noqa: E402
from career_coach.db.session import build_session_factory, enable_sqlite_savepoints, session_scope  # noqa: E402
from career_coach.insights import InsightPayload  # noqa: E402


def make_payload(demand_level: str = "High", growth_rate: float = 12.5) -> InsightPayload:
    return InsightPayload.model_validate(
        {
            "salaryRanges": [
                {"role": "Software Engineer", "min": 90000, "max": 160000, "median": 125000, "location": "US"},
                {"role": "SRE", "min": 100000, "max": 170000, "median": 135000, "location": "US"},
            ],
            "growthRate": growth_rate,
            "demandLevel": demand_level,
            "topSkills": ["Go", "Kubernetes", "go"],
            "marketOutlook": "Positive",
            "keyTrends": ["AI tooling", "Platform engineering"],
            "recommendedSkills": ["Rust", "Observability"],
        }
    )


class FakeGenerator:
    """Async insight generator that records every industry it was asked for.

    Each call yields to the event loop at least once, like a network call.
    """

    def __init__(
        self,
        payload: Optional[InsightPayload] = None,
        *,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ) -> None:
        self.payload = payload or make_payload()
        self.error = error
        self.delay = delay
        self.calls: List[str] = []

    async def __call__(self, industry: str) -> InsightPayload:
        self.calls.append(industry)
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture()
def engine(tmp_path: Path) -> Iterator[Engine]:
    engine = create_engine(
        f"sqlite:///{tmp_path / 'career_coach.db'}",
        future=True,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return build_session_factory(engine)


@pytest.fixture()
def generator() -> FakeGenerator:
    return FakeGenerator()


def add_user(
    session_factory: sessionmaker[Session],
    identity_id: str,
    *,
    industry: Optional[str] = None,
    email: Optional[str] = None,
) -> None:
    with session_scope(session_factory=session_factory) as session:
        session.add(UserModel(identity_id=identity_id, email=email, industry=industry, skills=[]))


def add_insight(
    session_factory: sessionmaker[Session],
    industry: str,
    *,
    next_update: datetime,
    demand_level: str = "Medium",
) -> None:
    with session_scope(session_factory=session_factory) as session:
        session.add(
            IndustryInsightModel(
                industry=industry,
                salary_ranges=[],
                growth_rate=3.0,
                demand_level=demand_level,
                top_skills=[],
                market_outlook="Neutral",
                key_trends=[],
                recommended_skills=[],
                last_updated=datetime.now(timezone.utc),
                next_update=next_update,
            )
        )


def count_insights(session_factory: sessionmaker[Session], industry: Optional[str] = None) -> int:
    with session_scope(commit=False, session_factory=session_factory) as session:
        stmt = select(func.count()).select_from(IndustryInsightModel)
        if industry is not None:
            stmt = stmt.where(IndustryInsightModel.industry == industry)
        return int(session.execute(stmt).scalar_one())


def load_user(session_factory: sessionmaker[Session], identity_id: str) -> Optional[UserModel]:
    with session_factory() as session:
        return session.execute(select(UserModel).where(UserModel.identity_id == identity_id)).scalar_one_or_none()
