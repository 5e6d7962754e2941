"""Database-backed industry insight repository."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db.models import IndustryInsightModel
from ..insights import IndustryInsight, InsightPayload, SalaryRange, ensure_utc


def normalize_industry(industry: str) -> str:
    normalized = industry.strip() if isinstance(industry, str) else ""
    if not normalized:
        raise ValueError("Industry cannot be empty.")
    return normalized


class IndustryInsightRepository:
    """Row-level access to the ``industry_insights`` table."""

    def get(self, session: Session, industry: str) -> IndustryInsight | None:
        model = self._find(session, industry)
        if model is None:
            return None
        return self.to_domain(model)

    def create(
        self,
        session: Session,
        industry: str,
        payload: InsightPayload,
        *,
        refresh_interval: timedelta,
        now: Optional[datetime] = None,
    ) -> IndustryInsight:
        """Insert a new row inside a SAVEPOINT.

        Raises ``IntegrityError`` when the industry already exists; the
        savepoint is rolled back first, so the outer transaction stays usable.
        """
        timestamp = now or datetime.now(timezone.utc)
        model = IndustryInsightModel(industry=normalize_industry(industry))
        self._apply_payload(model, payload, timestamp, refresh_interval)
        try:
            with session.begin_nested():
                session.add(model)
                session.flush()
        except IntegrityError:
            if model in session:
                session.expunge(model)
            raise
        return self.to_domain(model)

    def refresh(
        self,
        session: Session,
        industry: str,
        payload: InsightPayload,
        *,
        refresh_interval: timedelta,
        now: Optional[datetime] = None,
    ) -> IndustryInsight:
        model = self._find(session, industry)
        if model is None:
            raise LookupError(f"Industry insight '{industry}' does not exist.")
        self._apply_payload(model, payload, now or datetime.now(timezone.utc), refresh_interval)
        session.flush()
        return self.to_domain(model)

    def list_due(self, session: Session, now: datetime, *, limit: Optional[int] = None) -> List[str]:
        stmt = (
            select(IndustryInsightModel.industry)
            .where(IndustryInsightModel.next_update <= now)
            .order_by(IndustryInsightModel.next_update.asc(), IndustryInsightModel.industry.asc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(session.execute(stmt).scalars().all())

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _find(self, session: Session, industry: str) -> IndustryInsightModel | None:
        stmt = select(IndustryInsightModel).where(
            IndustryInsightModel.industry == normalize_industry(industry)
        )
        return session.execute(stmt).scalar_one_or_none()

    def _apply_payload(
        self,
        model: IndustryInsightModel,
        payload: InsightPayload,
        timestamp: datetime,
        refresh_interval: timedelta,
    ) -> None:
        model.salary_ranges = [entry.model_dump(mode="json") for entry in payload.salary_ranges]
        model.growth_rate = float(payload.growth_rate)
        model.demand_level = payload.demand_level
        model.top_skills = list(payload.top_skills)
        model.market_outlook = payload.market_outlook
        model.key_trends = list(payload.key_trends)
        model.recommended_skills = list(payload.recommended_skills)
        model.last_updated = timestamp
        model.next_update = timestamp + refresh_interval

    def to_domain(self, model: IndustryInsightModel) -> IndustryInsight:
        return IndustryInsight(
            industry=model.industry,
            salary_ranges=[SalaryRange.model_validate(entry) for entry in model.salary_ranges or []],
            growth_rate=model.growth_rate,
            demand_level=model.demand_level,  # type: ignore[arg-type]
            top_skills=list(model.top_skills or []),
            market_outlook=model.market_outlook,  # type: ignore[arg-type]
            key_trends=list(model.key_trends or []),
            recommended_skills=list(model.recommended_skills or []),
            last_updated=ensure_utc(model.last_updated),
            next_update=ensure_utc(model.next_update),
        )


industry_insights = IndustryInsightRepository()

__all__ = ["IndustryInsightRepository", "industry_insights", "normalize_industry"]
