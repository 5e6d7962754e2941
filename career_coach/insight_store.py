"""Get-or-generate cache for shared industry insights."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, List, Optional
from weakref import WeakValueDictionary

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .db.session import SessionManager, transaction_scope
from .errors import (
    ConstraintViolationError,
    GenerationFailedError,
    NotFoundError,
    ValidationFailedError,
)
from .insight_generator import InsightGenerator
from .insights import IndustryInsight, InsightPayload
from .repositories.industry_insights import (
    IndustryInsightRepository,
    industry_insights,
    normalize_industry,
)
from .telemetry import emit_event

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_DAYS = 7


@dataclass(frozen=True)
class PreparedInsight:
    """Outcome of the read-then-generate phase; exactly one of the two is set."""

    industry: str
    existing: Optional[IndustryInsight] = None
    payload: Optional[InsightPayload] = None


class InsightStore:
    """Owns industry insight rows: one per industry, created lazily, refreshed in place.

    The generator is a slow remote call, so no database transaction is ever
    held open while it runs. Callers in this process that ask for the same
    industry queue on a per-industry lock and reuse the first caller's row;
    callers in other processes are reconciled by the unique index.
    """

    def __init__(
        self,
        generator: InsightGenerator,
        *,
        session_factory: Optional[SessionManager] = None,
        repository: Optional[IndustryInsightRepository] = None,
        refresh_days: int = DEFAULT_REFRESH_DAYS,
    ) -> None:
        self._generator = generator
        self._session_factory = session_factory
        self._repository = repository or industry_insights
        self._refresh_interval = timedelta(days=refresh_days)
        self._locks: "WeakValueDictionary[str, asyncio.Lock]" = WeakValueDictionary()

    @property
    def refresh_interval(self) -> timedelta:
        return self._refresh_interval

    async def get_or_create(self, industry: str) -> IndustryInsight:
        """Return the insight for ``industry``, generating and storing it when absent."""
        async with self.reserve(industry) as prepared:
            with transaction_scope(session_factory=self._session_factory) as session:
                return self.persist(session, prepared)

    @asynccontextmanager
    async def reserve(self, industry: str) -> AsyncIterator[PreparedInsight]:
        """Hold the industry while the caller writes the prepared insight.

        The caller is expected to pass the yielded value to :meth:`persist`
        inside its own transaction before leaving the block.
        """
        key = self._require_industry(industry)
        async with self._lock_for(key):
            yield await self.prepare(key)

    async def prepare(self, industry: str) -> PreparedInsight:
        key = self._require_industry(industry)
        with transaction_scope(session_factory=self._session_factory) as session:
            existing = self._repository.get(session, key)
        if existing is not None:
            return PreparedInsight(industry=key, existing=existing)
        return PreparedInsight(industry=key, payload=await self._generate(key))

    def persist(self, session: Session, prepared: PreparedInsight) -> IndustryInsight:
        """Write a prepared insight in the caller's transaction.

        When another writer stored the industry first, its row wins and is
        returned; the freshly generated payload is discarded.
        """
        key = prepared.industry
        current = self._repository.get(session, key)
        if current is not None:
            if prepared.payload is not None:
                self._note_race(key)
            return current
        if prepared.payload is None:
            raise NotFoundError(f"No industry insight stored for {key}")

        try:
            insight = self._repository.create(
                session,
                key,
                prepared.payload,
                refresh_interval=self._refresh_interval,
            )
        except IntegrityError as exc:
            winner = self._repository.get(session, key)
            if winner is None:
                raise ConstraintViolationError("Unique constraint violation") from exc
            self._note_race(key)
            return winner

        emit_event("insight_generated", industry=key, next_update=insight.next_update)
        return insight

    def is_stale(self, insight: IndustryInsight, now: Optional[datetime] = None) -> bool:
        return insight.is_stale(now)

    async def refresh(self, industry: str, *, now: Optional[datetime] = None) -> IndustryInsight:
        """Regenerate an existing insight and push its ``next_update`` forward."""
        key = self._require_industry(industry)
        async with self._lock_for(key):
            with transaction_scope(session_factory=self._session_factory) as session:
                if self._repository.get(session, key) is None:
                    raise NotFoundError(f"No industry insight stored for {key}")
            payload = await self._generate(key)
            with transaction_scope(session_factory=self._session_factory) as session:
                try:
                    insight = self._repository.refresh(
                        session,
                        key,
                        payload,
                        refresh_interval=self._refresh_interval,
                        now=now,
                    )
                except LookupError as exc:
                    raise NotFoundError(f"No industry insight stored for {key}") from exc
        emit_event("insight_refreshed", industry=key, next_update=insight.next_update)
        return insight

    async def refresh_stale(
        self,
        *,
        now: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[str]:
        """Refresh every insight whose ``next_update`` has passed, oldest first.

        Each industry commits on its own, so one failure never undoes the
        refreshes before it.
        """
        reference = now or datetime.now(timezone.utc)
        with transaction_scope(session_factory=self._session_factory) as session:
            due = self._repository.list_due(session, reference, limit=limit)

        refreshed: List[str] = []
        for industry in due:
            try:
                await self.refresh(industry, now=reference)
            except GenerationFailedError as exc:
                logger.warning("Skipping insight refresh for %s: %s", industry, exc)
                continue
            refreshed.append(industry)
        return refreshed

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def _note_race(self, key: str) -> None:
        logger.info("Industry insight for %s was created concurrently; using stored row", key)
        emit_event("insight_race_resolved", industry=key)

    def _require_industry(self, industry: str) -> str:
        try:
            return normalize_industry(industry)
        except ValueError as exc:
            raise ValidationFailedError("Industry is required") from exc

    async def _generate(self, industry: str) -> InsightPayload:
        try:
            return await self._generator(industry)
        except GenerationFailedError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("Insight generation failed for %s", industry)
            raise GenerationFailedError(f"Failed to generate insights for {industry}: {exc}") from exc


__all__ = ["DEFAULT_REFRESH_DAYS", "InsightStore", "PreparedInsight"]
