"""Industry insight models shared by the store, generator, and routes."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

DemandLevel = Literal["High", "Medium", "Low"]
MarketOutlook = Literal["Positive", "Neutral", "Negative"]


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps read back from SQLite."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _dedupe_strings(values: Any) -> List[str]:
    if not isinstance(values, (list, tuple, set)):
        return []
    seen: dict[str, str] = {}
    for value in values:
        if isinstance(value, str) and value.strip():
            seen.setdefault(value.strip().lower(), value.strip())
    return list(seen.values())


class SalaryRange(BaseModel):
    role: str
    min: float = Field(ge=0)
    max: float = Field(ge=0)
    median: float = Field(ge=0)
    location: str = ""


class InsightPayload(BaseModel):
    """Fields produced by the insight generator for a single industry."""

    salary_ranges: List[SalaryRange] = Field(default_factory=list, alias="salaryRanges")
    growth_rate: float = Field(alias="growthRate")
    demand_level: DemandLevel = Field(alias="demandLevel")
    top_skills: List[str] = Field(default_factory=list, alias="topSkills")
    market_outlook: MarketOutlook = Field(alias="marketOutlook")
    key_trends: List[str] = Field(default_factory=list, alias="keyTrends")
    recommended_skills: List[str] = Field(default_factory=list, alias="recommendedSkills")

    model_config = {"populate_by_name": True}

    @field_validator("top_skills", "recommended_skills", mode="before")
    @classmethod
    def _unique_skills(cls, value: Any) -> List[str]:
        return _dedupe_strings(value)

    @field_validator("key_trends", mode="before")
    @classmethod
    def _trimmed_trends(cls, value: Any) -> List[str]:
        if not isinstance(value, (list, tuple)):
            return []
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]

    @field_validator("demand_level", "market_outlook", mode="before")
    @classmethod
    def _title_case(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().title()
        return value


class IndustryInsight(BaseModel):
    """Cached insight for one industry; at most one exists per industry."""

    industry: str
    salary_ranges: List[SalaryRange] = Field(default_factory=list)
    growth_rate: float
    demand_level: DemandLevel
    top_skills: List[str] = Field(default_factory=list)
    market_outlook: MarketOutlook
    key_trends: List[str] = Field(default_factory=list)
    recommended_skills: List[str] = Field(default_factory=list)
    last_updated: datetime
    next_update: datetime

    def is_stale(self, now: Optional[datetime] = None) -> bool:
        reference = ensure_utc(now) if now else datetime.now(timezone.utc)
        return reference >= ensure_utc(self.next_update)


__all__ = [
    "DemandLevel",
    "IndustryInsight",
    "InsightPayload",
    "MarketOutlook",
    "SalaryRange",
    "ensure_utc",
]
