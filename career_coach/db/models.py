"""ORM models backing the Career Coach persistence layer."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from .base import Base, TimestampMixin

JSONType = JSON


class IndustryInsightModel(TimestampMixin, Base):
    __tablename__ = "industry_insights"
    __table_args__ = (
        Index("ix_industry_insights_industry", "industry", unique=True),
        Index("ix_industry_insights_next_update", "next_update"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    industry: Mapped[str] = mapped_column(String(255), nullable=False)
    salary_ranges: Mapped[list[dict]] = mapped_column(JSONType, default=list, nullable=False)
    growth_rate: Mapped[float] = mapped_column(Float, nullable=False)
    demand_level: Mapped[str] = mapped_column(String(16), nullable=False)
    top_skills: Mapped[list[str]] = mapped_column(JSONType, default=list, nullable=False)
    market_outlook: Mapped[str] = mapped_column(String(16), nullable=False)
    key_trends: Mapped[list[str]] = mapped_column(JSONType, default=list, nullable=False)
    recommended_skills: Mapped[list[str]] = mapped_column(JSONType, default=list, nullable=False)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
    next_update: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    users: Mapped[list["UserModel"]] = relationship(back_populates="industry_insight")


class UserModel(TimestampMixin, Base):
    __tablename__ = "users"
    __table_args__ = (
        Index("ix_users_identity_id", "identity_id", unique=True),
        Index("ix_users_email", "email", unique=True),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    identity_id: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    industry: Mapped[Optional[str]] = mapped_column(
        String(255), ForeignKey("industry_insights.industry"), nullable=True
    )
    experience: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    skills: Mapped[list[str]] = mapped_column(JSONType, default=list, nullable=False)

    industry_insight: Mapped[Optional[IndustryInsightModel]] = relationship(back_populates="users")


__all__ = [
    "IndustryInsightModel",
    "UserModel",
]
