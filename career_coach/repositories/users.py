"""Database-backed user profile repository."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..db.models import UserModel
from ..profiles import OnboardingProfile, ProfileUpdateRequest, UserProfile
from .industry_insights import IndustryInsightRepository, industry_insights


class UserProfileRepository:
    def __init__(self, insights: Optional[IndustryInsightRepository] = None) -> None:
        self._insights = insights or industry_insights

    def get_model(self, session: Session, identity_id: str) -> UserModel | None:
        stmt = (
            select(UserModel)
            .where(UserModel.identity_id == identity_id)
            .options(selectinload(UserModel.industry_insight))
        )
        return session.execute(stmt).scalar_one_or_none()

    def get(self, session: Session, identity_id: str) -> UserProfile | None:
        model = self.get_model(session, identity_id)
        if model is None:
            return None
        return self.to_domain(model)

    def apply_update(self, session: Session, model: UserModel, request: ProfileUpdateRequest) -> UserProfile:
        """Write the onboarding fields; the insight row must already be flushed."""
        model.industry = request.industry
        model.experience = request.experience
        model.bio = request.bio
        model.skills = list(request.skills)
        session.flush()
        # The relationship is keyed on ``industry``; reload it from the new value.
        session.expire(model, ["industry_insight"])
        return self.to_domain(model)

    def onboarding_projection(self, session: Session, identity_id: str) -> OnboardingProfile | None:
        model = self.get_model(session, identity_id)
        if model is None:
            return None
        insight = model.industry_insight
        return OnboardingProfile(
            industry=model.industry,
            experience=model.experience,
            bio=model.bio,
            skills=list(model.skills or []),
            industry_insight=self._insights.to_domain(insight) if insight is not None else None,
        )

    def to_domain(self, model: UserModel) -> UserProfile:
        insight = model.industry_insight
        return UserProfile(
            identity_id=model.identity_id,
            email=model.email,
            name=model.name,
            industry=model.industry,
            experience=model.experience,
            bio=model.bio,
            skills=list(model.skills or []),
            industry_insight=self._insights.to_domain(insight) if insight is not None else None,
        )


user_profiles = UserProfileRepository()

__all__ = ["UserProfileRepository", "user_profiles"]
