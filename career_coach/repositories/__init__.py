"""Persistence repositories for profiles and industry insights."""

from .industry_insights import IndustryInsightRepository, industry_insights
from .users import UserProfileRepository, user_profiles

__all__ = [
    "IndustryInsightRepository",
    "UserProfileRepository",
    "industry_insights",
    "user_profiles",
]
