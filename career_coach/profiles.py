"""User profile models and input parsing for onboarding updates."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ValidationFailedError
from .insights import IndustryInsight


class ProfileUpdateRequest(BaseModel):
    """Onboarding form payload, normalised before anything touches storage."""

    industry: str = Field(..., min_length=1)
    experience: Optional[int] = None
    bio: Optional[str] = None
    skills: List[str] = Field(default_factory=list)

    @field_validator("industry", mode="before")
    @classmethod
    def _strip_industry(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("experience", mode="before")
    @classmethod
    def _coerce_experience(cls, value: Any) -> Optional[int]:
        # Anything that is not a non-negative whole number counts as absent.
        if isinstance(value, bool) or value is None:
            return None
        if isinstance(value, str):
            value = value.strip()
            if not value.isdecimal():
                return None
            try:
                return int(value)
            except ValueError:
                return None
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if isinstance(value, int) and value >= 0:
            return value
        return None

    @field_validator("bio", mode="before")
    @classmethod
    def _blank_bio(cls, value: Any) -> Optional[str]:
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip()

    @field_validator("skills", mode="before")
    @classmethod
    def _coerce_skills(cls, value: Any) -> List[str]:
        if not isinstance(value, (list, tuple, set)):
            return []
        if not all(isinstance(item, str) for item in value):
            return []
        skills: List[str] = []
        for item in value:
            trimmed = item.strip()
            if trimmed and trimmed not in skills:
                skills.append(trimmed)
        return skills

    @classmethod
    def from_payload(cls, data: Any) -> "ProfileUpdateRequest":
        if isinstance(data, ProfileUpdateRequest):
            return data
        if not isinstance(data, Mapping):
            raise ValidationFailedError("Profile update payload must be an object")
        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            if any(error["loc"][:1] == ("industry",) for error in exc.errors()):
                raise ValidationFailedError("Industry is required") from exc
            raise ValidationFailedError(f"Invalid profile update: {exc}") from exc


class UserProfile(BaseModel):
    identity_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    industry: Optional[str] = None
    experience: Optional[int] = None
    bio: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    industry_insight: Optional[IndustryInsight] = None


class OnboardingProfile(BaseModel):
    """Projection of the profile returned by the onboarding status query."""

    industry: Optional[str] = None
    experience: Optional[int] = None
    bio: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    industry_insight: Optional[IndustryInsight] = None


class OnboardingStatus(BaseModel):
    is_onboarded: bool
    profile: Optional[OnboardingProfile] = None


class ProfileUpdateResult(BaseModel):
    profile: UserProfile
    insight: IndustryInsight


__all__ = [
    "OnboardingProfile",
    "OnboardingStatus",
    "ProfileUpdateRequest",
    "ProfileUpdateResult",
    "UserProfile",
]
