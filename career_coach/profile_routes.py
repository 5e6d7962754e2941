"""Profile endpoints backing the onboarding form and dashboard gate."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, status
from pydantic import BaseModel

from .config import get_settings
from .errors import ErrorKind
from .identity import get_current_identity
from .insight_generator import AgentInsightGenerator
from .insight_store import InsightStore
from .insights import IndustryInsight
from .profile_service import ProfileService
from .profiles import OnboardingStatus, UserProfile

router = APIRouter(prefix="/api/profile", tags=["profile"])
logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: Dict[ErrorKind, int] = {
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.VALIDATION_ERROR: 422,
    ErrorKind.CONSTRAINT_VIOLATION: status.HTTP_409_CONFLICT,
    ErrorKind.GENERATION_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    ErrorKind.WRAPPED_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ProfileUpdateResponse(BaseModel):
    success: bool = True
    profile: UserProfile
    insight: IndustryInsight


_service: Optional[ProfileService] = None


def get_profile_service() -> ProfileService:
    global _service
    if _service is None:
        settings = get_settings()
        store = InsightStore(AgentInsightGenerator(settings), refresh_days=settings.insight_refresh_days)
        _service = ProfileService(store, settings=settings)
    return _service


@router.put("", response_model=ProfileUpdateResponse, status_code=status.HTTP_200_OK)
async def update_profile(
    payload: Dict[str, Any] = Body(...),
    identity: Optional[str] = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileUpdateResponse:
    result = await service.update_profile(identity, payload)
    return ProfileUpdateResponse(profile=result.profile, insight=result.insight)


@router.get("/onboarding-status", response_model=OnboardingStatus, status_code=status.HTTP_200_OK)
async def onboarding_status(
    identity: Optional[str] = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
) -> OnboardingStatus:
    return await service.get_onboarding_status(identity)


__all__ = ["ERROR_STATUS_CODES", "get_profile_service", "router"]
