"""Profile update and onboarding status operations behind the onboarding form."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from .config import Settings, get_settings
from .db.session import SessionManager, transaction_scope
from .errors import (
    CareerCoachError,
    NotFoundError,
    OperationTimeoutError,
    UnauthorizedError,
    wrap_failure,
)
from .insight_store import InsightStore
from .profiles import OnboardingStatus, ProfileUpdateRequest, ProfileUpdateResult
from .repositories.users import UserProfileRepository, user_profiles
from .telemetry import emit_event

logger = logging.getLogger(__name__)


def _require_identity(identity: Optional[str]) -> str:
    if not isinstance(identity, str) or not identity.strip():
        raise UnauthorizedError()
    return identity.strip()


class ProfileService:
    def __init__(
        self,
        insight_store: InsightStore,
        *,
        settings: Optional[Settings] = None,
        session_factory: Optional[SessionManager] = None,
        repository: Optional[UserProfileRepository] = None,
    ) -> None:
        resolved = settings or get_settings()
        self._insights = insight_store
        self._session_factory = session_factory
        self._repository = repository or user_profiles
        self._timeout = resolved.transaction_timeout_seconds
        self._isolation_level = resolved.transaction_isolation_level

    async def update_profile(self, identity: Optional[str], data: Any) -> ProfileUpdateResult:
        """Link the caller's profile to an industry, creating its insight if needed.

        The insight is generated with no transaction open; the insight row and
        the profile are then written in one short transaction, so on any
        failure neither is committed. The whole call is bounded by the
        configured timeout.
        """
        try:
            principal = _require_identity(identity)
            request = ProfileUpdateRequest.from_payload(data)
            result = await asyncio.wait_for(
                self._apply_update(principal, request),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.warning("Profile update for %s exceeded %.1fs", identity, self._timeout)
            raise OperationTimeoutError(
                f"Profile update timed out after {self._timeout:g} seconds"
            ) from exc
        except CareerCoachError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("Detailed error in update_profile")
            raise wrap_failure(exc, "update profile") from exc

        emit_event(
            "profile_updated",
            identity=principal,
            industry=request.industry,
            skill_count=len(request.skills),
        )
        return result

    async def get_onboarding_status(self, identity: Optional[str]) -> OnboardingStatus:
        principal = _require_identity(identity)
        try:
            with transaction_scope(session_factory=self._session_factory) as session:
                projection = self._repository.onboarding_projection(session, principal)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Error in get_onboarding_status")
            raise wrap_failure(exc, "check onboarding status") from exc

        if projection is None:
            return OnboardingStatus(is_onboarded=False, profile=None)
        return OnboardingStatus(is_onboarded=bool(projection.industry), profile=projection)

    async def _apply_update(self, identity: str, request: ProfileUpdateRequest) -> ProfileUpdateResult:
        # Fail fast before paying for generation; the write below re-checks.
        with transaction_scope(session_factory=self._session_factory) as session:
            if self._repository.get_model(session, identity) is None:
                raise NotFoundError("User not found")

        async with self._insights.reserve(request.industry) as prepared:
            with transaction_scope(
                isolation_level=self._isolation_level,
                timeout=self._timeout,
                session_factory=self._session_factory,
            ) as session:
                model = self._repository.get_model(session, identity)
                if model is None:
                    raise NotFoundError("User not found")
                insight = self._insights.persist(session, prepared)
                profile = self._repository.apply_update(session, model, request)
        return ProfileUpdateResult(profile=profile, insight=insight)


__all__ = ["ProfileService"]
