from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from career_coach.config import get_settings
from career_coach.insight_store import InsightStore
from career_coach.main import app
from career_coach.profile_routes import get_profile_service
from career_coach.profile_service import ProfileService

from conftest import FakeGenerator, add_user


@pytest.fixture()
def client(session_factory, generator: FakeGenerator) -> Iterator[TestClient]:
    service = ProfileService(
        InsightStore(generator, session_factory=session_factory),
        settings=get_settings(),
        session_factory=session_factory,
    )
    app.dependency_overrides[get_profile_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _headers(identity: str) -> dict[str, str]:
    return {get_settings().identity_header: identity}


def test_update_without_identity_is_rejected(client: TestClient) -> None:
    response = client.put("/api/profile", json={"industry": "tech-software"})

    assert response.status_code == 401
    assert response.json() == {"kind": "unauthorized", "detail": "Unauthorized"}


def test_update_and_onboarding_status_round_trip(client: TestClient, session_factory, generator) -> None:
    add_user(session_factory, "user_a")

    status_before = client.get("/api/profile/onboarding-status", headers=_headers("user_a"))
    assert status_before.status_code == 200
    assert status_before.json()["is_onboarded"] is False

    response = client.put(
        "/api/profile",
        json={"industry": "tech-software", "experience": 5, "bio": "Platform engineer", "skills": ["Go"]},
        headers=_headers("user_a"),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["profile"]["industry"] == "tech-software"
    assert body["insight"]["demand_level"] == "High"
    assert generator.calls == ["tech-software"]

    status_after = client.get("/api/profile/onboarding-status", headers=_headers("user_a"))
    assert status_after.json()["is_onboarded"] is True
    assert status_after.json()["profile"]["industry_insight"]["industry"] == "tech-software"


def test_validation_and_missing_profile_errors(client: TestClient, session_factory) -> None:
    add_user(session_factory, "user_a")

    invalid = client.put("/api/profile", json={"bio": "no industry"}, headers=_headers("user_a"))
    missing = client.put("/api/profile", json={"industry": "tech-software"}, headers=_headers("ghost"))

    assert invalid.status_code == 422
    assert invalid.json()["kind"] == "validation_error"
    assert missing.status_code == 404
    assert missing.json() == {"kind": "not_found", "detail": "User not found"}
