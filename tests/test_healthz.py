from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from career_coach.db.session import dispose_engine
from career_coach.main import app


@pytest.fixture()
def client():  # type: ignore[no-untyped-def]
    with TestClient(app) as test_client:
        yield test_client
    dispose_engine()


def test_health_reports_insight_model(client: TestClient) -> None:
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "insight_model": "gpt-5-mini"}


def test_database_health_includes_transaction_counters(client: TestClient) -> None:
    response = client.get("/healthz/database")

    assert response.status_code == 200
    pool = response.json()["pool"]
    assert {"connects", "checkouts", "commits", "rollbacks", "status"} <= set(pool)
    assert pool["checkouts"] >= 1


def test_database_health_reports_unreachable_database(client: TestClient, monkeypatch) -> None:
    def unavailable():  # type: ignore[no-untyped-def]
        raise RuntimeError("could not connect to server")

    monkeypatch.setattr("career_coach.main.get_engine", unavailable)

    response = client.get("/healthz/database")

    assert response.status_code == 503
    assert response.json() == {"detail": "could not connect to server"}
