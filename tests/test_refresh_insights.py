from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from scripts import refresh_insights as job

from conftest import FakeGenerator, add_insight


@pytest.mark.asyncio
async def test_refresh_job_updates_due_insights(session_factory) -> None:
    now = datetime.now(timezone.utc)
    add_insight(session_factory, "energy-solar", next_update=now - timedelta(days=2))
    add_insight(session_factory, "tech-cloud", next_update=now + timedelta(days=2))
    generator = FakeGenerator()

    refreshed = await job.refresh_insights(generator=generator, session_factory=session_factory)

    assert refreshed == ["energy-solar"]
    assert generator.calls == ["energy-solar"]


def test_refresh_job_cli_reports_failure(monkeypatch) -> None:
    async def explode(*, limit=None, generator=None, session_factory=None):  # type: ignore[no-untyped-def]
        raise RuntimeError("no database")

    monkeypatch.setattr(job, "refresh_insights", explode)
    assert job.main(["--limit", "3"]) == 1
