import pytest

from observability.health import check_catalog_sources, check_database, run_health_checks


def test_catalog_sources_degraded_without_curseforge_key(monkeypatch):
    monkeypatch.delenv("CURSEFORGE_API_KEY", raising=False)

    result = check_catalog_sources()

    assert result.status == "degraded"
    assert result.details["configured_sources"] == ["modrinth"]


def test_catalog_sources_ok_with_curseforge_key(monkeypatch):
    monkeypatch.setenv("CURSEFORGE_API_KEY", "secret")

    result = check_catalog_sources()

    assert result.is_healthy
    assert result.details["configured_sources"] == ["modrinth", "curseforge"]


@pytest.mark.asyncio
async def test_check_database_reports_latency(session_factory):
    async with session_factory() as session:
        result = await check_database(session)

    assert result.is_healthy
    assert "latency_ms" in result.details


@pytest.mark.asyncio
async def test_run_health_checks_aggregates(session_factory, monkeypatch):
    monkeypatch.delenv("CURSEFORGE_API_KEY", raising=False)

    async with session_factory() as session:
        report = await run_health_checks(session)

    assert set(report["checks"]) == {"database", "catalog_sources", "system_resources"}
    assert report["status"] in ("degraded", "unhealthy")
