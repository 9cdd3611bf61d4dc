import pytest

from catalog.executors import run_provider_with_status, skipped_status
from catalog.models import ProviderQuery, SourcePlatform
from exceptions import SourceUnavailableError

from fakes import FakeProvider, modrinth_hit


def _query(limit=10):
    return ProviderQuery(provider_id=SourcePlatform.MODRINTH, query="sky", limit=limit)


@pytest.mark.asyncio
async def test_successful_search_reports_ok_status():
    provider = FakeProvider(SourcePlatform.MODRINTH, hits=[modrinth_hit("mr-1", "Pack")], total_hits=42)

    page, status = await run_provider_with_status(provider, _query())

    assert len(page.hits) == 1
    assert status.status == "ok"
    assert status.result_count == 1
    assert status.total_hits == 42
    assert status.latency_ms is not None
    assert provider.search_calls[0]["query"] == "sky"


@pytest.mark.asyncio
async def test_error_becomes_empty_page_with_error_status():
    provider = FakeProvider(SourcePlatform.MODRINTH, error=ValueError("bad payload"))

    page, status = await run_provider_with_status(provider, _query())

    assert page.hits == []
    assert status.status == "error"
    assert "ValueError: bad payload" in status.message


@pytest.mark.asyncio
async def test_timeout_becomes_timeout_status():
    provider = FakeProvider(SourcePlatform.MODRINTH, delay=5.0)

    page, status = await run_provider_with_status(provider, _query(), timeout_seconds=0.05)

    assert page.hits == []
    assert status.status == "timeout"
    assert provider.cancelled


@pytest.mark.asyncio
async def test_raise_errors_wraps_failures():
    provider = FakeProvider(SourcePlatform.MODRINTH, error=KeyError("hits"))

    with pytest.raises(SourceUnavailableError) as exc_info:
        await run_provider_with_status(provider, _query(), raise_errors=True)

    assert exc_info.value.source == "modrinth"
    assert isinstance(exc_info.value.cause, KeyError)


@pytest.mark.asyncio
async def test_raise_errors_keeps_source_unavailable_as_is():
    original = SourceUnavailableError("CurseForge API key not configured", source="curseforge")
    provider = FakeProvider(SourcePlatform.MODRINTH, error=original)

    with pytest.raises(SourceUnavailableError) as exc_info:
        await run_provider_with_status(provider, _query(), raise_errors=True)

    assert exc_info.value is original


def test_skipped_status():
    status = skipped_status(_query(limit=0))

    assert status.status == "skipped"
    assert status.provider_id is SourcePlatform.MODRINTH
