"""Provider executors with status instrumentation."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Tuple

from catalog.metrics import log_provider_result
from catalog.models import ProviderQuery, ProviderStatusSnapshot, SearchPage
from exceptions import SourceUnavailableError

if TYPE_CHECKING:
    from catalog.providers.base import CatalogProvider

logger = logging.getLogger(__name__)


async def run_provider_with_status(
    provider: "CatalogProvider",
    provider_query: ProviderQuery,
    *,
    timeout_seconds: float = 8.0,
    raise_errors: bool = False,
) -> Tuple[SearchPage, ProviderStatusSnapshot]:
    """Run one source query under a timeout and report its outcome.

    Failures become an empty page plus an error/timeout snapshot. With
    `raise_errors` they are re-raised as SourceUnavailableError instead.
    Cancellation is never converted.
    """
    provider_id = provider_query.provider_id
    started = time.monotonic()
    try:
        page = await asyncio.wait_for(
            provider.search(
                provider_query.query,
                provider_query.facets,
                provider_query.sort,
                provider_query.offset,
                provider_query.limit,
                filters=provider_query.filters,
            ),
            timeout=timeout_seconds,
        )
    except asyncio.TimeoutError as e:
        elapsed_ms = int((time.monotonic() - started) * 1000)
        message = f"Search timed out after {timeout_seconds}s"
        log_provider_result(provider_id.value, "timeout", 0, elapsed_ms, message)
        if raise_errors:
            raise SourceUnavailableError(message, source=provider_id.value, cause=e) from e
        return SearchPage(), ProviderStatusSnapshot(
            provider_id=provider_id,
            status="timeout",
            latency_ms=elapsed_ms,
            message=message,
        )
    except Exception as e:
        elapsed_ms = int((time.monotonic() - started) * 1000)
        message = f"Search failed: {type(e).__name__}: {str(e)[:200]}"
        log_provider_result(provider_id.value, "error", 0, elapsed_ms, message)
        if raise_errors:
            if isinstance(e, SourceUnavailableError):
                raise
            raise SourceUnavailableError(message, source=provider_id.value, cause=e) from e
        return SearchPage(), ProviderStatusSnapshot(
            provider_id=provider_id,
            status="error",
            latency_ms=elapsed_ms,
            message=message,
        )

    elapsed_ms = int((time.monotonic() - started) * 1000)
    log_provider_result(provider_id.value, "ok", len(page.hits), elapsed_ms)
    return page, ProviderStatusSnapshot(
        provider_id=provider_id,
        status="ok",
        result_count=len(page.hits),
        total_hits=page.total_hits,
        latency_ms=elapsed_ms,
    )


def skipped_status(provider_query: ProviderQuery) -> ProviderStatusSnapshot:
    """Snapshot for a source whose page size rounded down to zero."""
    log_provider_result(provider_query.provider_id.value, "skipped", 0, 0)
    return ProviderStatusSnapshot(
        provider_id=provider_query.provider_id,
        status="skipped",
        message="Page size is zero",
    )
