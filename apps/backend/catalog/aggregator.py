"""Federated search across the local store and the upstream catalogs."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from catalog.adapters import build_provider_query
from catalog.cache import SEARCH_CACHE_TTL_SECONDS, ResponseCache
from catalog.executors import run_provider_with_status, skipped_status
from catalog.metrics import SearchMetricsCollector, get_metrics_collector, log_search_start
from catalog.models import (
    CatalogEntry,
    ProviderQuery,
    ProviderStatusSnapshot,
    SearchPage,
    SearchRequest,
    SearchResponse,
    SearchResult,
    SearchScope,
    SortKey,
    SourcePlatform,
)
from catalog.normalizers import normalize_results_for_provider
from catalog.providers.base import CatalogProvider
from config import env_float
from exceptions import SourceUnavailableError
from observability.logging import log_context

logger = logging.getLogger(__name__)

PROVIDER_TIMEOUT_SECONDS = env_float("CATALOG_PROVIDER_TIMEOUT_SECONDS", 8.0)

# Under scope "all" this source gets the full limit; the others get floor(limit / 2)
PRIMARY_SOURCE = SourcePlatform.LOCAL_STORE

SORT_VALUES: Dict[SortKey, Callable[[CatalogEntry], Union[int, datetime]]] = {
    SortKey.DOWNLOADS: lambda entry: entry.download_count,
    SortKey.FOLLOWS: lambda entry: entry.follow_count,
    SortKey.UPDATED: lambda entry: entry.last_modified,
    SortKey.CREATED: lambda entry: entry.last_modified,
}


def page_size_for(platform: SourcePlatform, scope: SearchScope, limit: int) -> int:
    if scope is not SearchScope.ALL or platform is PRIMARY_SOURCE:
        return limit
    return limit // 2


def sort_entries(entries: List[CatalogEntry], sort_key: SortKey) -> List[CatalogEntry]:
    """Stable descending sort; ties keep their merge order."""
    return sorted(entries, key=SORT_VALUES[sort_key], reverse=True)


def dedupe_source_entries(entries: List[CatalogEntry]) -> List[CatalogEntry]:
    """Keep the first entry per external_id within one source's result set."""
    seen = set()
    unique = []
    for entry in entries:
        if entry.external_id in seen:
            continue
        seen.add(entry.external_id)
        unique.append(entry)
    return unique


class CatalogAggregator:
    """Fans a search out to the sources named by the request scope and merges the results."""

    def __init__(
        self,
        providers: Mapping[SourcePlatform, CatalogProvider],
        *,
        cache: Optional[ResponseCache] = None,
        timeout_seconds: float = PROVIDER_TIMEOUT_SECONDS,
        cache_ttl_seconds: int = SEARCH_CACHE_TTL_SECONDS,
        metrics_collector: Optional[SearchMetricsCollector] = None,
    ):
        self.providers = dict(providers)
        self.cache = cache
        self.timeout_seconds = timeout_seconds
        self.cache_ttl_seconds = cache_ttl_seconds
        self.metrics_collector = metrics_collector or get_metrics_collector()

    async def _query_source(
        self, provider_query: ProviderQuery, pinned: bool
    ) -> Tuple[SearchPage, ProviderStatusSnapshot]:
        platform = provider_query.provider_id
        if provider_query.limit <= 0:
            return SearchPage(), skipped_status(provider_query)

        provider = self.providers.get(platform)
        if provider is None:
            message = f"{platform.display_name} source is not configured"
            if pinned:
                raise SourceUnavailableError(message, source=platform.value)
            logger.warning(message, extra={"provider_id": platform.value})
            return SearchPage(), ProviderStatusSnapshot(provider_id=platform, status="error", message=message)

        return await run_provider_with_status(
            provider,
            provider_query,
            timeout_seconds=self.timeout_seconds,
            raise_errors=pinned,
        )

    async def search(self, request: SearchRequest) -> SearchResult:
        """Query every source in scope concurrently, then merge, re-sort and window.

        Under scope "all" a failing source contributes nothing. Under a pinned
        scope its failure raises SourceUnavailableError.
        """
        platforms = request.scope.platforms()
        pinned = len(platforms) == 1

        with log_context(search_scope=request.scope.value), self.metrics_collector.track_search(
            request.query, request.scope.value
        ) as metrics:
            log_search_start(request.query, request.scope.value, [p.value for p in platforms])

            queries = [
                build_provider_query(platform, request, page_size_for(platform, request.scope, request.limit))
                for platform in platforms
            ]
            # gather keeps input order, so merge order never depends on completion order
            outcomes = await asyncio.gather(*(self._query_source(query, pinned) for query in queries))

            entries: List[CatalogEntry] = []
            statuses: List[ProviderStatusSnapshot] = []
            total_count = 0
            for platform, (page, status) in zip(platforms, outcomes):
                statuses.append(status)
                self.metrics_collector.record_provider(
                    metrics,
                    platform.value,
                    status.status,
                    status.result_count,
                    status.total_hits,
                    status.latency_ms or 0,
                    status.message,
                )
                if status.status != "ok":
                    continue
                entries.extend(dedupe_source_entries(normalize_results_for_provider(platform, page.hits)))
                total_count += page.total_hits

            if len(platforms) > 1:
                entries = sort_entries(entries, request.sort_key)
            entries = entries[: request.limit]

            self.metrics_collector.record_results(metrics, len(entries), total_count)

        return SearchResult(entries=entries, total_count=total_count, provider_statuses=statuses)

    async def search_response(self, request: SearchRequest) -> SearchResponse:
        """search() shaped for API callers, served from the response cache when possible.

        Only responses where every queried source succeeded are cached.
        """
        cache_key = request.cache_key()
        if self.cache is not None:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                try:
                    response = SearchResponse.model_validate_json(cached)
                except PydanticValidationError:
                    logger.warning("Discarding unreadable cached search response", extra={"cache_key": cache_key})
                else:
                    response.cached = True
                    self.metrics_collector.record_cache_hit(
                        request.query, request.scope.value, len(response.hits), response.total_hits
                    )
                    return response

        result = await self.search(request)
        response = SearchResponse(
            hits=[entry.to_hit() for entry in result.entries],
            total_hits=result.total_count,
            offset=request.offset,
            limit=request.limit,
        )

        if self.cache is not None and result.all_sources_ok:
            await self.cache.set(cache_key, response.model_dump_json().encode("utf-8"), self.cache_ttl_seconds)
        return response
