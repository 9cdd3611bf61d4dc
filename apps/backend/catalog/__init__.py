"""Catalog aggregation and reconciliation for Minecraft modpacks."""

from catalog.aggregator import CatalogAggregator
from catalog.cache import InMemoryResponseCache, RedisResponseCache, ResponseCache, build_response_cache
from catalog.models import (
    CatalogEntry,
    ModLoader,
    SearchFilters,
    SearchRequest,
    SearchResponse,
    SearchResult,
    SearchScope,
    SortKey,
    SourcePlatform,
    SyncOutcome,
)
from catalog.platforms import PlatformRegistry
from catalog.store import CatalogStore
from catalog.sync import CatalogSyncService, sync_failure_response

__all__ = [
    "CatalogAggregator",
    "CatalogEntry",
    "CatalogStore",
    "CatalogSyncService",
    "InMemoryResponseCache",
    "ModLoader",
    "PlatformRegistry",
    "RedisResponseCache",
    "ResponseCache",
    "SearchFilters",
    "SearchRequest",
    "SearchResponse",
    "SearchResult",
    "SearchScope",
    "SortKey",
    "SourcePlatform",
    "SyncOutcome",
    "build_response_cache",
    "sync_failure_response",
]
