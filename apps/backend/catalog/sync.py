"""Reconcile one upstream catalog page into the local store."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from functools import reduce
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from catalog.cache import ResponseCache
from catalog.constants import PLATFORM_REGISTRY_ENTRIES
from catalog.metrics import log_sync_complete, log_sync_failed
from catalog.models import (
    EPOCH,
    SEARCH_CACHE_PREFIX,
    CatalogEntry,
    ListingPage,
    RawRecord,
    SortKey,
    SourcePlatform,
    SyncOutcome,
)
from catalog.normalizers import normalize
from catalog.platforms import PlatformRegistry
from catalog.providers.base import CatalogProvider
from catalog.store import CatalogStore
from exceptions import (
    EmptyUpstreamPageError,
    ItemUpsertFailedError,
    ModpackIndexError,
    SourceUnavailableError,
    ValidationError,
)
from observability.logging import log_context

logger = logging.getLogger(__name__)

SYNC_SORT_KEY = SortKey.DOWNLOADS
SYNC_SORT_ORDER = "desc"


@dataclass(frozen=True)
class ItemUpsertResult:
    """Outcome of upserting one upstream item."""

    title: str
    error: Optional[ItemUpsertFailedError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class SyncTally:
    """Immutable accumulator for the sync fold."""

    succeeded: int = 0
    failed: int = 0
    errors: Tuple[str, ...] = field(default_factory=tuple)

    def add(self, result: ItemUpsertResult) -> "SyncTally":
        if result.ok:
            return SyncTally(self.succeeded + 1, self.failed, self.errors)
        return SyncTally(self.succeeded, self.failed + 1, self.errors + (result.error.message,))

    @property
    def attempted(self) -> int:
        return self.succeeded + self.failed


def fold_upsert_results(results: Iterable[ItemUpsertResult]) -> SyncTally:
    """Pure fold of per-item results, in processing order."""
    return reduce(SyncTally.add, results, SyncTally())


def outcome_from_tally(
    platform_name: str,
    tally: SyncTally,
    total_attempted: int,
    completed_at: Optional[datetime] = None,
) -> SyncOutcome:
    return SyncOutcome(
        platform_name=platform_name,
        succeeded_count=tally.succeeded,
        failed_count=tally.failed,
        total_attempted=total_attempted,
        per_item_errors=list(tally.errors),
        completed_at=completed_at or datetime.now(timezone.utc),
    )


def resolve_sync_platform(name: str) -> SourcePlatform:
    """Map "Modrinth"/"modrinth"/"CurseForge"/... onto a syncable platform."""
    wanted = (name or "").strip().casefold()
    for platform, (display_name, _) in PLATFORM_REGISTRY_ENTRIES.items():
        if wanted in (platform.value, display_name.casefold()):
            return platform
    raise ValidationError(
        f"Unknown or unsyncable platform: {name!r}",
        detail={"platform": name, "allowed": [entry[0] for entry in PLATFORM_REGISTRY_ENTRIES.values()]},
    )


def modpack_fields(entry: CatalogEntry) -> Dict[str, Any]:
    """Column values persisted for a normalized entry."""
    return {
        "name": entry.title,
        "slug": entry.slug,
        "description": entry.description,
        "author": entry.author,
        "icon_url": entry.icon_url,
        "download_count": entry.download_count,
        "follow_count": entry.follow_count,
        "minecraft_version": entry.latest_game_version,
        "mod_loader": entry.mod_loader.value if entry.mod_loader else None,
        "version": entry.version,
        "categories": list(entry.categories),
        "last_updated": entry.last_modified if entry.last_modified != EPOCH else None,
    }


def sync_failure_response(error: ModpackIndexError, platform_name: str) -> Dict[str, Any]:
    if error.cause is not None:
        details = f"{type(error.cause).__name__}: {error.cause}"
    else:
        details = error.message
    return {
        "success": False,
        "error": error.message,
        "kind": error.kind.value,
        "details": details,
        "platform": platform_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


class CatalogSyncService:
    """Pulls one page from an upstream catalog and upserts every item sequentially."""

    def __init__(
        self,
        providers: Mapping[SourcePlatform, CatalogProvider],
        store: CatalogStore,
        *,
        registry: Optional[PlatformRegistry] = None,
        cache: Optional[ResponseCache] = None,
    ):
        self.providers = dict(providers)
        self.store = store
        self.registry = registry or PlatformRegistry(store)
        self.cache = cache

    async def _fetch_page(self, platform: SourcePlatform, page_size: int) -> ListingPage:
        provider = self.providers.get(platform)
        if provider is None:
            raise SourceUnavailableError(
                f"{platform.display_name} source is not configured", source=platform.value
            )
        try:
            return await provider.page(SYNC_SORT_KEY, SYNC_SORT_ORDER, page_size, 0)
        except SourceUnavailableError:
            raise
        except Exception as e:
            raise SourceUnavailableError(
                f"Failed to fetch {platform.display_name} page: {e}", source=platform.value, cause=e
            ) from e

    async def _upsert_item(self, platform: SourcePlatform, platform_id: int, raw: RawRecord) -> ItemUpsertResult:
        try:
            entry = normalize(platform, raw)
        except Exception as e:
            logger.warning("Modpack record unreadable", extra={"error": str(e)})
            return ItemUpsertResult("unknown", ItemUpsertFailedError("unknown", cause=e))
        title = entry.title or entry.external_id or "unknown"
        if not entry.external_id:
            return ItemUpsertResult(title, ItemUpsertFailedError(title, cause=ValueError("missing external id")))
        try:
            await self.store.upsert_modpack(platform_id, entry.external_id, modpack_fields(entry))
        except Exception as e:
            logger.warning(
                "Modpack upsert failed",
                extra={"platform": platform.value, "external_id": entry.external_id, "error": str(e)},
            )
            return ItemUpsertResult(title, ItemUpsertFailedError(title, cause=e))
        return ItemUpsertResult(title)

    async def reconcile(self, platform_name: str, page_size: int) -> SyncOutcome:
        """Upsert the top `page_size` upstream modpacks by downloads.

        Raises (no partial outcome) when the platform row cannot be written,
        the page fetch fails or the page is empty. Per-item failures are
        recorded in the outcome and never stop the batch.
        """
        if page_size <= 0:
            raise ValidationError("pageSize must be positive", detail={"pageSize": page_size})
        platform = resolve_sync_platform(platform_name)
        display_name, _ = PLATFORM_REGISTRY_ENTRIES[platform]

        with log_context(platform=display_name, sync_id=uuid.uuid4().hex[:12]):
            return await self._reconcile(platform, page_size)

    async def _reconcile(self, platform: SourcePlatform, page_size: int) -> SyncOutcome:
        display_name, base_url = PLATFORM_REGISTRY_ENTRIES[platform]
        started = time.monotonic()
        try:
            platform_record = await self.registry.ensure_platform(display_name, base_url)
            page = await self._fetch_page(platform, page_size)
            if not page.items:
                raise EmptyUpstreamPageError(display_name)
        except ModpackIndexError as e:
            log_sync_failed(display_name, e.kind.value, e.message)
            raise

        items = page.items[:page_size]
        logger.info("Sync started", extra={"event": "sync_start", "items": len(items)})

        # Items commit one at a time; results cover exactly the processed prefix
        results: List[ItemUpsertResult] = []
        try:
            for raw in items:
                results.append(await self._upsert_item(platform, platform_record.id, raw))
        except asyncio.CancelledError:
            tally = fold_upsert_results(results)
            logger.warning(
                "Sync cancelled",
                extra={
                    "event": "sync_cancelled",
                    "processed": tally.attempted,
                    "succeeded": tally.succeeded,
                    "failed": tally.failed,
                },
            )
            raise

        outcome = outcome_from_tally(display_name, fold_upsert_results(results), len(items))
        log_sync_complete(
            display_name,
            outcome.succeeded_count,
            outcome.failed_count,
            outcome.total_attempted,
            (time.monotonic() - started) * 1000,
        )

        if self.cache is not None and outcome.succeeded_count:
            await self.cache.invalidate(SEARCH_CACHE_PREFIX)
        return outcome
