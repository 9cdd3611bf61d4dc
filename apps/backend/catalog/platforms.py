"""Platform registry: one durable platform row per upstream catalog."""

from __future__ import annotations

import logging

from catalog.store import CatalogStore
from models import Platform

logger = logging.getLogger(__name__)


class PlatformRegistry:
    def __init__(self, store: CatalogStore):
        self.store = store

    async def ensure_platform(self, name: str, base_url: str) -> Platform:
        """Idempotent upsert keyed by name; refreshes base_url and updated_at on every call.

        Raises StorageUnavailableError when the store cannot be written.
        """
        platform = await self.store.upsert_platform(name, {"base_url": base_url})
        logger.debug("Platform ensured", extra={"platform": name, "platform_id": platform.id})
        return platform
