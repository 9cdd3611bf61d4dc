"""Modrinth v2 search client."""

from __future__ import annotations

import json
import os
from typing import List, Mapping, Optional, Union

import httpx

from catalog.constants import MODRINTH_MODPACK_FACET, MODRINTH_SORT_INDEXES
from catalog.models import ListingPage, SearchPage, SortKey, SourcePlatform
from catalog.normalizers.base import as_int
from catalog.providers.base import HttpCatalogProvider

MODRINTH_API_URL = os.getenv("MODRINTH_API_URL", "https://api.modrinth.com/v2")
MODRINTH_USER_AGENT = os.getenv("MODRINTH_USER_AGENT", "modpack-index/1.0 (https://github.com/modpack-index)")
MODRINTH_MAX_LIMIT = 100


class ModrinthProvider(HttpCatalogProvider):
    platform = SourcePlatform.MODRINTH

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = MODRINTH_API_URL,
        user_agent: str = MODRINTH_USER_AGENT,
    ):
        super().__init__(client, base_url)
        self.user_agent = user_agent

    def _headers(self):
        headers = super()._headers()
        headers["User-Agent"] = self.user_agent
        return headers

    async def search(
        self,
        query: str,
        facets: List[List[str]],
        sort_index: Union[str, int],
        offset: int,
        limit: int,
        *,
        filters: Optional[Mapping[str, Union[str, int]]] = None,
    ) -> SearchPage:
        if not any(MODRINTH_MODPACK_FACET in group for group in facets):
            facets = [[MODRINTH_MODPACK_FACET], *facets]

        params = {
            "query": query,
            "facets": json.dumps(facets),
            "index": str(sort_index),
            "offset": offset,
            "limit": min(limit, MODRINTH_MAX_LIMIT),
        }
        data = await self._get_json("/search", params)

        hits = data.get("hits")
        hits = hits if isinstance(hits, list) else []
        return SearchPage(hits=hits, total_hits=as_int(data.get("total_hits")))

    async def page(
        self,
        sort_field: SortKey,
        sort_order: str,
        page_size: int,
        offset: int,
    ) -> ListingPage:
        # Modrinth indexes are always descending
        result = await self.search(
            "",
            [[MODRINTH_MODPACK_FACET]],
            MODRINTH_SORT_INDEXES[sort_field],
            offset,
            page_size,
        )
        return ListingPage(items=result.hits, total_count=result.total_hits)
