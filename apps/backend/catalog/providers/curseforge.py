"""CurseForge v1 mod search client."""

from __future__ import annotations

import os
from typing import Dict, List, Mapping, Optional, Union

import httpx

from catalog.constants import (
    CURSEFORGE_MINECRAFT_GAME_ID,
    CURSEFORGE_MODPACK_CLASS_ID,
    CURSEFORGE_SORT_FIELDS,
)
from catalog.models import ListingPage, SearchPage, SortKey, SourcePlatform
from catalog.normalizers.base import as_int, as_mapping
from catalog.providers.base import HttpCatalogProvider
from exceptions import SourceUnavailableError

CURSEFORGE_API_URL = os.getenv("CURSEFORGE_API_URL", "https://api.curseforge.com/v1")
CURSEFORGE_MAX_PAGE_SIZE = 50


class CurseForgeProvider(HttpCatalogProvider):
    platform = SourcePlatform.CURSEFORGE

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: Optional[str] = None,
        base_url: str = CURSEFORGE_API_URL,
    ):
        super().__init__(client, base_url)
        self.api_key = api_key if api_key is not None else os.getenv("CURSEFORGE_API_KEY", "")

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        headers["x-api-key"] = self.api_key
        return headers

    async def _search_mods(self, params: Dict[str, Union[str, int]]) -> SearchPage:
        if not self.api_key:
            raise SourceUnavailableError("CurseForge API key not configured", source=self.platform.value)

        data = await self._get_json("/mods/search", params)
        items = data.get("data")
        items = items if isinstance(items, list) else []
        total = as_int(as_mapping(data.get("pagination")).get("totalCount"))
        return SearchPage(hits=items, total_hits=total)

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
        params: Dict[str, Union[str, int]] = {
            "gameId": CURSEFORGE_MINECRAFT_GAME_ID,
            "classId": CURSEFORGE_MODPACK_CLASS_ID,
            "sortField": sort_index,
            "sortOrder": "desc",
            "index": offset,
            "pageSize": min(limit, CURSEFORGE_MAX_PAGE_SIZE),
        }
        if query:
            params["searchFilter"] = query
        for key, value in (filters or {}).items():
            params[key] = value
        return await self._search_mods(params)

    async def page(
        self,
        sort_field: SortKey,
        sort_order: str,
        page_size: int,
        offset: int,
    ) -> ListingPage:
        result = await self._search_mods(
            {
                "gameId": CURSEFORGE_MINECRAFT_GAME_ID,
                "classId": CURSEFORGE_MODPACK_CLASS_ID,
                "sortField": CURSEFORGE_SORT_FIELDS[sort_field],
                "sortOrder": sort_order,
                "index": offset,
                "pageSize": min(page_size, CURSEFORGE_MAX_PAGE_SIZE),
            }
        )
        return ListingPage(items=result.hits, total_count=result.total_hits)
