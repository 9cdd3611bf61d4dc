"""Local store exposed through the source adapter interface."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Union

from catalog.models import ListingPage, SearchPage, SortKey, SourcePlatform
from catalog.providers.base import CatalogProvider
from catalog.store import CatalogStore


class LocalStoreProvider(CatalogProvider):
    platform = SourcePlatform.LOCAL_STORE

    def __init__(self, store: CatalogStore):
        self.store = store

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
        store_filters: Dict[str, Any] = dict(filters or {})
        store_filters["query"] = query
        records, total = await self.store.query(store_filters, SortKey(sort_index), limit, offset)
        return SearchPage(hits=[dict(record) for record in records], total_hits=total)

    async def page(
        self,
        sort_field: SortKey,
        sort_order: str,
        page_size: int,
        offset: int,
    ) -> ListingPage:
        records, total = await self.store.query({}, sort_field, page_size, offset)
        return ListingPage(items=[dict(record) for record in records], total_count=total)
