"""Local store adapter: free-text plus loader/version filters on stored rows."""

from __future__ import annotations

from typing import Dict, Union

from catalog.adapters.base import ProviderQueryAdapter, build_query_string
from catalog.models import ProviderQuery, SearchRequest, SourcePlatform


class LocalStoreQueryAdapter(ProviderQueryAdapter):
    provider_id = SourcePlatform.LOCAL_STORE

    def build_query(self, request: SearchRequest, limit: int) -> ProviderQuery:
        filters: Dict[str, Union[str, int]] = {}
        if request.filters.mod_loader:
            filters["mod_loader"] = request.filters.mod_loader.value
        if request.filters.game_version:
            filters["minecraft_version"] = request.filters.game_version

        return ProviderQuery(
            provider_id=self.provider_id,
            query=build_query_string(request),
            filters=filters,
            sort=request.sort_key.value,
            offset=request.offset,
            limit=limit,
        )
