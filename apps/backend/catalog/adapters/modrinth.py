"""Modrinth adapter for provider query mapping."""

from __future__ import annotations

from typing import List

from catalog.adapters.base import ProviderQueryAdapter, build_query_string
from catalog.constants import MODRINTH_MODPACK_FACET, MODRINTH_SORT_INDEXES
from catalog.models import ProviderQuery, SearchRequest, SourcePlatform


class ModrinthQueryAdapter(ProviderQueryAdapter):
    provider_id = SourcePlatform.MODRINTH

    def facets(self, request: SearchRequest) -> List[List[str]]:
        # Outer list is AND, inner lists are OR
        facets = [[MODRINTH_MODPACK_FACET]]
        if request.filters.mod_loader:
            facets.append([f"categories:{request.filters.mod_loader.value.lower()}"])
        if request.filters.game_version:
            facets.append([f"versions:{request.filters.game_version}"])
        return facets

    def build_query(self, request: SearchRequest, limit: int) -> ProviderQuery:
        return ProviderQuery(
            provider_id=self.provider_id,
            query=build_query_string(request),
            facets=self.facets(request),
            sort=MODRINTH_SORT_INDEXES[request.sort_key],
            offset=request.offset,
            limit=limit,
        )
