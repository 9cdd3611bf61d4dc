"""CurseForge adapter for provider query mapping."""

from __future__ import annotations

from typing import Dict, Union

from catalog.adapters.base import ProviderQueryAdapter, build_query_string
from catalog.constants import CURSEFORGE_LOADER_CODES, CURSEFORGE_SORT_FIELDS
from catalog.models import ProviderQuery, SearchRequest, SourcePlatform

LOADER_TYPE_BY_NAME = {loader: code for code, loader in CURSEFORGE_LOADER_CODES.items()}


class CurseForgeQueryAdapter(ProviderQueryAdapter):
    provider_id = SourcePlatform.CURSEFORGE

    def build_query(self, request: SearchRequest, limit: int) -> ProviderQuery:
        filters: Dict[str, Union[str, int]] = {}
        if request.filters.mod_loader:
            filters["modLoaderType"] = LOADER_TYPE_BY_NAME[request.filters.mod_loader]
        if request.filters.game_version:
            filters["gameVersion"] = request.filters.game_version

        return ProviderQuery(
            provider_id=self.provider_id,
            query=build_query_string(request),
            filters=filters,
            sort=CURSEFORGE_SORT_FIELDS[request.sort_key],
            offset=request.offset,
            limit=limit,
        )
