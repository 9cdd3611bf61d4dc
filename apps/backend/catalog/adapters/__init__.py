"""Provider query adapter registry."""

from __future__ import annotations

from typing import Dict, List

from catalog.adapters.base import ProviderQueryAdapter
from catalog.adapters.curseforge import CurseForgeQueryAdapter
from catalog.adapters.local_store import LocalStoreQueryAdapter
from catalog.adapters.modrinth import ModrinthQueryAdapter
from catalog.models import ProviderQuery, SearchRequest, SourcePlatform


ADAPTERS: Dict[SourcePlatform, ProviderQueryAdapter] = {
    SourcePlatform.LOCAL_STORE: LocalStoreQueryAdapter(),
    SourcePlatform.MODRINTH: ModrinthQueryAdapter(),
    SourcePlatform.CURSEFORGE: CurseForgeQueryAdapter(),
}


def build_provider_query(
    platform: SourcePlatform, request: SearchRequest, limit: int
) -> ProviderQuery:
    return ADAPTERS[platform].build_query(request, limit)


def available_provider_ids() -> List[SourcePlatform]:
    return list(ADAPTERS.keys())


__all__ = ["ADAPTERS", "ProviderQueryAdapter", "build_provider_query", "available_provider_ids"]
