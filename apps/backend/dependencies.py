"""
Centralized FastAPI dependencies for the catalog services.

Long-lived resources (HTTP client, response cache, store) are owned by the
application and created in main.py's startup hook. Aggregator and sync
service instances are assembled per request from those handles.
"""

from typing import Dict

import httpx
from fastapi import Depends, Request

from catalog.aggregator import CatalogAggregator
from catalog.cache import ResponseCache
from catalog.models import SourcePlatform
from catalog.providers import CatalogProvider, CurseForgeProvider, LocalStoreProvider, ModrinthProvider
from catalog.store import CatalogStore
from catalog.sync import CatalogSyncService
from config import env_float

CATALOG_HTTP_TIMEOUT_SECONDS = env_float("CATALOG_HTTP_TIMEOUT_SECONDS", 10.0)


def build_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=httpx.Timeout(CATALOG_HTTP_TIMEOUT_SECONDS))


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_response_cache(request: Request) -> ResponseCache:
    return request.app.state.response_cache


def get_catalog_store(request: Request) -> CatalogStore:
    return request.app.state.catalog_store


def get_catalog_providers(
    client: httpx.AsyncClient = Depends(get_http_client),
    store: CatalogStore = Depends(get_catalog_store),
) -> Dict[SourcePlatform, CatalogProvider]:
    return {
        SourcePlatform.LOCAL_STORE: LocalStoreProvider(store),
        SourcePlatform.MODRINTH: ModrinthProvider(client),
        SourcePlatform.CURSEFORGE: CurseForgeProvider(client),
    }


def get_catalog_aggregator(
    providers: Dict[SourcePlatform, CatalogProvider] = Depends(get_catalog_providers),
    cache: ResponseCache = Depends(get_response_cache),
) -> CatalogAggregator:
    return CatalogAggregator(providers, cache=cache)


def get_sync_service(
    providers: Dict[SourcePlatform, CatalogProvider] = Depends(get_catalog_providers),
    store: CatalogStore = Depends(get_catalog_store),
    cache: ResponseCache = Depends(get_response_cache),
) -> CatalogSyncService:
    return CatalogSyncService(providers, store, cache=cache)
