"""Catalog source providers."""

from catalog.providers.base import CatalogProvider, HttpCatalogProvider
from catalog.providers.curseforge import CurseForgeProvider
from catalog.providers.local import LocalStoreProvider
from catalog.providers.modrinth import ModrinthProvider

__all__ = [
    "CatalogProvider",
    "HttpCatalogProvider",
    "CurseForgeProvider",
    "LocalStoreProvider",
    "ModrinthProvider",
]
