"""Modrinth search hit normalizer."""

from __future__ import annotations

from typing import List, Optional

from catalog.constants import MODRINTH_LOADER_CATEGORIES, MODRINTH_PROJECT_URL
from catalog.models import EPOCH, CatalogEntry, ModLoader, ModrinthHit, SourcePlatform
from catalog.normalizers.base import (
    as_int,
    as_mapping,
    as_optional_str,
    as_str,
    as_str_list,
    first_datetime,
)


def _loader_from_categories(categories: List[str]) -> Optional[ModLoader]:
    for category in categories:
        loader = MODRINTH_LOADER_CATEGORIES.get(category.casefold())
        if loader:
            return loader
    return None


def normalize_modrinth_hit(raw: ModrinthHit) -> CatalogEntry:
    """Normalize a single Modrinth `/search` hit (or `/project` payload)."""
    item = as_mapping(raw)

    categories = as_str_list(item.get("categories"))
    loader = _loader_from_categories(categories + as_str_list(item.get("display_categories")))
    if loader is None:
        loader = _loader_from_categories(as_str_list(item.get("loaders")))

    game_versions = as_str_list(item.get("versions")) or as_str_list(item.get("game_versions"))
    latest_game_version = as_optional_str(item.get("latest_version"))
    if latest_game_version is None and game_versions:
        latest_game_version = game_versions[-1]

    slug = as_optional_str(item.get("slug"))
    project_url = f"{MODRINTH_PROJECT_URL}/{slug}" if slug else None

    return CatalogEntry(
        external_id=as_str(item.get("project_id") or item.get("id")),
        platform=SourcePlatform.MODRINTH,
        title=as_str(item.get("title")),
        description=as_str(item.get("description")),
        download_count=as_int(item.get("downloads")),
        follow_count=as_int(item.get("follows") or item.get("followers")),
        icon_url=as_optional_str(item.get("icon_url")),
        last_modified=first_datetime(
            [item.get("date_modified"), item.get("updated"), item.get("date_created"), item.get("published")]
        ) or EPOCH,
        latest_game_version=latest_game_version,
        author=as_optional_str(item.get("author")),
        mod_loader=loader,
        categories=categories,
        slug=slug,
        project_url=project_url,
    )
