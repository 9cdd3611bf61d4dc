"""CurseForge mod normalizer."""

from __future__ import annotations

from typing import Any, Optional

from catalog.constants import CURSEFORGE_LOADER_CODES
from catalog.models import EPOCH, CatalogEntry, CurseForgeMod, ModLoader, SourcePlatform
from catalog.normalizers.base import (
    as_int,
    as_mapping,
    as_optional_str,
    as_str,
    first_datetime,
    first_mapping,
)


def loader_from_code(code: Any) -> Optional[ModLoader]:
    """Fixed numeric-code table; unknown or missing codes map to None."""
    if isinstance(code, bool):
        return None
    try:
        return CURSEFORGE_LOADER_CODES.get(int(code))
    except (TypeError, ValueError, OverflowError):
        return None


def normalize_curseforge_mod(raw: CurseForgeMod) -> CatalogEntry:
    """Normalize a single CurseForge `/mods/search` item."""
    item = as_mapping(raw)

    file_indexes = item.get("latestFilesIndexes")
    if not isinstance(file_indexes, list):
        file_indexes = []
    file_indexes = [as_mapping(index) for index in file_indexes]

    latest_index = file_indexes[0] if file_indexes else {}
    loader_code = next(
        (index.get("modLoader") for index in file_indexes if index.get("modLoader") is not None),
        None,
    )

    categories = item.get("categories")
    category_names = []
    if isinstance(categories, list):
        for category in categories:
            name = as_optional_str(as_mapping(category).get("name"))
            if name:
                category_names.append(name)

    logo = as_mapping(item.get("logo"))
    latest_file = first_mapping(item.get("latestFiles"))

    return CatalogEntry(
        external_id=as_str(item.get("id")),
        platform=SourcePlatform.CURSEFORGE,
        title=as_str(item.get("name")),
        description=as_str(item.get("summary")),
        download_count=as_int(item.get("downloadCount")),
        follow_count=as_int(item.get("thumbsUpCount")),
        icon_url=as_optional_str(logo.get("thumbnailUrl")) or as_optional_str(logo.get("url")),
        last_modified=first_datetime(
            [item.get("dateModified"), item.get("dateReleased"), item.get("dateCreated")]
        ) or EPOCH,
        latest_game_version=as_optional_str(latest_index.get("gameVersion")),
        author=as_optional_str(first_mapping(item.get("authors")).get("name")),
        mod_loader=loader_from_code(loader_code),
        categories=category_names,
        slug=as_optional_str(item.get("slug")),
        project_url=as_optional_str(as_mapping(item.get("links")).get("websiteUrl")),
        version=as_optional_str(latest_file.get("displayName")),
    )
