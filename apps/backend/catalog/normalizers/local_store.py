"""Local store row normalizer."""

from __future__ import annotations

from typing import Any, Optional

from catalog.models import EPOCH, CatalogEntry, ModLoader, SourcePlatform, StoredModpackRecord
from catalog.normalizers.base import (
    as_int,
    as_mapping,
    as_optional_str,
    as_str,
    as_str_list,
    first_datetime,
)


def loader_from_name(value: Any) -> Optional[ModLoader]:
    name = as_optional_str(value)
    if not name:
        return None
    for loader in ModLoader:
        if loader.value.casefold() == name.casefold():
            return loader
    return None


def normalize_stored_modpack(raw: StoredModpackRecord) -> CatalogEntry:
    item = as_mapping(raw)
    return CatalogEntry(
        external_id=as_str(item.get("external_id")),
        platform=SourcePlatform.LOCAL_STORE,
        title=as_str(item.get("name")),
        description=as_str(item.get("description")),
        download_count=as_int(item.get("download_count")),
        follow_count=as_int(item.get("follow_count")),
        icon_url=as_optional_str(item.get("icon_url")),
        last_modified=first_datetime([item.get("last_updated"), item.get("updated_at")]) or EPOCH,
        latest_game_version=as_optional_str(item.get("minecraft_version")),
        author=as_optional_str(item.get("author")),
        mod_loader=loader_from_name(item.get("mod_loader")),
        categories=as_str_list(item.get("categories")),
        slug=as_optional_str(item.get("slug")),
        origin_platform=as_optional_str(item.get("platform_name")),
        version=as_optional_str(item.get("version")),
    )
