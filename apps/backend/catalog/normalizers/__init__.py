"""Result normalizers: one total function per source, keyed by platform."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List

from catalog.models import CatalogEntry, RawRecord, SourcePlatform
from catalog.normalizers.curseforge import loader_from_code, normalize_curseforge_mod
from catalog.normalizers.local_store import loader_from_name, normalize_stored_modpack
from catalog.normalizers.modrinth import normalize_modrinth_hit

Normalizer = Callable[[RawRecord], CatalogEntry]

NORMALIZER_REGISTRY: Dict[SourcePlatform, Normalizer] = {
    SourcePlatform.LOCAL_STORE: normalize_stored_modpack,
    SourcePlatform.MODRINTH: normalize_modrinth_hit,
    SourcePlatform.CURSEFORGE: normalize_curseforge_mod,
}


def normalize(platform: SourcePlatform, raw: RawRecord) -> CatalogEntry:
    """Map one raw record from `platform` into a CatalogEntry. Never raises on record shape."""
    return NORMALIZER_REGISTRY[SourcePlatform(platform)](raw)


def normalize_results_for_provider(
    platform: SourcePlatform, raws: Iterable[RawRecord]
) -> List[CatalogEntry]:
    normalizer = NORMALIZER_REGISTRY[SourcePlatform(platform)]
    return [normalizer(raw) for raw in raws]


__all__ = [
    "NORMALIZER_REGISTRY",
    "Normalizer",
    "normalize",
    "normalize_results_for_provider",
    "normalize_modrinth_hit",
    "normalize_curseforge_mod",
    "normalize_stored_modpack",
    "loader_from_code",
    "loader_from_name",
]
