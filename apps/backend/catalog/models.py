"""Typed models for the catalog aggregation and sync pipeline."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, TypedDict, Union

from pydantic import BaseModel, Field, field_validator

ProviderStatus = Literal["ok", "error", "timeout", "skipped"]

SEARCH_CACHE_PREFIX = "search:"


class SourcePlatform(str, Enum):
    """Origin of a catalog entry."""

    LOCAL_STORE = "database"
    MODRINTH = "modrinth"
    CURSEFORGE = "curseforge"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    SourcePlatform.LOCAL_STORE: "Database",
    SourcePlatform.MODRINTH: "Modrinth",
    SourcePlatform.CURSEFORGE: "CurseForge",
}


class ModLoader(str, Enum):
    FORGE = "Forge"
    FABRIC = "Fabric"
    QUILT = "Quilt"
    NEOFORGE = "NeoForge"


class SearchScope(str, Enum):
    ALL = "all"
    LOCAL_STORE = "database"
    MODRINTH = "modrinth"
    CURSEFORGE = "curseforge"

    def platforms(self) -> List[SourcePlatform]:
        """Sources queried for this scope, in fixed merge order."""
        if self is SearchScope.ALL:
            return [SourcePlatform.LOCAL_STORE, SourcePlatform.MODRINTH, SourcePlatform.CURSEFORGE]
        return [SourcePlatform(self.value)]


class SortKey(str, Enum):
    DOWNLOADS = "downloads"
    FOLLOWS = "follows"
    UPDATED = "updated"
    CREATED = "created"


class SearchFilters(BaseModel):
    mod_loader: Optional[ModLoader] = None
    game_version: Optional[str] = None

    @field_validator("mod_loader", mode="before")
    @classmethod
    def _parse_loader(cls, value: Any) -> Optional[ModLoader]:
        if value is None or isinstance(value, ModLoader):
            return value
        text = str(value).strip()
        if not text:
            return None
        for loader in ModLoader:
            if loader.value.casefold() == text.casefold():
                return loader
        raise ValueError(f"unknown mod loader: {value}")

    @field_validator("game_version", mode="before")
    @classmethod
    def _blank_version(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None


class SearchRequest(BaseModel):
    """Normalized search request accepted by the aggregator."""

    query: str = ""
    scope: SearchScope = SearchScope.ALL
    filters: SearchFilters = Field(default_factory=SearchFilters)
    sort_key: SortKey = SortKey.DOWNLOADS
    limit: int = Field(20, gt=0)
    offset: int = Field(0, ge=0)

    @field_validator("query", mode="before")
    @classmethod
    def _strip_query(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    def cache_key(self) -> str:
        digest = hashlib.sha256(self.model_dump_json().encode("utf-8")).hexdigest()
        return f"{SEARCH_CACHE_PREFIX}{digest}"


class ProviderQuery(BaseModel):
    """Source-specific query payload sent to providers."""

    provider_id: SourcePlatform
    query: str = ""
    facets: List[List[str]] = Field(default_factory=list)
    filters: Dict[str, Union[str, int]] = Field(default_factory=dict)
    sort: Union[str, int] = "downloads"
    offset: int = 0
    limit: int = 20


class ProviderStatusSnapshot(BaseModel):
    provider_id: SourcePlatform
    status: ProviderStatus
    result_count: int = 0
    total_hits: int = 0
    latency_ms: Optional[int] = None
    message: Optional[str] = None


# Raw record shapes, one per source. Values are plain dicts at runtime; the
# normalizers coerce every field, so any shape degrades to defaults.


class ModrinthHit(TypedDict, total=False):
    project_id: str
    slug: str
    title: str
    description: str
    author: str
    categories: List[str]
    display_categories: List[str]
    versions: List[str]
    downloads: int
    follows: int
    icon_url: Optional[str]
    date_created: str
    date_modified: str
    latest_version: Optional[str]
    project_type: str


class CurseForgeCategory(TypedDict, total=False):
    id: int
    name: str


class CurseForgeAuthor(TypedDict, total=False):
    id: int
    name: str


class CurseForgeFileIndex(TypedDict, total=False):
    gameVersion: str
    fileId: int
    filename: str
    modLoader: int


class CurseForgeMod(TypedDict, total=False):
    id: int
    name: str
    slug: str
    summary: str
    downloadCount: int
    thumbsUpCount: int
    categories: List[CurseForgeCategory]
    authors: List[CurseForgeAuthor]
    logo: Dict[str, Any]
    links: Dict[str, Any]
    latestFiles: List[Dict[str, Any]]
    latestFilesIndexes: List[CurseForgeFileIndex]
    dateCreated: str
    dateModified: str


class StoredModpackRecord(TypedDict, total=False):
    external_id: str
    name: str
    slug: Optional[str]
    description: Optional[str]
    author: Optional[str]
    icon_url: Optional[str]
    download_count: Optional[int]
    follow_count: Optional[int]
    minecraft_version: Optional[str]
    mod_loader: Optional[str]
    categories: Optional[List[str]]
    last_updated: Optional[datetime]
    updated_at: Optional[datetime]
    version: Optional[str]
    platform_name: Optional[str]


RawRecord = Union[ModrinthHit, CurseForgeMod, StoredModpackRecord]


@dataclass
class SearchPage:
    """Result of a provider `search` call. Hits are passed through unvalidated."""

    hits: List[RawRecord] = field(default_factory=list)
    total_hits: int = 0


@dataclass
class ListingPage:
    """Result of a provider `page` call (sync path)."""

    items: List[RawRecord] = field(default_factory=list)
    total_count: int = 0


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class CatalogEntry(BaseModel):
    """Canonical, source-agnostic modpack listing."""

    external_id: str
    platform: SourcePlatform
    title: str = ""
    description: str = ""
    download_count: int = Field(0, ge=0)
    follow_count: int = Field(0, ge=0)
    icon_url: Optional[str] = None
    last_modified: datetime = EPOCH
    latest_game_version: Optional[str] = None
    author: Optional[str] = None
    mod_loader: Optional[ModLoader] = None
    categories: List[str] = Field(default_factory=list)
    slug: Optional[str] = None
    origin_platform: Optional[str] = None
    project_url: Optional[str] = None
    version: Optional[str] = None

    def to_hit(self) -> Dict[str, Any]:
        """Wire shape returned to search callers."""
        return {
            "project_id": self.external_id,
            "title": self.title,
            "description": self.description,
            "downloads": self.download_count,
            "follows": self.follow_count,
            "icon_url": self.icon_url,
            "date_modified": self.last_modified.isoformat(),
            "latest_version": self.latest_game_version,
            "author": self.author,
            "platform": self.origin_platform or self.platform.display_name,
            "source": self.platform.value,
            "mod_loader": self.mod_loader.value if self.mod_loader else None,
            "categories": list(self.categories),
            "slug": self.slug,
            "project_url": self.project_url,
        }


class SearchResult(BaseModel):
    entries: List[CatalogEntry] = Field(default_factory=list)
    total_count: int = 0
    provider_statuses: List[ProviderStatusSnapshot] = Field(default_factory=list)

    @property
    def all_sources_ok(self) -> bool:
        return all(status.status in ("ok", "skipped") for status in self.provider_statuses)


class SearchResponse(BaseModel):
    """Full search payload returned to API callers."""

    hits: List[Dict[str, Any]] = Field(default_factory=list)
    total_hits: int = 0
    offset: int = 0
    limit: int = 20
    cached: bool = False


class SyncOutcome(BaseModel):
    """Per-run reconciliation report. Never persisted."""

    platform_name: str
    succeeded_count: int = 0
    failed_count: int = 0
    total_attempted: int = 0
    per_item_errors: List[str] = Field(default_factory=list)
    completed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_response(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": True,
            "count": self.succeeded_count,
            "total": self.total_attempted,
            "errors": self.failed_count,
            "platform": self.platform_name,
            "timestamp": self.completed_at.isoformat(),
        }
        if self.per_item_errors:
            payload["errorDetails"] = list(self.per_item_errors)
        return payload
