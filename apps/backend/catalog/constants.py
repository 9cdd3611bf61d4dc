"""Shared constants for the catalog module."""

from catalog.models import ModLoader, SortKey, SourcePlatform

# CurseForge encodes the loader of a file index as an integer
CURSEFORGE_LOADER_CODES = {
    1: ModLoader.FORGE,
    4: ModLoader.FABRIC,
    5: ModLoader.QUILT,
    6: ModLoader.NEOFORGE,
}

# Modrinth reports loaders as plain category slugs
MODRINTH_LOADER_CATEGORIES = {
    "forge": ModLoader.FORGE,
    "fabric": ModLoader.FABRIC,
    "quilt": ModLoader.QUILT,
    "neoforge": ModLoader.NEOFORGE,
}

CURSEFORGE_MINECRAFT_GAME_ID = 432
CURSEFORGE_MODPACK_CLASS_ID = 4471

# CurseForge ModsSearchSortField values
CURSEFORGE_SORT_FIELDS = {
    SortKey.DOWNLOADS: 6,  # TotalDownloads
    SortKey.FOLLOWS: 2,  # Popularity
    SortKey.UPDATED: 3,  # LastUpdated
    SortKey.CREATED: 11,  # ReleasedDate
}

MODRINTH_SORT_INDEXES = {
    SortKey.DOWNLOADS: "downloads",
    SortKey.FOLLOWS: "follows",
    SortKey.UPDATED: "updated",
    SortKey.CREATED: "newest",
}

MODRINTH_MODPACK_FACET = "project_type:modpack"

# Name and public URL recorded in the platform table for each syncable source
PLATFORM_REGISTRY_ENTRIES = {
    SourcePlatform.MODRINTH: ("Modrinth", "https://modrinth.com"),
    SourcePlatform.CURSEFORGE: ("CurseForge", "https://www.curseforge.com"),
}

MODRINTH_PROJECT_URL = "https://modrinth.com/modpack"
