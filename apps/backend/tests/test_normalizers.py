from datetime import datetime, timezone

import pytest

from catalog.models import EPOCH, ModLoader, SourcePlatform
from catalog.normalizers import (
    loader_from_code,
    normalize,
    normalize_results_for_provider,
)

from fakes import curseforge_mod, modrinth_hit, stored_record


def test_modrinth_hit_maps_all_fields():
    entry = normalize(SourcePlatform.MODRINTH, modrinth_hit("abc", "Sky Factory", downloads=1200, follows=30))

    assert entry.external_id == "abc"
    assert entry.platform is SourcePlatform.MODRINTH
    assert entry.title == "Sky Factory"
    assert entry.download_count == 1200
    assert entry.follow_count == 30
    assert entry.mod_loader is ModLoader.FABRIC
    assert entry.latest_game_version == "1.20.1"
    assert entry.categories == ["adventure", "fabric"]
    assert entry.last_modified == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert entry.project_url == "https://modrinth.com/modpack/sky-factory"


def test_curseforge_mod_maps_all_fields():
    entry = normalize(SourcePlatform.CURSEFORGE, curseforge_mod(42, "All The Mods", downloads=5000.0, thumbs_up=9))

    assert entry.external_id == "42"
    assert entry.platform is SourcePlatform.CURSEFORGE
    assert entry.description == "All The Mods pack"
    assert entry.download_count == 5000
    assert entry.follow_count == 9
    assert entry.mod_loader is ModLoader.FORGE
    assert entry.author == "cf-author"
    assert entry.icon_url == "https://media.forgecdn.net/42.png"
    assert entry.categories == ["Skyblock", "Quests"]
    assert entry.version == "v2.1.0"
    assert entry.latest_game_version == "1.20.1"


def test_missing_counts_and_loader_default_to_zero_and_none():
    raw = {"id": 7, "name": "Bare Pack"}

    entry = normalize(SourcePlatform.CURSEFORGE, raw)

    assert entry.download_count == 0
    assert entry.follow_count == 0
    assert entry.mod_loader is None
    assert entry.description == ""
    assert entry.categories == []
    assert entry.last_modified == EPOCH


OUT_OF_RANGE_DATES = ["0001-01-01T00:00:00+01:00", "9999-12-31T23:59:59-05:00"]


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "not a record",
        42,
        ["list"],
        {"downloads": "lots", "follows": -5},
        *(
            {"id": "x", "date_modified": value, "dateModified": value, "last_updated": value}
            for value in OUT_OF_RANGE_DATES
        ),
    ],
)
def test_normalize_is_total(raw):
    for platform in SourcePlatform:
        entry = normalize(platform, raw)
        assert entry.platform is platform
        assert entry.download_count == 0
        assert entry.follow_count == 0


@pytest.mark.parametrize(
    "code,expected",
    [
        (1, ModLoader.FORGE),
        (4, ModLoader.FABRIC),
        (5, ModLoader.QUILT),
        (6, ModLoader.NEOFORGE),
        (0, None),
        (2, None),
        (99, None),
        (None, None),
        ("x", None),
    ],
)
def test_curseforge_loader_codes(code, expected):
    assert loader_from_code(code) is expected


def test_curseforge_loader_taken_from_first_index_with_a_loader():
    raw = curseforge_mod(
        1,
        "Mixed",
        latestFilesIndexes=[
            {"gameVersion": "1.20.4"},
            {"gameVersion": "1.20.1", "modLoader": 6},
        ],
    )

    entry = normalize(SourcePlatform.CURSEFORGE, raw)

    assert entry.mod_loader is ModLoader.NEOFORGE
    assert entry.latest_game_version == "1.20.4"


def test_last_modified_falls_back_to_creation_date():
    raw = modrinth_hit("m1", "Old Pack", date_modified=None)
    entry = normalize(SourcePlatform.MODRINTH, raw)
    assert entry.last_modified == datetime(2023, 1, 1, tzinfo=timezone.utc)

    raw = curseforge_mod(3, "Old CF Pack", dateModified="garbage", dateReleased=None)
    entry = normalize(SourcePlatform.CURSEFORGE, raw)
    assert entry.last_modified == datetime(2022, 6, 1, tzinfo=timezone.utc)


def test_modrinth_without_loader_category_has_no_loader():
    entry = normalize(SourcePlatform.MODRINTH, modrinth_hit("m2", "Vanilla+", categories=["optimization"]))
    assert entry.mod_loader is None


def test_stored_record_keeps_origin_platform_and_maps_loader_case_insensitively():
    updated = datetime(2024, 3, 1, 12, 0)
    raw = stored_record("s1", "Stored Pack", downloads=77, mod_loader="neoforge", updated_at=updated)

    entry = normalize(SourcePlatform.LOCAL_STORE, raw)

    assert entry.platform is SourcePlatform.LOCAL_STORE
    assert entry.origin_platform == "Modrinth"
    assert entry.mod_loader is ModLoader.NEOFORGE
    assert entry.download_count == 77
    # naive timestamps from the store are read as UTC
    assert entry.last_modified == updated.replace(tzinfo=timezone.utc)
    assert entry.to_hit()["platform"] == "Modrinth"
    assert entry.to_hit()["source"] == "database"


def test_normalize_results_for_provider_preserves_order():
    hits = [modrinth_hit(str(i), f"Pack {i}", downloads=i) for i in range(5)]
    entries = normalize_results_for_provider(SourcePlatform.MODRINTH, hits)
    assert [entry.external_id for entry in entries] == ["0", "1", "2", "3", "4"]


@pytest.mark.parametrize("value", OUT_OF_RANGE_DATES)
def test_dates_outside_the_utc_range_fall_back_to_epoch(value):
    entry = normalize(SourcePlatform.MODRINTH, modrinth_hit("x", "Edge", date_modified=value, date_created=value))

    assert entry.last_modified == EPOCH


def test_curseforge_dates_with_short_fractional_seconds_parse():
    entry = normalize(SourcePlatform.CURSEFORGE, curseforge_mod(1, "Short Fraction", dateModified="2024-01-05T17:17:40.38Z"))

    assert entry.last_modified == datetime(2024, 1, 5, 17, 17, 40, 380000, tzinfo=timezone.utc)


def test_fractional_seconds_beyond_microseconds_are_truncated():
    entry = normalize(SourcePlatform.MODRINTH, modrinth_hit("x", "Long Fraction", date_modified="2024-01-05T17:17:40.1234567Z"))

    assert entry.last_modified == datetime(2024, 1, 5, 17, 17, 40, 123456, tzinfo=timezone.utc)
