from catalog.adapters import available_provider_ids, build_provider_query
from catalog.models import SearchFilters, SearchRequest, SortKey, SourcePlatform


def test_every_source_has_an_adapter():
    assert set(available_provider_ids()) == set(SourcePlatform)


def test_modrinth_query_without_filters_only_pins_modpacks():
    query = build_provider_query(SourcePlatform.MODRINTH, SearchRequest(query="  all   the  mods "), 10)

    assert query.query == "all the mods"
    assert query.facets == [["project_type:modpack"]]
    assert query.sort == "downloads"
    assert query.limit == 10


def test_modrinth_created_sort_maps_to_newest_index():
    request = SearchRequest(sort_key=SortKey.CREATED, filters=SearchFilters(mod_loader="NeoForge"))

    query = build_provider_query(SourcePlatform.MODRINTH, request, 5)

    assert query.sort == "newest"
    assert query.facets[1] == ["categories:neoforge"]


def test_curseforge_query_maps_sort_and_loader_codes():
    request = SearchRequest(
        sort_key=SortKey.UPDATED,
        filters=SearchFilters(mod_loader="Quilt", game_version="1.18.2"),
        offset=40,
    )

    query = build_provider_query(SourcePlatform.CURSEFORGE, request, 10)

    assert query.sort == 3
    assert query.filters == {"modLoaderType": 5, "gameVersion": "1.18.2"}
    assert query.offset == 40


def test_local_store_query_keeps_sort_key_name():
    query = build_provider_query(SourcePlatform.LOCAL_STORE, SearchRequest(sort_key=SortKey.UPDATED), 20)

    assert query.sort == "updated"
    assert query.filters == {}
    assert query.facets == []
