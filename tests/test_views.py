import pytest

from plus_catalogue.errors import NotFoundError, ParseError
from plus_catalogue.logic.cache import ViewCache
from plus_catalogue.logic.views import CatalogueService


def test_source_view_is_sorted_and_mapped(seeded_store, sources):
    service = CatalogueService(seeded_store, sources, ViewCache())
    [view] = service.source_view("included")
    assert view["catalogueName"] == "Playstation Plus Included Games"
    assert view["count"] == 3
    assert [g["name"] for g in view["games"]] == ["Astro Bot", "Returnal", "Zeta"]
    assert set(view["games"][0]) == {
        "id", "conceptId", "name", "nameEn", "gameUrl", "imageUrl", "available_on", "releaseDate",
    }


def test_all_games_dedupes_by_source_priority(seeded_store, sources):
    service = CatalogueService(seeded_store, sources, ViewCache())
    [view] = service.all_games_view()
    by_id = {g["conceptId"]: g for g in view["games"]}
    assert view["catalogueName"] == "All"
    assert view["count"] == 6
    # included beats ubisoft; classics beats ubisoft
    assert by_id["300"]["name"] == "Zeta"
    assert by_id["400"]["name"] == "Far Cry Classic"
    assert [g["name"] for g in view["games"]] == [
        "Ape Escape", "Astro Bot", "Far Cry Classic", "Moonscars", "Returnal", "Zeta",
    ]


def test_views_served_from_cache_until_invalidated(seeded_store, sources):
    cache = ViewCache()
    service = CatalogueService(seeded_store, sources, cache)
    before = service.source_view("monthly")
    seeded_store.write("plus-monthly-games-list.txt", "[]")
    assert service.source_view("monthly") is before
    cache.invalidate_all()
    assert service.source_view("monthly")[0]["count"] == 0


def test_missing_snapshot_raises(store, sources):
    service = CatalogueService(store, sources, ViewCache())
    with pytest.raises(NotFoundError):
        service.source_view("classics")
    with pytest.raises(NotFoundError):
        service.all_data()


def test_malformed_snapshot_raises_parse_error(seeded_store, sources):
    seeded_store.write("plus-classics-list.txt", "{oops")
    service = CatalogueService(seeded_store, sources, ViewCache())
    with pytest.raises(ParseError):
        service.all_games_view()
