"""Public catalogue views built from the stored snapshots."""

from __future__ import annotations

from typing import Any, Sequence

from plus_catalogue.db.store import CatalogueStore
from plus_catalogue.ingest import by_priority
from plus_catalogue.ingest.models import Source
from plus_catalogue.logic.cache import ViewCache
from plus_catalogue.logic.merge import build_catalogue, dedupe_by_concept_id, flatten

ALL_GAMES_KEY = "all"
ALL_GAMES_NAME = "All"
ALL_GAMES_DESCRIPTION = "Every game from every catalogue"


class CatalogueService:
    """Serves views from the cache, rebuilding them from disk on a miss."""

    def __init__(self, store: CatalogueStore, sources: Sequence[Source], cache: ViewCache) -> None:
        self.store = store
        self.sources = {source.key: source for source in sources}
        self.cache = cache

    def source_view(self, key: str) -> list[dict[str, Any]]:
        source = self.sources[key]
        return self.cache.get_or_compute(key, lambda: self._build_source_view(source))

    def all_games_view(self) -> list[dict[str, Any]]:
        return self.cache.get_or_compute(ALL_GAMES_KEY, self._build_all_games_view)

    def all_data(self) -> Any:
        return self.store.read_merged_raw()

    def _build_source_view(self, source: Source) -> list[dict[str, Any]]:
        games = flatten(self.store.read(source.filename))
        return build_catalogue(source.catalogue_name, source.description, games)

    def _build_all_games_view(self) -> list[dict[str, Any]]:
        games = []
        for source in by_priority(list(self.sources.values())):
            games.extend(flatten(self.store.read(source.filename)))
        return build_catalogue(ALL_GAMES_NAME, ALL_GAMES_DESCRIPTION, dedupe_by_concept_id(games))
