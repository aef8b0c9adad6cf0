"""Flattening, ordering and shaping of grouped catalogue snapshots."""

from __future__ import annotations

import functools
from typing import Any, Iterable, Sequence

from pyuca import Collator

from plus_catalogue.logic.ids import derive_id

RawGame = dict[str, Any]
GroupedSnapshot = list[dict[str, Any]]

MERGED_CATALOG_KEY = "ALL"


@functools.lru_cache(maxsize=1)
def _collator() -> Collator:
    return Collator()


def name_key(game: RawGame | None) -> tuple[int, ...]:
    name = (game or {}).get("name") or ""
    return _collator().sort_key(str(name))


def flatten(groups: Iterable[dict[str, Any]] | None) -> list[RawGame]:
    """Concatenate every group's ``games``; ``count`` is ignored."""
    games: list[RawGame] = []
    for group in groups or []:
        games.extend(group.get("games") or [])
    return games


def sort_by_name(games: Sequence[RawGame]) -> list[RawGame]:
    return sorted(games, key=name_key)


def dedupe_by_concept_id(games: Iterable[RawGame]) -> list[RawGame]:
    """Keep the first game seen for each conceptId."""
    seen: dict[Any, RawGame] = {}
    for game in games:
        concept_id = game.get("conceptId")
        if concept_id not in seen:
            seen[concept_id] = game
    return list(seen.values())


def to_public_view(game: RawGame) -> dict[str, Any]:
    return {
        "id": derive_id(game.get("conceptId")),
        "conceptId": game.get("conceptId"),
        "name": game.get("name"),
        "nameEn": game.get("nameEn"),
        "gameUrl": game.get("conceptUrl"),
        "imageUrl": game.get("imageUrl"),
        "available_on": game.get("device"),
        "releaseDate": game.get("releaseDate"),
    }


def build_catalogue(name: str, description: str, games: Sequence[RawGame]) -> list[dict[str, Any]]:
    public = [to_public_view(game) for game in sort_by_name(games)]
    return [
        {
            "catalogueName": name,
            "description": description,
            "count": len(public),
            "games": public,
        }
    ]


def build_merged_snapshot(snapshots: Iterable[GroupedSnapshot]) -> GroupedSnapshot:
    games: list[RawGame] = []
    for snapshot in snapshots:
        games.extend(flatten(snapshot))
    games = sort_by_name(games)
    return [{"catalogKey": MERGED_CATALOG_KEY, "count": len(games), "games": games}]
