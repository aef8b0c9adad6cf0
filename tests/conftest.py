import asyncio
import json
from datetime import timedelta

import pytest

from plus_catalogue.db.store import CatalogueStore
from plus_catalogue.ingest import load_sources
from plus_catalogue.settings import Settings


def game(concept_id, name, **extra):
    record = {
        "conceptId": concept_id,
        "name": name,
        "nameEn": name,
        "conceptUrl": f"https://store.example/concept/{concept_id}",
        "imageUrl": f"https://image.example/{concept_id}.png",
        "device": ["PS5"],
        "releaseDate": "2020-01-01T00:00:00Z",
    }
    record.update(extra)
    return record


def grouped(*games, catalog_key="GROUP"):
    return json.dumps([{"catalogKey": catalog_key, "count": len(games), "games": list(games)}])


SNAPSHOTS = {
    "plus-games-list.txt": grouped(game("100", "Returnal"), game("200", "Astro Bot"), game("300", "Zeta")),
    "ubisoft-classics-list.txt": grouped(game("400", "Far Cry"), game("300", "Zeta (Ubisoft)")),
    "plus-classics-list.txt": grouped(game("500", "Ape Escape"), game("400", "Far Cry Classic")),
    "plus-monthly-games-list.txt": grouped(game("600", "Moonscars")),
}


class FakeFetcher:
    """Serves canned payloads keyed by categoryList; ``failing`` raise instead."""

    def __init__(self, payloads=None, failing=(), gate: asyncio.Event | None = None):
        self.payloads = payloads or {}
        self.failing = set(failing)
        self.gate = gate
        self.calls = []

    async def fetch_raw(self, url):
        self.calls.append(url)
        if self.gate is not None:
            await self.gate.wait()
        category = url.rsplit("categoryList=", 1)[-1]
        if category in self.failing:
            raise RuntimeError(f"{category} unavailable")
        return self.payloads.get(category, "[]")


def payloads_by_category():
    return {name.removesuffix(".txt"): text for name, text in SNAPSHOTS.items()}


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        data_dir=tmp_path / "full_responses",
        admin_token="secret-token",
        stale_after=timedelta(days=3),
        check_interval=timedelta(days=1),
        auto_refresh=False,
    )


@pytest.fixture()
def store(settings):
    return CatalogueStore(settings.data_dir)


@pytest.fixture()
def sources():
    return load_sources()


@pytest.fixture()
def seeded_store(store):
    for name, text in SNAPSHOTS.items():
        store.write(name, text)
    return store
