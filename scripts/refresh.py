"""Run a single catalogue refresh from the command line."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os

from plus_catalogue.db.store import CatalogueStore
from plus_catalogue.ingest import load_sources
from plus_catalogue.ingest.playstation import CatalogueClient
from plus_catalogue.jobs.refresh import RefreshCoordinator
from plus_catalogue.jobs.schedule import stale_sources
from plus_catalogue.settings import Settings


async def main(force: bool) -> int:
    settings = Settings.from_env()
    sources = load_sources(base_url=settings.base_url, locale=settings.locale)
    store = CatalogueStore(settings.data_dir)
    if not force and not stale_sources(store, sources, settings.stale_after):
        print("Snapshots are fresh; use --force to refresh anyway")
        return 0
    client = CatalogueClient(timeout=settings.fetch_timeout)
    try:
        result = await RefreshCoordinator(store, sources, client).refresh_once()
    finally:
        await client.close()
    print(json.dumps(result.to_payload(), indent=2))
    return 1 if result.any_failed or result.error else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--force", action="store_true", help="refresh even if every snapshot is fresh")
    args = parser.parse_args()
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
    raise SystemExit(asyncio.run(main(args.force)))
