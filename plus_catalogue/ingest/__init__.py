"""Ingestion helpers."""

from __future__ import annotations

import pathlib
from urllib.parse import urlencode

import yaml

from plus_catalogue.ingest.models import Source
from plus_catalogue.settings import DEFAULT_BASE_URL

SOURCES_PATH = pathlib.Path(__file__).with_name("sources.yml")


def source_url(category: str, *, base_url: str = DEFAULT_BASE_URL, locale: str = "en-in") -> str:
    return f"{base_url}?{urlencode({'locale': locale, 'categoryList': category})}"


def load_sources(*, base_url: str = DEFAULT_BASE_URL, locale: str = "en-in") -> list[Source]:
    data = yaml.safe_load(SOURCES_PATH.read_text(encoding="utf-8"))
    return [
        Source(**item, url=source_url(item["category"], base_url=base_url, locale=locale))
        for item in data
    ]


def by_priority(sources: list[Source]) -> list[Source]:
    return sorted(sources, key=lambda source: source.priority)
