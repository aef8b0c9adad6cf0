"""Ingestion data models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Source:
    key: str
    filename: str
    category: str
    route: str
    catalogue_name: str
    description: str
    priority: int
    url: str = ""
