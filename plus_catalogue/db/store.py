"""File-backed snapshot persistence."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pendulum

from plus_catalogue.errors import NotFoundError, ParseError
from plus_catalogue.logic.merge import GroupedSnapshot
from plus_catalogue.utils.dates import from_mtime

logger = logging.getLogger(__name__)

MERGED_FILENAME = "all.txt"


class CatalogueStore:
    """One text file per source plus the merged ``all.txt``.

    Source files hold the upstream payload exactly as received. There is a
    single writer (the refresh coordinator). Writes go to a sibling temp file
    that then replaces the target, so readers see the old or the new content.
    """

    def __init__(self, data_dir: Path | str) -> None:
        self.data_dir = Path(data_dir)

    def path_for(self, name: str) -> Path:
        return self.data_dir / name

    def read(self, name: str) -> GroupedSnapshot:
        return parse_snapshot(name, self._read_text(name))

    def write(self, name: str, raw_text: str) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(name)
        tmp = path.with_name(f".{path.name}.tmp")
        with tmp.open("w", encoding="utf-8", newline="") as fh:
            fh.write(raw_text)
        tmp.replace(path)
        logger.debug("Wrote %s (%s chars)", name, len(raw_text))

    def read_merged(self) -> GroupedSnapshot:
        return self.read(MERGED_FILENAME)

    def read_merged_raw(self) -> Any:
        return _decode(MERGED_FILENAME, self._read_text(MERGED_FILENAME))

    def write_merged(self, snapshot: GroupedSnapshot) -> None:
        self.write(MERGED_FILENAME, json.dumps(snapshot, indent=2, ensure_ascii=False))

    def last_modified(self, name: str) -> pendulum.DateTime | None:
        try:
            stat = self.path_for(name).stat()
        except FileNotFoundError:
            return None
        return from_mtime(stat.st_mtime)

    def _read_text(self, name: str) -> str:
        try:
            return self.path_for(name).read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise NotFoundError(f"{name} has not been fetched yet") from exc


def _decode(name: str, text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"{name} is not valid JSON: {exc}") from exc


def parse_snapshot(name: str, text: str) -> GroupedSnapshot:
    """Decode a grouped snapshot, rejecting anything but a JSON list."""
    data = _decode(name, text)
    if not isinstance(data, list):
        raise ParseError(f"{name} does not hold a list of catalogue groups")
    return data
