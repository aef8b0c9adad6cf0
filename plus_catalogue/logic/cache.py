"""In-memory memoisation of the public catalogue views."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

logger = logging.getLogger(__name__)


class ViewCache:
    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}
        self.invalidations = 0

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get_or_compute(self, key: str, compute: Callable[[], Any]) -> Any:
        if key in self._entries:
            return self._entries[key]
        value = compute()
        self._entries[key] = value
        return value

    def invalidate_all(self) -> None:
        # Replaced wholesale; entries are never dropped one at a time.
        self._entries = {}
        self.invalidations += 1
        logger.info("View cache invalidated")

    def handle_refresh(self, statuses: Mapping[str, str]) -> None:
        self.invalidate_all()
