"""Error taxonomy shared by the store, the refresher and the API."""

from __future__ import annotations


class CatalogueError(Exception):
    """Base class; ``status_code`` is what the HTTP boundary reports."""

    status_code = 500


class NotFoundError(CatalogueError):
    pass


class ParseError(CatalogueError):
    pass


class FetchError(CatalogueError):
    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Fetching {url} failed: {reason}")
        self.url = url
        self.reason = reason


class UnauthorizedError(CatalogueError):
    status_code = 401


class ConcurrentRefreshError(CatalogueError):
    """Advisory: a refresh is already running."""

    status_code = 202
