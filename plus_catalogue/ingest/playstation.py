"""PlayStation games-list client."""

from __future__ import annotations

import logging

import httpx

from plus_catalogue.errors import FetchError

logger = logging.getLogger(__name__)


class CatalogueClient:
    """Fetches a games list as opaque text so it can be stored unmodified."""

    def __init__(self, *, timeout: float = 30.0, session: httpx.AsyncClient | None = None) -> None:
        self.session = session or httpx.AsyncClient(timeout=timeout)
        self.timeout = timeout

    async def close(self) -> None:
        await self.session.aclose()

    async def fetch_raw(self, url: str) -> str:
        logger.info("Fetching %s", url)
        try:
            response = await self.session.get(
                url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise FetchError(url, f"timed out after {self.timeout}s") from exc
        except httpx.HTTPStatusError as exc:
            raise FetchError(url, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise FetchError(url, str(exc) or exc.__class__.__name__) from exc
        return response.text
