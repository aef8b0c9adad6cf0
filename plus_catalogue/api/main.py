"""FastAPI application serving the catalogue views."""

from __future__ import annotations

import hmac
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import APIRouter, Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from plus_catalogue.db.store import CatalogueStore
from plus_catalogue.errors import ConcurrentRefreshError, UnauthorizedError
from plus_catalogue.ingest import load_sources
from plus_catalogue.ingest.playstation import CatalogueClient
from plus_catalogue.jobs.refresh import Fetcher, RefreshCoordinator
from plus_catalogue.jobs.schedule import ScheduleLoop
from plus_catalogue.logic.cache import ViewCache
from plus_catalogue.logic.views import CatalogueService
from plus_catalogue.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter()

VIEW_LABELS = {
    "included": "included games",
    "classics": "classics",
    "monthly": "monthly games",
    "ubisoft": "ubisoft classics",
}


class RefreshResponse(BaseModel):
    status: str = "OK"
    anyFailed: bool
    statuses: dict[str, str]
    error: str | None = None


def get_catalogue(request: Request) -> CatalogueService:
    return request.app.state.catalogue


def get_coordinator(request: Request) -> RefreshCoordinator:
    return request.app.state.coordinator


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _error(status_code: int, error: str, exc: Exception | None = None) -> JSONResponse:
    content: dict[str, Any] = {"error": error}
    if exc is not None:
        content["details"] = str(exc)
    return JSONResponse(content, status_code=status_code)


def _source_view(catalogue: CatalogueService, key: str) -> JSONResponse:
    try:
        return JSONResponse(catalogue.source_view(key))
    except Exception as exc:
        logger.exception("Failed to build %s view", key)
        return _error(500, f"Failed to load {VIEW_LABELS[key]}", exc)


@router.get("/")
async def about() -> dict[str, str]:
    return {"about": "Retrieve the current PlayStation Plus Extra Catalogue"}


@router.get("/status")
async def status() -> dict[str, str]:
    return {"status": "OK"}


@router.get("/routes")
async def routes(catalogue: CatalogueService = Depends(get_catalogue)) -> dict[str, list[str]]:
    served = ["/all-games"]
    served.extend(source.route for source in sorted(catalogue.sources.values(), key=lambda s: s.route))
    served.extend(["/all-data", "POST /admin/refresh"])
    return {"routes": served}


@router.get("/all-games")
async def all_games(catalogue: CatalogueService = Depends(get_catalogue)) -> JSONResponse:
    try:
        return JSONResponse(catalogue.all_games_view())
    except Exception as exc:
        logger.exception("Failed to build all-games view")
        return _error(500, "Failed to build all-games", exc)


@router.get("/included-classics")
async def included_classics(catalogue: CatalogueService = Depends(get_catalogue)) -> JSONResponse:
    return _source_view(catalogue, "classics")


@router.get("/included-games")
async def included_games(catalogue: CatalogueService = Depends(get_catalogue)) -> JSONResponse:
    return _source_view(catalogue, "included")


@router.get("/monthly-games")
async def monthly_games(catalogue: CatalogueService = Depends(get_catalogue)) -> JSONResponse:
    return _source_view(catalogue, "monthly")


@router.get("/ubisoft-classics")
async def ubisoft_classics(catalogue: CatalogueService = Depends(get_catalogue)) -> JSONResponse:
    return _source_view(catalogue, "ubisoft")


@router.get("/all-data")
async def all_data(catalogue: CatalogueService = Depends(get_catalogue)) -> JSONResponse:
    try:
        return JSONResponse(catalogue.all_data())
    except Exception as exc:
        logger.exception("Failed to load merged snapshot")
        return _error(500, "Failed to load all-data", exc)


def _check_admin_token(token: str | None, expected: str) -> None:
    if not token or not hmac.compare_digest(token.encode(), expected.encode()):
        raise UnauthorizedError("Unauthorized")


@router.post("/admin/refresh", response_model=RefreshResponse, response_model_exclude_none=True)
async def admin_refresh(
    x_admin_token: str | None = Header(default=None),
    coordinator: RefreshCoordinator = Depends(get_coordinator),
    settings: Settings = Depends(get_settings),
) -> RefreshResponse | JSONResponse:
    try:
        _check_admin_token(x_admin_token, settings.admin_token)
        result = await coordinator.refresh_once()
        if result.in_progress:
            raise ConcurrentRefreshError("Refresh already in progress")
    except UnauthorizedError:
        return _error(UnauthorizedError.status_code, "Unauthorized")
    except ConcurrentRefreshError as exc:
        return JSONResponse({"message": str(exc)}, status_code=exc.status_code)
    except Exception as exc:
        logger.exception("Admin refresh failed")
        return _error(500, "Failed to refresh", exc)
    return RefreshResponse(anyFailed=result.any_failed, statuses=result.statuses, error=result.error)


def create_app(settings: Settings | None = None, *, client: Fetcher | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    sources = load_sources(base_url=settings.base_url, locale=settings.locale)
    store = CatalogueStore(settings.data_dir)
    fetcher = client or CatalogueClient(timeout=settings.fetch_timeout)
    cache = ViewCache()
    coordinator = RefreshCoordinator(store, sources, fetcher)
    coordinator.subscribe(cache.handle_refresh)
    schedule = ScheduleLoop(
        coordinator,
        stale_after=settings.stale_after,
        interval=settings.check_interval,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if settings.auto_refresh:
            schedule.start()
        try:
            yield
        finally:
            await schedule.stop()
            if isinstance(fetcher, CatalogueClient):
                await fetcher.close()

    app = FastAPI(title="PlayStation Plus Catalogue", lifespan=lifespan)
    app.state.settings = settings
    app.state.catalogue = CatalogueService(store, sources, cache)
    app.state.coordinator = coordinator
    app.state.schedule = schedule
    app.include_router(router)
    return app


def main() -> None:
    import uvicorn

    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
