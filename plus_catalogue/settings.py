"""Runtime configuration read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://www.playstation.com/bin/imagic/gameslist"
DEFAULT_ADMIN_TOKEN = "dev-admin-token"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class Settings:
    data_dir: Path = Path("full_responses")
    admin_token: str = DEFAULT_ADMIN_TOKEN
    stale_after: timedelta = timedelta(days=3)
    check_interval: timedelta = timedelta(days=1)
    fetch_timeout: float = 30.0
    base_url: str = DEFAULT_BASE_URL
    locale: str = "en-in"
    auto_refresh: bool = True
    host: str = "0.0.0.0"
    port: int = 3000

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            data_dir=Path(os.environ.get("DATA_DIR", "full_responses")),
            admin_token=os.environ.get("ADMIN_TOKEN", DEFAULT_ADMIN_TOKEN),
            stale_after=timedelta(hours=float(os.environ.get("STALE_AFTER_HOURS", 72))),
            check_interval=timedelta(hours=float(os.environ.get("REFRESH_CHECK_HOURS", 24))),
            fetch_timeout=float(os.environ.get("FETCH_TIMEOUT_SECONDS", 30)),
            base_url=os.environ.get("CATALOGUE_BASE_URL", DEFAULT_BASE_URL),
            locale=os.environ.get("CATALOGUE_LOCALE", "en-in"),
            auto_refresh=_env_bool("AUTO_REFRESH_ENABLED", True),
            host=os.environ.get("HOST", "0.0.0.0"),
            port=int(os.environ.get("PORT", 3000)),
        )
