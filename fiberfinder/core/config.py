"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    database_url: str
    google_api_key: str = ""
    mapbox_access_token: str = ""
    http_timeout: float = 10.0
    server_port: int = 8080
    suggestion_limit: int = 5


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    database_url = os.getenv("DATABASE_URL", "")
    google_api_key = os.getenv("GOOGLE_PLACES_API_KEY") or os.getenv("GEOCODING_API_KEY", "")
    mapbox_access_token = os.getenv("MAPBOX_ACCESS_TOKEN", "")
    http_timeout = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))
    server_port = int(os.getenv("PORT", "8080"))
    suggestion_limit = int(os.getenv("SUGGESTION_LIMIT", "5"))

    if not database_url:
        logger.warning("DATABASE_URL is not set; provider lookups will fail.")
    if not google_api_key:
        logger.warning("GOOGLE_PLACES_API_KEY is not configured; Google geocoding and autocomplete are skipped.")
    if not mapbox_access_token:
        logger.warning("MAPBOX_ACCESS_TOKEN is not configured; Mapbox autocomplete is skipped.")

    return Settings(
        database_url=database_url,
        google_api_key=google_api_key,
        mapbox_access_token=mapbox_access_token,
        http_timeout=http_timeout,
        server_port=server_port,
        suggestion_limit=suggestion_limit,
    )
