"""Client utilities for the Mapbox forward geocoding API."""

import logging
from typing import Any, Dict, List
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places"


class MapboxError(RuntimeError):
    """Raised when Mapbox answers with an error message instead of features."""


def forward_geocode(query: str, access_token: str, limit: int, timeout: float = 10) -> List[Dict[str, Any]]:
    params = {
        "access_token": access_token,
        "country": "us",
        "types": "address",
        "limit": limit,
    }
    response = _SESSION.get(f"{_BASE_URL}/{quote(query, safe='')}.json", params=params, timeout=timeout)
    response.raise_for_status()
    payload = response.json()
    if "features" not in payload and payload.get("message"):
        logger.error("forward_geocode failed: message=%s", payload.get("message"))
        raise MapboxError(payload["message"])
    return payload.get("features") or []
