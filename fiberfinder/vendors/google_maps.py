"""Client utilities for the Google Geocoding and Places Autocomplete APIs."""

import logging
from typing import Any, Dict, List, Optional

import requests

from fiberfinder.core.models import Coordinates

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://maps.googleapis.com/maps/api"


class GoogleMapsError(RuntimeError):
    """Raised when a Google Maps API returns a non-successful response."""


def _get(path: str, params: Dict[str, Any], timeout: float) -> Dict[str, Any]:
    response = _SESSION.get(f"{_BASE_URL}/{path}", params=params, timeout=timeout)
    response.raise_for_status()
    payload = response.json()
    status = payload.get("status")
    if status not in {"OK", "ZERO_RESULTS"}:
        logger.error("%s failed: status=%s, error_message=%s", path, status, payload.get("error_message"))
        raise GoogleMapsError(payload.get("error_message") or status)
    return payload


def geocode(address: str, api_key: str, timeout: float = 10) -> Optional[Coordinates]:
    payload = _get("geocode/json", {"address": address, "key": api_key}, timeout)
    results = payload.get("results") or []
    if not results:
        return None
    location = results[0].get("geometry", {}).get("location", {})
    if location.get("lat") is None or location.get("lng") is None:
        return None
    return Coordinates(lat=float(location["lat"]), lng=float(location["lng"]))


def place_autocomplete(query: str, api_key: str, timeout: float = 10) -> List[Dict[str, Any]]:
    params = {
        "input": query,
        "types": "address",
        "components": "country:us",
        "key": api_key,
    }
    payload = _get("place/autocomplete/json", params, timeout)
    return payload.get("predictions") or []
