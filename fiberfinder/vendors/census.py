"""Client utilities for the US Census Bureau geocoder.

Three lookups are exposed: address to census block, address to coordinates and
coordinates to census block. All of them use the 2020 benchmark and vintage so the
block GEOIDs line up with the provider dataset.
"""

import logging
from typing import Any, Dict, Optional

import requests

from fiberfinder.core.models import Coordinates

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_BASE_URL = "https://geocoding.geo.census.gov/geocoder/geographies"
_BENCHMARK = "2020"
_VINTAGE = "2020"
_BLOCK_LAYERS = ("2020 Census Blocks", "Census Blocks")


class CensusGeocoderError(RuntimeError):
    """Raised when the Census geocoder reports an error instead of a result."""


def _get(path: str, params: Dict[str, Any], timeout: float) -> Dict[str, Any]:
    query = {"benchmark": _BENCHMARK, "vintage": _VINTAGE, "format": "json", **params}
    response = _SESSION.get(f"{_BASE_URL}/{path}", params=query, timeout=timeout)
    response.raise_for_status()
    payload = response.json()
    if payload.get("errors"):
        logger.error("%s failed: errors=%s", path, payload.get("errors"))
        raise CensusGeocoderError("; ".join(str(err) for err in payload["errors"]))
    return payload.get("result") or {}


def _block_geoid(geographies: Optional[Dict[str, Any]]) -> Optional[str]:
    for layer in _BLOCK_LAYERS:
        blocks = (geographies or {}).get(layer) or []
        if blocks and blocks[0].get("GEOID"):
            return str(blocks[0]["GEOID"])
    return None


def geocode_address(address: str, timeout: float = 10) -> Optional[str]:
    """Return the block GEOID of the first address match, or ``None``."""
    result = _get("onelineaddress", {"address": address, "layers": "all"}, timeout)
    matches = result.get("addressMatches") or []
    if not matches:
        return None
    return _block_geoid(matches[0].get("geographies"))


def geocode_coordinates(address: str, timeout: float = 10) -> Optional[Coordinates]:
    result = _get("onelineaddress", {"address": address}, timeout)
    matches = result.get("addressMatches") or []
    if not matches:
        return None
    coords = matches[0].get("coordinates") or {}
    if coords.get("x") is None or coords.get("y") is None:
        return None
    return Coordinates(lat=float(coords["y"]), lng=float(coords["x"]))


def reverse_geocode(coordinates: Coordinates, timeout: float = 10) -> Optional[str]:
    params = {"x": coordinates.lng, "y": coordinates.lat, "layers": "all"}
    result = _get("coordinates", params, timeout)
    return _block_geoid(result.get("geographies"))
