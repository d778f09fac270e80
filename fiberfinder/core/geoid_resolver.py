"""Resolve a free-text address to a census block GEOID.

Strategies are tried in order and the first one that yields a valid GEOID wins:

1. Census direct geocoding (address -> block).
2. Coordinates from the configured coordinate lookups (Google first, then Census),
   reverse geocoded through the Census coordinates endpoint.

Every sub-call is isolated: an exception is logged and treated as "no result", so
callers only ever see a ``GeoidResult`` or ``None``.
"""

import logging
from functools import partial
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from fiberfinder.core.config import Settings, get_settings
from fiberfinder.core.models import Coordinates, GeoidResult
from fiberfinder.vendors import census, google_maps

logger = logging.getLogger(__name__)

T = TypeVar("T")

DirectLookup = Callable[[str], Optional[str]]
CoordinateLookup = Callable[[str], Optional[Coordinates]]
ReverseLookup = Callable[[Coordinates], Optional[str]]


def _attempt(name: str, func: Callable[..., Optional[T]], *args) -> Optional[T]:
    try:
        return func(*args)
    except Exception as exc:  # noqa: BLE001
        logger.warning("%s lookup failed: %s", name, exc)
        return None


class GeoidResolver:
    def __init__(
        self,
        direct_lookup: DirectLookup,
        coordinate_lookups: Sequence[Tuple[str, CoordinateLookup]],
        reverse_lookup: ReverseLookup,
    ) -> None:
        self._direct_lookup = direct_lookup
        self._coordinate_lookups = list(coordinate_lookups)
        self._reverse_lookup = reverse_lookup

    def resolve(self, address: str) -> Optional[GeoidResult]:
        address = (address or "").strip()
        if not address:
            return None

        strategies: List[Tuple[str, DirectLookup]] = [
            ("census_direct", self._direct),
            ("coordinates", self._via_coordinates),
        ]
        for name, strategy in strategies:
            geoid = strategy(address)
            if not geoid:
                logger.info("Strategy %s found no census block", name)
                continue
            try:
                result = GeoidResult.from_geoid(geoid)
            except ValueError as exc:
                logger.warning("Strategy %s returned an invalid GEOID: %s", name, exc)
                continue
            logger.info("Resolved block %s via %s", result.block_geoid, name)
            return result

        logger.info("No census block found for address")
        return None

    def _direct(self, address: str) -> Optional[str]:
        return _attempt("census_direct", self._direct_lookup, address)

    def locate(self, address: str) -> Optional[Coordinates]:
        """First coordinates returned by the coordinate lookups, in priority order."""
        for name, lookup in self._coordinate_lookups:
            coordinates = _attempt(name, lookup, address)
            if coordinates is not None:
                logger.debug("Coordinates from %s: %s", name, coordinates)
                return coordinates
        return None

    def _via_coordinates(self, address: str) -> Optional[str]:
        coordinates = self.locate(address)
        if coordinates is None:
            return None
        return _attempt("census_reverse", self._reverse_lookup, coordinates)


def build_resolver(settings: Optional[Settings] = None) -> GeoidResolver:
    """Wire the resolver to the Census and (when a key is configured) Google geocoders."""
    settings = settings or get_settings()
    timeout = settings.http_timeout

    coordinate_lookups: List[Tuple[str, CoordinateLookup]] = []
    if settings.google_api_key:
        coordinate_lookups.append(
            ("google_geocode", partial(google_maps.geocode, api_key=settings.google_api_key, timeout=timeout))
        )
    coordinate_lookups.append(("census_coordinates", partial(census.geocode_coordinates, timeout=timeout)))

    return GeoidResolver(
        direct_lookup=partial(census.geocode_address, timeout=timeout),
        coordinate_lookups=coordinate_lookups,
        reverse_lookup=partial(census.reverse_geocode, timeout=timeout),
    )
