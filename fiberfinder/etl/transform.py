"""Utilities for turning free-text addresses, vendor payloads and DB rows into model objects."""

import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from fiberfinder.core.models import Address, AddressSuggestion, ProviderRecord

logger = logging.getLogger(__name__)

_STATE_ZIP_RE = re.compile(r"^(.+?)\s+(\d{5}(?:-\d{4})?)$")


def parse_address(address: str) -> Address:
    """Split ``"street, city, state zip"`` into components; missing segments stay empty."""
    parts = [part.strip() for part in (address or "").split(",")]

    street = parts[0] if len(parts) >= 1 else ""
    city = parts[1] if len(parts) >= 2 else ""
    state = ""
    zip_code = ""

    if len(parts) >= 3:
        match = _STATE_ZIP_RE.match(parts[2])
        if match:
            state, zip_code = match.group(1), match.group(2)
        else:
            state = parts[2]

    return Address(street=street, city=city, state=state, zip_code=zip_code, full=address)


def to_suggestion(formatted_address: str, source: str, place_id: Optional[str] = None) -> AddressSuggestion:
    address = parse_address(formatted_address)
    return AddressSuggestion(
        formatted_address=formatted_address,
        source=source,
        place_id=place_id,
        street=address.street,
        city=address.city,
        state=address.state,
        zip_code=address.zip_code,
    )


def google_predictions_to_suggestions(predictions: Iterable[Dict[str, Any]], limit: int) -> List[AddressSuggestion]:
    suggestions: List[AddressSuggestion] = []
    for prediction in list(predictions or [])[:limit]:
        description = prediction.get("description")
        if not description:
            logger.debug("Skipping prediction without description: %s", prediction)
            continue
        suggestions.append(to_suggestion(description, "google", place_id=prediction.get("place_id")))
    return suggestions


def mapbox_features_to_suggestions(features: Iterable[Dict[str, Any]]) -> List[AddressSuggestion]:
    return [
        to_suggestion(feature["place_name"], "mapbox")
        for feature in features or []
        if feature.get("place_name")
    ]


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def to_provider_record(row: Mapping[str, Any]) -> ProviderRecord:
    return ProviderRecord(
        frn=str(row.get("frn") or ""),
        provider_id=str(row.get("provider_id") or ""),
        brand_name=str(row.get("brand_name") or ""),
        location_id=str(row.get("location_id") or ""),
        technology=_as_int(row.get("technology")),
        max_advertised_download_speed=_as_int(row.get("max_advertised_download_speed")),
        max_advertised_upload_speed=_as_int(row.get("max_advertised_upload_speed")),
        low_latency=bool(_as_int(row.get("low_latency"))),
        business_residential_code=str(row.get("business_residential_code") or ""),
        state_usps=str(row.get("state_usps") or ""),
        block_geoid=str(row.get("block_geoid") or ""),
        h3_res8_id=str(row.get("h3_res8_id") or ""),
    )
