"""Value types shared by the geocoding and provider lookup pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Union

GEOID_LENGTH = 15


@dataclass(slots=True)
class Address:
    street: str
    city: str
    state: str
    zip_code: str
    full: str


@dataclass(slots=True)
class Coordinates:
    lat: float
    lng: float


@dataclass(frozen=True, slots=True)
class GeoidResult:
    """A census block GEOID and its state/county/tract/block decomposition."""

    block_geoid: str
    state: str
    county: str
    tract: str
    block: str

    @classmethod
    def from_geoid(cls, block_geoid: str) -> "GeoidResult":
        value = str(block_geoid or "").strip()
        if len(value) != GEOID_LENGTH or not value.isdigit():
            raise ValueError(f"block GEOID must be {GEOID_LENGTH} digits, got {block_geoid!r}")
        return cls(
            block_geoid=value,
            state=value[0:2],
            county=value[2:5],
            tract=value[5:11],
            block=value[11:15],
        )


@dataclass(slots=True)
class ProviderRecord:
    """One row of the provider dataset: a (provider, location, plan) triple."""

    frn: str
    provider_id: str
    brand_name: str
    location_id: str
    technology: int
    max_advertised_download_speed: int
    max_advertised_upload_speed: int
    low_latency: bool
    business_residential_code: str
    state_usps: str
    block_geoid: str
    h3_res8_id: str = ""


@dataclass(frozen=True, slots=True)
class SpeedRange:
    min: int
    max: int


Speed = Union[int, SpeedRange]


def _speed_to_json(speed: Speed) -> Any:
    if isinstance(speed, SpeedRange):
        return {"min": speed.min, "max": speed.max}
    return speed


@dataclass(slots=True)
class AggregatedProviderResult:
    provider: ProviderRecord
    download: Speed
    upload: Speed
    technology: str
    availability: str
    plan_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": asdict(self.provider),
            "speeds": {
                "download": _speed_to_json(self.download),
                "upload": _speed_to_json(self.upload),
            },
            "technology": self.technology,
            "availability": self.availability,
            "plan_count": self.plan_count,
        }


@dataclass(frozen=True, slots=True)
class TopProvider:
    name: str
    count: int


@dataclass(slots=True)
class ProviderStats:
    total_providers: int = 0
    average_download_speed: int = 0
    average_upload_speed: int = 0
    top_providers: List[TopProvider] = field(default_factory=list)


@dataclass(slots=True)
class AddressSuggestion:
    """Normalized autocomplete candidate returned by one of the suggestion sources."""

    formatted_address: str
    source: str
    place_id: Optional[str] = None
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
