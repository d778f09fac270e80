"""Collapse per-plan provider rows into provider-level results and dataset statistics."""

import logging
import math
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Sequence

from fiberfinder.core import db
from fiberfinder.core.models import (
    AggregatedProviderResult,
    ProviderRecord,
    ProviderStats,
    Speed,
    SpeedRange,
    TopProvider,
)

logger = logging.getLogger(__name__)

FIBER_MIN_DOWNLOAD = 900
FIBER_MIN_UPLOAD = 900
TOP_PROVIDER_LIMIT = 5

TECHNOLOGY_LABELS: Dict[int, str] = {
    10: "Asymmetric DSL",
    20: "Symmetric DSL",
    30: "Other Copper Wireline",
    40: "Cable Modem DOCSIS 3.0",
    41: "DOCSIS 3.1",
    42: "Cable Modem Other",
    43: "DOCSIS 3.1 and Other",
    50: "Fiber to the End User",
    60: "Satellite",
    70: "Terrestrial Fixed Wireless",
    71: "Licensed Terrestrial Fixed Wireless",
    72: "Licensed-by-Rule Terrestrial Fixed Wireless",
    80: "Terrestrial Mobile Wireless",
    90: "Electric Power Line",
    0: "All Other",
}

AVAILABILITY_LABELS: Dict[str, str] = {
    "R": "Residential Only",
    "B": "Business Only",
    "X": "Residential and Business",
}


def technology_label(code: int) -> str:
    return TECHNOLOGY_LABELS.get(code, f"Technology {code}")


def availability_label(code: Optional[str]) -> str:
    return AVAILABILITY_LABELS.get((code or "").upper(), "Unknown")


def speed_span(values: Sequence[int]) -> Speed:
    low, high = min(values), max(values)
    return high if low == high else SpeedRange(min=low, max=high)


def _round_half_up(value: Optional[float]) -> int:
    return int(math.floor(value + 0.5)) if value else 0


def _is_fiber_class(record: ProviderRecord) -> bool:
    return (
        record.max_advertised_download_speed >= FIBER_MIN_DOWNLOAD
        and record.max_advertised_upload_speed >= FIBER_MIN_UPLOAD
    )


class ProviderAggregator:
    """Read-only view over the provider store.

    ``store`` is anything exposing the query functions of :mod:`fiberfinder.core.db`.
    """

    def __init__(self, store: Any = db) -> None:
        self._store = store

    def aggregate_by_geoid(self, block_geoid: str) -> List[AggregatedProviderResult]:
        rows = self._store.fetch_fiber_rows(block_geoid, FIBER_MIN_DOWNLOAD, FIBER_MIN_UPLOAD)
        rows = [row for row in rows if _is_fiber_class(row)]
        # stable: equal keys keep store order
        rows.sort(key=lambda row: row.max_advertised_download_speed, reverse=True)
        rows.sort(key=lambda row: row.brand_name)

        groups: "OrderedDict[str, List[ProviderRecord]]" = OrderedDict()
        for row in rows:
            key = row.provider_id or row.brand_name
            groups.setdefault(key, []).append(row)

        results = [self._reduce(group) for group in groups.values()]
        logger.info("Aggregated %d rows into %d providers for block %s", len(rows), len(results), block_geoid)
        return results

    @staticmethod
    def _reduce(group: List[ProviderRecord]) -> AggregatedProviderResult:
        representative = group[0]
        return AggregatedProviderResult(
            provider=representative,
            download=speed_span([row.max_advertised_download_speed for row in group]),
            upload=speed_span([row.max_advertised_upload_speed for row in group]),
            technology=technology_label(representative.technology),
            availability=availability_label(representative.business_residential_code),
            plan_count=len(group),
        )

    def compute_stats(self, block_geoid: Optional[str] = None) -> ProviderStats:
        """Counts and averages over one block, or over the whole dataset when no GEOID is given.

        Unlike :meth:`aggregate_by_geoid` no speed threshold is applied.
        """
        total = self._store.count_rows(block_geoid)
        if not total:
            return ProviderStats()

        avg_download, avg_upload = self._store.average_speeds(block_geoid)
        counts = sorted(self._store.brand_counts(block_geoid), key=lambda item: item[1], reverse=True)

        return ProviderStats(
            total_providers=total,
            average_download_speed=_round_half_up(avg_download),
            average_upload_speed=_round_half_up(avg_upload),
            top_providers=[TopProvider(name=name, count=count) for name, count in counts[:TOP_PROVIDER_LIMIT]],
        )

    def find_by_state(self, state_usps: str) -> List[str]:
        state = (state_usps or "").strip().upper()
        if not state:
            return []
        return sorted(set(self._store.fetch_brands_by_state(state)))
