"""Address search: GEOID resolution followed by provider aggregation."""

import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fiberfinder.core.geoid_resolver import GeoidResolver, build_resolver
from fiberfinder.core.models import ProviderStats
from fiberfinder.core.providers import ProviderAggregator
from fiberfinder.etl.transform import parse_address

logger = logging.getLogger(__name__)


def stats_to_dict(stats: ProviderStats) -> Dict[str, Any]:
    return asdict(stats)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class FiberSearch:
    def __init__(
        self,
        resolver: Optional[GeoidResolver] = None,
        aggregator: Optional[ProviderAggregator] = None,
    ) -> None:
        self.resolver = resolver or build_resolver()
        self.aggregator = aggregator or ProviderAggregator()

    def search_by_geoid(self, block_geoid: str) -> Dict[str, Any]:
        providers = self.aggregator.aggregate_by_geoid(block_geoid)
        stats = self.aggregator.compute_stats(block_geoid)
        return {
            "geoid": block_geoid,
            "providers": [provider.to_dict() for provider in providers],
            "stats": stats_to_dict(stats),
            "meta": {"total_results": len(providers), "searched_at": now_iso()},
        }

    def search_address(self, address: str) -> Optional[Dict[str, Any]]:
        """Full lookup for a free-text address; ``None`` when no census block matches."""
        geoid = self.resolver.resolve(address)
        if geoid is None:
            return None

        payload = self.search_by_geoid(geoid.block_geoid)
        payload["geoid"] = asdict(geoid)
        payload["address"] = asdict(parse_address(address))
        logger.info("Found %d providers for block %s", payload["meta"]["total_results"], geoid.block_geoid)
        return payload
