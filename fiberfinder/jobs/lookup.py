"""CLI job to look up fiber providers for an address, a census block or a state."""

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from fiberfinder.core.search import FiberSearch, stats_to_dict

logger = logging.getLogger(__name__)


def run_lookup(
    *,
    address: Optional[str],
    geoid: Optional[str],
    state: Optional[str],
    stats: bool,
    search: Optional[FiberSearch] = None,
) -> Any:
    """Dispatch to the requested lookup; returns a JSON-serialisable object or ``None`` when not found."""
    search = search or FiberSearch()

    if state:
        return {"state": state.upper(), "providers": search.aggregator.find_by_state(state)}
    if stats and not address:
        return stats_to_dict(search.aggregator.compute_stats(geoid))
    if geoid:
        return search.search_by_geoid(geoid)

    address = (address or "").strip()
    if not address:
        raise ValueError("An address, --geoid, --state or --stats is required")

    logger.info("Looking up fiber providers for address=%s", address)
    return search.search_address(address)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Find fiber internet providers serving an address")
    parser.add_argument("address", nargs="?", help="Free-text address, e.g. '123 Main St, Seattle, WA 98101'")
    parser.add_argument("--geoid", dest="geoid", help="Look up a 15-digit census block GEOID directly")
    parser.add_argument("--state", dest="state", help="List provider brands in a two-letter state")
    parser.add_argument("--stats", dest="stats", action="store_true", help="Print dataset statistics")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        result = run_lookup(address=args.address, geoid=args.geoid, state=args.state, stats=args.stats)
    except ValueError as exc:
        parser.error(str(exc))
    except Exception as exc:  # noqa: BLE001
        logger.error("Lookup failed: %s", exc, exc_info=True)
        raise SystemExit(1) from exc

    if result is None:
        logger.warning("No census block found for address=%s", args.address)
        raise SystemExit(3)

    json.dump(result, sys.stdout, indent=2)
    sys.stdout.write("\n")


if __name__ == "__main__":
    main()
