"""HTTP entrypoint exposing address search, stats and autocomplete."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict

from flask import Flask, jsonify, request

from fiberfinder.core.config import get_settings
from fiberfinder.core.models import AddressSuggestion
from fiberfinder.core.search import FiberSearch, now_iso, stats_to_dict
from fiberfinder.core.suggestions import MIN_QUERY_LENGTH, SuggestionAggregator, build_aggregator

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)


@lru_cache(maxsize=1)
def get_search() -> FiberSearch:
    return FiberSearch()


@lru_cache(maxsize=1)
def get_suggestions() -> SuggestionAggregator:
    return build_aggregator()


def suggestion_to_dict(suggestion: AddressSuggestion) -> Dict[str, Any]:
    return {
        "formatted_address": suggestion.formatted_address,
        "place_id": suggestion.place_id,
        "components": {
            "street": suggestion.street,
            "city": suggestion.city,
            "state": suggestion.state,
            "zip_code": suggestion.zip_code,
        },
        "source": suggestion.source,
    }


# ---------- Routes ----------


@app.get("/healthz")
def healthcheck() -> Any:
    """Lightweight health endpoint; reads settings only, no DB round trip."""
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "google_configured": bool(settings.google_api_key),
                "mapbox_configured": bool(settings.mapbox_access_token),
            }
        ),
        200,
    )


@app.route("/api/search", methods=["GET", "POST"])
def search() -> Any:
    if request.method == "POST":
        payload: Dict[str, Any] = request.get_json(silent=True) or {}
        address = payload.get("address")
    else:
        address = request.args.get("address")

    if not address or not isinstance(address, str) or not address.strip():
        return jsonify({"error": "address is required and must be a string"}), 400

    try:
        result = get_search().search_address(address)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Search failed: %s", exc)
        return jsonify({"error": "internal error while searching"}), 500

    if result is None:
        return jsonify({"error": "could not find a census block for the provided address"}), 404
    return jsonify(result), 200


@app.get("/api/search-by-geoid")
def search_by_geoid() -> Any:
    geoid = request.args.get("geoid")
    if not geoid:
        return jsonify({"error": "geoid is required"}), 400

    try:
        result = get_search().search_by_geoid(geoid)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Search by GEOID failed: %s", exc)
        return jsonify({"error": "internal error while searching"}), 500
    return jsonify(result), 200


@app.get("/api/stats")
def stats() -> Any:
    state = request.args.get("state")
    geoid = request.args.get("geoid") or None
    aggregator = get_search().aggregator

    try:
        if state:
            providers = aggregator.find_by_state(state)
            return jsonify({"state": state.upper(), "providers": providers, "count": len(providers)}), 200

        result = stats_to_dict(aggregator.compute_stats(geoid))
    except Exception as exc:  # noqa: BLE001
        logger.exception("Stats lookup failed: %s", exc)
        return jsonify({"error": "internal error while fetching stats"}), 500

    result.update(
        scope="location" if geoid else "national",
        geoid=geoid,
        generated_at=now_iso(),
    )
    return jsonify(result), 200


@app.get("/api/autocomplete")
def autocomplete() -> Any:
    query = request.args.get("q")
    if not query:
        return jsonify({"error": 'query parameter "q" is required'}), 400

    if len(query) < MIN_QUERY_LENGTH:
        return jsonify({"suggestions": [], "meta": {"query": query, "count": 0, "min_length": MIN_QUERY_LENGTH}}), 200

    limit_raw = request.args.get("limit")
    try:
        limit = int(limit_raw) if limit_raw else get_settings().suggestion_limit
    except ValueError:
        return jsonify({"error": "limit must be numeric"}), 400
    if limit <= 0:
        return jsonify({"error": "limit must be positive"}), 400

    suggestions = get_suggestions().suggest(query, limit)
    sources = list(dict.fromkeys(suggestion.source for suggestion in suggestions))
    return (
        jsonify(
            {
                "suggestions": [suggestion_to_dict(s) for s in suggestions],
                "meta": {
                    "query": query,
                    "count": len(suggestions),
                    "sources": sources,
                    "searched_at": now_iso(),
                },
            }
        ),
        200,
    )


def main() -> None:
    port = get_settings().server_port
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
