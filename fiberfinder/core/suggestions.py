"""Address autocomplete fanned out over several suggestion sources."""

import logging
import re
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from fiberfinder.core.config import Settings, get_settings
from fiberfinder.core.models import AddressSuggestion
from fiberfinder.etl.transform import (
    google_predictions_to_suggestions,
    mapbox_features_to_suggestions,
    to_suggestion,
)
from fiberfinder.vendors import google_maps, mapbox

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 3

LOCAL_ADDRESSES = (
    "123 Main St, Seattle, WA 98101",
    "456 Broadway Ave, Portland, OR 97201",
    "789 Pine St, San Francisco, CA 94102",
)

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class SuggestionSource:
    name: str
    fetch: Callable[[str, int], List[AddressSuggestion]]


def _dedupe_key(suggestion: AddressSuggestion) -> str:
    return _WHITESPACE_RE.sub(" ", suggestion.formatted_address.lower()).strip()


def merge_suggestions(batches: Sequence[List[AddressSuggestion]], limit: int) -> List[AddressSuggestion]:
    """Concatenate batches in order, keep the first of each normalized address, cut to ``limit``."""
    seen = set()
    merged: List[AddressSuggestion] = []
    for batch in batches:
        for suggestion in batch:
            key = _dedupe_key(suggestion)
            if key in seen:
                continue
            seen.add(key)
            merged.append(suggestion)
    return merged[:limit]


class SuggestionAggregator:
    def __init__(self, sources: Sequence[SuggestionSource], timeout: Optional[float] = None) -> None:
        self._sources = list(sources)
        self._timeout = timeout

    def suggest(self, query: str, limit: int = 5) -> List[AddressSuggestion]:
        if not query or len(query) < MIN_QUERY_LENGTH or limit <= 0 or not self._sources:
            return []

        executor = ThreadPoolExecutor(max_workers=len(self._sources))
        try:
            futures = [executor.submit(source.fetch, query, limit) for source in self._sources]
            # one deadline for the whole join; sources still running contribute nothing
            wait(futures, timeout=self._timeout)
            batches = [self._collect(source, future) for source, future in zip(self._sources, futures)]
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        suggestions = merge_suggestions(batches, limit)
        logger.debug("Returning %d suggestions for query of length %d", len(suggestions), len(query))
        return suggestions

    def _collect(self, source: SuggestionSource, future: Future) -> List[AddressSuggestion]:
        if not future.done():
            logger.warning("Suggestion source %s timed out after %ss", source.name, self._timeout)
            return []
        try:
            return list(future.result() or [])
        except Exception as exc:  # noqa: BLE001
            logger.warning("Suggestion source %s failed: %r", source.name, exc)
            return []


def local_suggestions(query: str, limit: int) -> List[AddressSuggestion]:
    needle = query.lower()
    matches = [address for address in LOCAL_ADDRESSES if needle in address.lower()]
    return [to_suggestion(address, "local") for address in matches[:limit]]


def build_aggregator(settings: Optional[Settings] = None) -> SuggestionAggregator:
    """Google and Mapbox sources when their keys are set, followed by the local list."""
    settings = settings or get_settings()
    timeout = settings.http_timeout
    sources: List[SuggestionSource] = []

    if settings.google_api_key:
        def google_source(query: str, limit: int) -> List[AddressSuggestion]:
            predictions = google_maps.place_autocomplete(query, settings.google_api_key, timeout=timeout)
            return google_predictions_to_suggestions(predictions, limit)

        sources.append(SuggestionSource("google", google_source))

    if settings.mapbox_access_token:
        def mapbox_source(query: str, limit: int) -> List[AddressSuggestion]:
            features = mapbox.forward_geocode(query, settings.mapbox_access_token, limit, timeout=timeout)
            return mapbox_features_to_suggestions(features)

        sources.append(SuggestionSource("mapbox", mapbox_source))

    sources.append(SuggestionSource("local", local_suggestions))
    return SuggestionAggregator(sources, timeout=timeout)
