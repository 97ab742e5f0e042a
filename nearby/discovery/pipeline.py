from __future__ import annotations

import logging
from typing import Iterator

from ..errors import NearbyError, Superseded
from .config import DEFAULT_DISCOVERY_CONFIG, DiscoveryConfig
from .geocoder import Geocoder
from .models import GeoLocation, SearchQuery, SearchResult, SortKey
from .poi_provider import POIProvider
from .ranking import dedupe, normalize_batch, sort_places
from .supersession import Debouncer, SupersessionGuard

logger = logging.getLogger(__name__)


def status_label(category: str, city: str) -> str:
    """``"hospital", "Mangalore"`` -> ``"Hospitals in Mangalore"``."""
    return f"{category[:1].upper()}{category[1:]}s in {city}"


class DiscoveryPipeline:
    """Geocoder -> POI provider -> ranking, one visible result set per client.

    A newer ``run`` for the same client supersedes any run still in flight:
    the older one raises ``Superseded`` and never replaces the published
    result set. A failed run leaves the previous result set untouched.

    Published results live in process memory, one entry per client key, and
    are replaced rather than accumulated.
    """

    def __init__(
        self,
        geocoder: Geocoder,
        provider: POIProvider,
        config: DiscoveryConfig = DEFAULT_DISCOVERY_CONFIG,
    ) -> None:
        self._geocoder = geocoder
        self._provider = provider
        self._config = config
        self._anchor = GeoLocation(lat=config.anchor_lat, lon=config.anchor_lon)
        self._guard = SupersessionGuard()
        self._suggestions = Debouncer(config.debounce_seconds)
        self._results: dict[str, SearchResult] = {}

    @property
    def anchor(self) -> GeoLocation:
        return self._anchor

    async def run(self, client_key: str, query: SearchQuery) -> SearchResult:
        token = self._guard.issue(client_key)
        try:
            location = await self._geocoder.resolve(query.city)
            self._guard.check(client_key, token)

            records = await self._provider.search(
                query.category,
                location.box,
                limit=self._config.max_results,
                center=location.center,
            )
            self._guard.check(client_key, token)
        except Superseded:
            raise
        except NearbyError:
            # A stale run's failure is as irrelevant as its results.
            if not self._guard.is_current(client_key, token):
                raise Superseded()
            logger.info("Search for %r (%s) failed", query.city, query.category)
            raise

        places = dedupe(normalize_batch(records, self._anchor, query.category, query.city))
        result = SearchResult(
            status=status_label(query.category, query.city),
            city=query.city,
            category=query.category,
            sort=query.sort,
            total=len(places),
            places=sort_places(places, query.sort),
        )
        self._results[client_key] = result
        return result

    def current(self, client_key: str) -> SearchResult | None:
        return self._results.get(client_key)

    def resort(self, client_key: str, sort_key: SortKey) -> SearchResult | None:
        """Reorder the published result set without querying upstream again."""
        result = self._results.get(client_key)
        if result is None:
            return None
        resorted = result.model_copy(
            update={"sort": sort_key, "places": sort_places(result.places, sort_key)}
        )
        self._results[client_key] = resorted
        return resorted

    async def suggest(self, client_key: str, partial_text: str) -> Iterator[str]:
        """Debounced, last-call-wins autocomplete for one client."""
        return await self._suggestions.run(
            client_key, lambda: self._geocoder.suggest(partial_text)
        )
