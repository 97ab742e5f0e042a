from __future__ import annotations

import logging
from typing import Any, Iterator

import httpx

from ..errors import LocationNotFound, UpstreamUnavailable
from .config import DEFAULT_DISCOVERY_CONFIG, DiscoveryConfig
from .models import BoundingBox, GeoLocation, ResolvedLocation

logger = logging.getLogger(__name__)


def _iter_display_names(candidates: list[dict[str, Any]]) -> Iterator[str]:
    for candidate in candidates:
        name = candidate.get("display_name")
        if name:
            yield name


def _parse_candidate(candidate: dict[str, Any]) -> ResolvedLocation:
    """Map a Nominatim result to a location.

    Nominatim reports ``boundingbox`` as ``[minLat, maxLat, minLon, maxLon]``
    with every number encoded as a string.
    """
    lat = float(candidate["lat"])
    lon = float(candidate["lon"])
    south, north, west, east = (float(v) for v in candidate["boundingbox"])
    return ResolvedLocation(
        center=GeoLocation(lat=lat, lon=lon),
        box=BoundingBox(min_lat=south, min_lon=west, max_lat=north, max_lon=east),
        display_name=candidate.get("display_name", ""),
    )


class Geocoder:
    """Adapter over a Nominatim-compatible ``/search`` endpoint."""

    def __init__(
        self,
        config: DiscoveryConfig = DEFAULT_DISCOVERY_CONFIG,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport

    async def _search(self, text: str, limit: int) -> list[dict[str, Any]]:
        params = {"format": "json", "q": text, "limit": limit}
        headers = {"User-Agent": self._config.user_agent, "Accept-Language": "en"}
        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout, transport=self._transport
            ) as client:
                response = await client.get(self._config.geocoder_url, params=params, headers=headers)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError):
            logger.warning("Geocoder lookup failed for %r", text, exc_info=True)
            raise UpstreamUnavailable()

        if not isinstance(data, list):
            logger.warning("Geocoder returned unexpected payload for %r", text)
            raise UpstreamUnavailable()
        return data

    async def suggest(self, partial_text: str) -> Iterator[str]:
        """Return candidate place names for autocomplete.

        Short input is answered with an empty iterator and never reaches the
        upstream service. The returned iterator can be consumed only once.
        """
        text = partial_text.strip()
        if len(text) < self._config.suggest_min_chars:
            return iter(())
        candidates = await self._search(text, self._config.suggest_limit)
        return _iter_display_names(candidates)

    async def resolve(self, text: str) -> ResolvedLocation:
        """Resolve ``text`` to the top-ranked candidate's center and bounding box."""
        candidates = await self._search(text.strip(), 1)
        if not candidates:
            raise LocationNotFound()
        try:
            return _parse_candidate(candidates[0])
        except (KeyError, TypeError, ValueError):
            logger.warning("Geocoder candidate for %r is missing coordinates", text, exc_info=True)
            raise LocationNotFound()
