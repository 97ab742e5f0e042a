from __future__ import annotations

import logging
from typing import Any

import httpx

from ..errors import UpstreamUnavailable
from .config import DEFAULT_DISCOVERY_CONFIG, DiscoveryConfig
from .models import BoundingBox, GeoLocation, RawPOI

logger = logging.getLogger(__name__)


def _parse_feature(feature: dict[str, Any]) -> RawPOI | None:
    """Map a GeoJSON feature to a raw record, or ``None`` if it has no usable name."""
    if not isinstance(feature, dict):
        return None
    props = feature.get("properties") or {}
    name = str(props.get("name") or "").strip()
    if not name:
        return None
    try:
        lon, lat = feature["geometry"]["coordinates"][:2]
        osm_id = props.get("osm_id")
        return RawPOI(
            id=str(osm_id) if osm_id not in (None, "") else None,
            name=name,
            type=props.get("type"),
            lat=float(lat),
            lon=float(lon),
            locality=props.get("city") or props.get("district"),
        )
    except (KeyError, TypeError, ValueError):
        logger.debug("Skipping malformed POI feature %r", props.get("osm_id"))
        return None


class POIProvider:
    """Adapter over a Photon-compatible point-of-interest search endpoint."""

    def __init__(
        self,
        config: DiscoveryConfig = DEFAULT_DISCOVERY_CONFIG,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport

    async def search(
        self,
        category: str,
        box: BoundingBox,
        limit: int = 50,
        center: GeoLocation | None = None,
    ) -> list[RawPOI]:
        limit = max(1, min(limit, self._config.max_results))
        params: dict[str, Any] = {
            "q": category,
            "limit": limit,
            "bbox": f"{box.min_lon},{box.min_lat},{box.max_lon},{box.max_lat}",
        }
        if center is not None:
            params["lat"] = center.lat
            params["lon"] = center.lon

        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout, transport=self._transport
            ) as client:
                response = await client.get(
                    self._config.poi_url,
                    params=params,
                    headers={"User-Agent": self._config.user_agent},
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError):
            logger.warning("POI lookup failed for %r", category, exc_info=True)
            raise UpstreamUnavailable()

        features = data.get("features") if isinstance(data, dict) else None
        if not isinstance(features, list):
            logger.warning("POI index returned unexpected payload for %r", category)
            raise UpstreamUnavailable()

        records: list[RawPOI] = []
        for feature in features:
            record = _parse_feature(feature)
            if record is not None:
                records.append(record)
            if len(records) >= limit:
                break
        return records
