from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest

from nearby.discovery.config import DiscoveryConfig
from nearby.discovery.models import BoundingBox, GeoLocation, RawPOI, ResolvedLocation
from nearby.discovery.pipeline import DiscoveryPipeline
from nearby.errors import LocationNotFound

MANGALORE = ResolvedLocation(
    center=GeoLocation(lat=12.9141, lon=74.856),
    box=BoundingBox(min_lat=12.81, min_lon=74.78, max_lat=12.99, max_lon=74.92),
    display_name="Mangaluru, Dakshina Kannada, Karnataka, India",
)

UDUPI = ResolvedLocation(
    center=GeoLocation(lat=13.3409, lon=74.7421),
    box=BoundingBox(min_lat=13.30, min_lon=74.70, max_lat=13.38, max_lon=74.79),
    display_name="Udupi, Karnataka, India",
)

# Ratings: "101" -> 4.0, "202" -> 4.2, "303" -> 4.4
HOSPITALS = [
    RawPOI(id="101", name="City Hospital", type="hospital", lat=12.87, lon=74.84, locality="Mangaluru"),
    RawPOI(id="202", name="Athena Hospital", type="hospital", lat=12.88, lon=74.85),
    RawPOI(id="303", name="Zulekha Clinic", type=None, lat=12.95, lon=74.88, locality="Deralakatte"),
    RawPOI(id="101", name="City Hospital Annex", type="hospital", lat=12.871, lon=74.841),
]


class FakeGeocoder:
    def __init__(self, locations: dict[str, ResolvedLocation] | None = None) -> None:
        self.locations = locations if locations is not None else {"mangalore": MANGALORE, "udupi": UDUPI}
        self.gates: dict[str, asyncio.Event] = {}
        self.error: Exception | None = None
        self.resolve_calls: list[str] = []
        self.suggest_calls: list[str] = []
        self.names = ["Mangalore, Karnataka", "Mangaluru City", "Manipal, Udupi"]

    async def resolve(self, text: str) -> ResolvedLocation:
        self.resolve_calls.append(text)
        gate = self.gates.get(text)
        if gate is not None:
            await gate.wait()
        if self.error is not None:
            raise self.error
        location = self.locations.get(text.strip().lower())
        if location is None:
            raise LocationNotFound()
        return location

    async def suggest(self, partial_text: str):
        self.suggest_calls.append(partial_text)
        text = partial_text.strip().lower()
        if len(text) < 4:
            return iter(())
        return (name for name in self.names if name.lower().startswith(text))


class FakeProvider:
    def __init__(self, records: list[RawPOI] | None = None) -> None:
        self.records = list(HOSPITALS if records is None else records)
        self.error: Exception | None = None
        self.calls: list[tuple[str, BoundingBox]] = []

    async def search(self, category, box, limit=50, center=None):
        self.calls.append((category, box))
        if self.error is not None:
            raise self.error
        return self.records[:limit]


@pytest.fixture
def geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def discovery(geocoder, provider) -> DiscoveryPipeline:
    return DiscoveryPipeline(geocoder, provider, DiscoveryConfig(debounce_seconds=0.01))


@pytest.fixture
def patched_pipeline(discovery):
    with patch("nearby.app.pipeline", discovery):
        yield discovery
