"""
Ranking for discovered places.

Responsibilities:
- Turn raw POI records into ``Place`` objects anchored at a fixed origin.
- Compute great-circle distances (haversine, R = 6371 km).
- Synthesize a deterministic rating from the upstream id, or the name when there is none.
- Deduplicate by id and sort by rating, distance or name.
"""
from __future__ import annotations

import unicodedata
import uuid

import numpy as np
import pandas as pd

from .models import GeoLocation, Place, RawPOI, SortKey

EARTH_RADIUS_KM = 6371.0

_RAW_COLUMNS = ["id", "name", "type", "lat", "lon", "locality"]


def haversine_km(lat1, lon1, lat2, lon2):
    """Great-circle distance in km; accepts scalars or numpy arrays."""
    lat1, lon1, lat2, lon2 = (np.radians(v) for v in (lat1, lon1, lat2, lon2))
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = np.sin(dlat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2) ** 2
    a = np.clip(a, 0.0, 1.0)
    return EARTH_RADIUS_KM * 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))


def distance_km(anchor: GeoLocation, target: GeoLocation) -> float:
    return round(float(haversine_km(anchor.lat, anchor.lon, target.lat, target.lon)), 1)


def synth_rating(place_id: object) -> float:
    """Rating in [3.7, 4.9] derived from the sum of code points of ``str(place_id)``.

    Not a quality signal, only a stable score: the same id always gets the
    same rating.
    """
    seed = sum(ord(ch) for ch in str(place_id))
    return (37 + seed % 13) / 10


def directions_url(anchor: GeoLocation, target: GeoLocation) -> str:
    return (
        "https://www.google.com/maps/dir/?api=1"
        f"&origin={anchor.lat},{anchor.lon}"
        f"&destination={target.lat},{target.lon}&travelmode=driving"
    )


def _local_id() -> str:
    return f"local-{uuid.uuid4().hex}"


def normalize_batch(
    records: list[RawPOI],
    anchor: GeoLocation,
    category: str,
    query_text: str,
) -> list[Place]:
    """Normalize a provider response into places, preserving record order."""
    if not records:
        return []

    frame = pd.DataFrame([r.model_dump() for r in records], columns=_RAW_COLUMNS)

    has_id = frame["id"].map(lambda rid: isinstance(rid, str) and rid != "")
    # Id-less records are rated by name so the same place scores the same on every query.
    frame["rating"] = frame["id"].where(has_id, frame["name"]).map(synth_rating)
    frame["id"] = [rid if ok else _local_id() for rid, ok in zip(frame["id"], has_id)]
    frame["lat"] = frame["lat"].astype(float)
    frame["lon"] = frame["lon"].astype(float)

    distances = haversine_km(
        anchor.lat, anchor.lon, frame["lat"].to_numpy(), frame["lon"].to_numpy()
    )
    frame["distance_km"] = [round(float(d), 1) for d in distances]

    locality = frame["locality"].fillna("").astype(str).str.strip()
    frame["address"] = locality.mask(locality == "", query_text)
    kind = frame["type"].fillna("").astype(str).str.strip()
    frame["category"] = kind.mask(kind == "", category)

    places: list[Place] = []
    for row in frame.itertuples(index=False):
        location = GeoLocation(lat=row.lat, lon=row.lon)
        places.append(Place(
            id=row.id,
            name=row.name,
            address=row.address,
            category=row.category,
            location=location,
            distance_km=row.distance_km,
            rating=row.rating,
            description=f"{row.name} is a verified {category} located in {query_text}.",
            directions_url=directions_url(anchor, location),
        ))
    return places


def normalize(
    record: RawPOI,
    anchor: GeoLocation,
    category: str,
    query_text: str,
) -> Place:
    return normalize_batch([record], anchor, category, query_text)[0]


def dedupe(places: list[Place]) -> list[Place]:
    """Keep the first place for each id."""
    seen: set[str] = set()
    unique: list[Place] = []
    for place in places:
        if place.id in seen:
            continue
        seen.add(place.id)
        unique.append(place)
    return unique


def _collation_key(name: str) -> tuple[str, str]:
    # Accent- and case-insensitive first, exact text breaks the remaining ties.
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), name


def sort_places(places: list[Place], sort_key: SortKey | str) -> list[Place]:
    """Return a new, stably sorted list."""
    key = SortKey(sort_key)
    if key is SortKey.rating:
        return sorted(places, key=lambda p: -p.rating)
    if key is SortKey.distance:
        return sorted(places, key=lambda p: p.distance_km)
    return sorted(places, key=lambda p: _collation_key(p.name))
