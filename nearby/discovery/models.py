from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SortKey(str, Enum):
    rating = "rating"
    distance = "distance"
    name = "name"


class GeoLocation(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class BoundingBox(BaseModel):
    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float


class ResolvedLocation(BaseModel):
    center: GeoLocation
    box: BoundingBox
    display_name: str = ""


class RawPOI(BaseModel):
    """One point of interest as returned by the POI index, before ranking."""

    id: str | None = None
    name: str
    type: str | None = None
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)
    locality: str | None = None


class Place(BaseModel):
    id: str
    name: str
    address: str
    category: str
    location: GeoLocation
    distance_km: float = Field(..., ge=0.0)
    rating: float = Field(..., ge=3.7, le=5.0)
    description: str
    directions_url: str


class SearchQuery(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    city: str = Field(..., min_length=1, description="Free-text city or area name")
    category: str = Field(default="hospital", min_length=1)
    sort: SortKey = SortKey.rating


class SearchResult(BaseModel):
    status: str
    city: str
    category: str
    sort: SortKey
    total: int
    places: list[Place]


class SuggestResponse(BaseModel):
    suggestions: list[str]
