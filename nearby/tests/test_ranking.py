from __future__ import annotations

import pytest

from nearby.discovery.models import GeoLocation, Place, RawPOI, SortKey
from nearby.discovery.ranking import (
    dedupe,
    distance_km,
    normalize,
    normalize_batch,
    sort_places,
    synth_rating,
)

ANCHOR = GeoLocation(lat=12.8916, lon=74.9872)


def _place(name: str, rating: float = 4.0, distance: float = 1.0, pid: str | None = None) -> Place:
    return Place(
        id=pid or name,
        name=name,
        address="Somewhere",
        category="hospital",
        location=GeoLocation(lat=12.9, lon=74.9),
        distance_km=distance,
        rating=rating,
        description="",
        directions_url="",
    )


# ── Rating ───────────────────────────────────────────────────────────────


def test_rating_known_vectors():
    # "123": 49 + 50 + 51 = 150, 150 % 13 = 7
    assert synth_rating("123") == 4.4
    assert synth_rating(123) == 4.4
    # "A": 65 % 13 = 0
    assert synth_rating("A") == 3.7
    # "101": 146 % 13 = 3
    assert synth_rating("101") == 4.0


def test_rating_range():
    for pid in ["", "x", "osm-1", "9" * 40, "Café", "ホテル"]:
        assert 3.7 <= synth_rating(pid) <= 5.0


def test_rating_deterministic_through_normalize():
    record = RawPOI(id="555123", name="Apollo Clinic", lat=12.9, lon=74.86)
    first = normalize(record, ANCHOR, "clinic", "Mangalore")
    second = normalize(record, ANCHOR, "clinic", "Mangalore")
    assert first.rating == second.rating == synth_rating("555123")


# ── Distance ─────────────────────────────────────────────────────────────


def test_distance_zero_at_anchor():
    assert distance_km(ANCHOR, GeoLocation(lat=12.8916, lon=74.9872)) == 0.0


def test_distance_symmetric():
    other = GeoLocation(lat=13.3409, lon=74.7421)
    assert distance_km(ANCHOR, other) == distance_km(other, ANCHOR)


def test_distance_one_degree_of_latitude():
    # 6371 * pi / 180 = 111.19 km
    assert distance_km(GeoLocation(lat=0, lon=0), GeoLocation(lat=1, lon=0)) == 111.2


# ── Normalize ────────────────────────────────────────────────────────────


def test_normalize_fills_fields():
    record = RawPOI(id="42", name="KMC Hospital", type="hospital", lat=12.8916, lon=74.9872, locality="Attavar")
    place = normalize(record, ANCHOR, "hospital", "Mangalore")
    assert place.id == "42"
    assert place.name == "KMC Hospital"
    assert place.address == "Attavar"
    assert place.category == "hospital"
    assert place.distance_km == 0.0
    assert place.rating == synth_rating("42")
    assert place.description == "KMC Hospital is a verified hospital located in Mangalore."
    assert "destination=12.8916,74.9872" in place.directions_url


def test_normalize_fallbacks():
    record = RawPOI(name="Unnamed Park Gate", lat=12.9, lon=74.9)
    place = normalize(record, ANCHOR, "park", "Udupi")
    assert place.id
    assert place.address == "Udupi"
    assert place.category == "park"


def test_rating_without_upstream_id_is_stable_across_queries():
    record = RawPOI(name="Wenlock Hospital", lat=12.87, lon=74.84)
    ratings = {normalize(record, ANCHOR, "hospital", "Mangalore").rating for _ in range(20)}
    assert ratings == {synth_rating("Wenlock Hospital")}


def test_normalize_batch_generates_distinct_local_ids():
    records = [RawPOI(name=f"Bank {i}", lat=12.9, lon=74.9) for i in range(5)]
    places = normalize_batch(records, ANCHOR, "bank", "Puttur")
    assert len({p.id for p in places}) == 5
    assert [p.name for p in places] == [f"Bank {i}" for i in range(5)]


def test_normalize_batch_empty():
    assert normalize_batch([], ANCHOR, "bank", "Puttur") == []


def test_distance_rounded_to_one_decimal():
    record = RawPOI(id="1", name="Far Away", lat=13.3409, lon=74.7421)
    place = normalize(record, ANCHOR, "park", "Udupi")
    assert place.distance_km == round(place.distance_km, 1)
    assert place.distance_km > 0


# ── Dedupe ───────────────────────────────────────────────────────────────


def test_dedupe_keeps_first():
    places = [_place("A", pid="1"), _place("B", pid="2"), _place("A2", pid="1")]
    assert [p.name for p in dedupe(places)] == ["A", "B"]


# ── Sort ─────────────────────────────────────────────────────────────────


def test_sort_rating_tie_is_stable_and_name_orders():
    places = [_place("B", rating=4.0), _place("A", rating=4.0)]
    assert [p.name for p in sort_places(places, SortKey.rating)] == ["B", "A"]
    assert [p.name for p in sort_places(places, SortKey.name)] == ["A", "B"]


def test_sort_rating_descending():
    places = [_place("x", rating=3.9), _place("y", rating=4.8), _place("z", rating=4.1)]
    assert [p.name for p in sort_places(places, "rating")] == ["y", "z", "x"]


def test_sort_distance_ascending_stable():
    places = [_place("far", distance=9.5), _place("near", distance=0.4), _place("tie", distance=9.5)]
    assert [p.name for p in sort_places(places, SortKey.distance)] == ["near", "far", "tie"]


def test_sort_name_ignores_case_and_accents():
    places = [_place("Zoo"), _place("École"), _place("apollo")]
    assert [p.name for p in sort_places(places, SortKey.name)] == ["apollo", "École", "Zoo"]


def test_sort_does_not_mutate_input():
    places = [_place("b", rating=3.8), _place("a", rating=4.9)]
    sort_places(places, SortKey.rating)
    assert [p.name for p in places] == ["b", "a"]


def test_sort_rejects_unknown_key():
    with pytest.raises(ValueError):
        sort_places([], "popularity")
