"""Tests for the SQL-backed document store."""

from datetime import datetime, timezone

import pytest

from waterrefill.models.station import Coordinate
from waterrefill.services.document_store import (
    ArrayRemove,
    ArrayUnion,
    DocumentNotFoundError,
    Increment,
    apply_updates,
)


@pytest.mark.asyncio
async def test_set_and_get_preserves_types(document_store):
    """Test geo-points and timestamps come back as the same types."""
    added = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    await document_store.set(
        "refillStations", "s1", {"location": Coordinate(51.5, -0.1), "dateAdded": added, "name": "A"}
    )

    snapshot = await document_store.get("refillStations", "s1")

    assert snapshot.id == "s1"
    assert snapshot.data["location"] == Coordinate(51.5, -0.1)
    assert snapshot.data["dateAdded"] == added
    assert snapshot.data["name"] == "A"


@pytest.mark.asyncio
async def test_get_missing_returns_none(document_store):
    assert await document_store.get("refillStations", "nope") is None


@pytest.mark.asyncio
async def test_update_applies_markers(document_store):
    await document_store.set("users", "u1", {"stationsAdded": 2, "favoriteStations": ["a"]})

    await document_store.update("users", "u1", {"stationsAdded": Increment(1), "favoriteStations": ArrayUnion("a", "b")})
    await document_store.update("users", "u1", {"favoriteStations": ArrayRemove("a")})

    data = (await document_store.get("users", "u1")).data
    assert data["stationsAdded"] == 3
    assert data["favoriteStations"] == ["b"]


@pytest.mark.asyncio
async def test_update_missing_document_raises(document_store):
    with pytest.raises(DocumentNotFoundError):
        await document_store.update("users", "ghost", {"stationsAdded": Increment(1)})


@pytest.mark.asyncio
async def test_delete_is_idempotent(document_store):
    await document_store.set("reviews", "r1", {"rating": 4})

    await document_store.delete("reviews", "r1")
    await document_store.delete("reviews", "r1")

    assert await document_store.get("reviews", "r1") is None


@pytest.mark.asyncio
async def test_where_equal_matches_all_filters(document_store):
    await document_store.set("refillStations", "a", {"addedBy": "u1", "listingType": "user"})
    await document_store.set("refillStations", "b", {"addedBy": "u1", "listingType": "business"})
    await document_store.set("refillStations", "c", {"addedBy": "u2", "listingType": "user"})
    await document_store.set("reviews", "d", {"addedBy": "u1", "listingType": "user"})

    results = await document_store.where_equal("refillStations", addedBy="u1", listingType="user")

    assert [snapshot.id for snapshot in results] == ["a"]


@pytest.mark.asyncio
async def test_geo_range_compares_latitude_first(document_store):
    """Test a geo range keeps every point in the latitude band, whatever its longitude."""
    await document_store.set("refillStations", "inside", {"location": Coordinate(51.50, -0.12)})
    await document_store.set("refillStations", "band", {"location": Coordinate(51.50, 10.0)})
    await document_store.set("refillStations", "north", {"location": Coordinate(52.50, -0.12)})

    results = await document_store.query_range(
        "refillStations", "location", Coordinate(51.49, -0.14), Coordinate(51.52, -0.11)
    )

    assert {snapshot.id for snapshot in results} == {"inside", "band"}


@pytest.mark.asyncio
async def test_geo_range_includes_its_bounds(document_store):
    await document_store.set("refillStations", "lower", {"location": Coordinate(51.49, -0.14)})
    await document_store.set("refillStations", "upper", {"location": Coordinate(51.52, -0.11)})
    await document_store.set("refillStations", "past", {"location": Coordinate(51.52, -0.10)})

    results = await document_store.query_range(
        "refillStations", "location", Coordinate(51.49, -0.14), Coordinate(51.52, -0.11)
    )

    assert {snapshot.id for snapshot in results} == {"lower", "upper"}


@pytest.mark.asyncio
async def test_numeric_range_includes_its_bounds(document_store):
    for doc_id, rating in (("one", 1), ("three", 3), ("five", 5)):
        await document_store.set("reviews", doc_id, {"rating": rating})

    results = await document_store.query_range("reviews", "rating", 3, 5)

    assert {snapshot.id for snapshot in results} == {"three", "five"}


def test_apply_updates_increment_on_missing_field():
    assert apply_updates({}, {"contributions": Increment(-1)}) == {"contributions": -1}
