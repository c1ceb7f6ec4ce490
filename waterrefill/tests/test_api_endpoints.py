"""Integration tests for API endpoints."""

import json
from datetime import datetime, timezone

import pytest
from httpx import AsyncClient

from waterrefill.models.station import Coordinate, RefillCost
from waterrefill.models.user import UserProfile
from waterrefill.services.station_codec import StationCodec
from waterrefill.services.station_query import STATIONS_COLLECTION
from waterrefill.tests.conftest import LONDON, make_jpeg, make_station

USER = {"X-User-Id": "user-1"}


async def _seed_station(services, **overrides):
    station = make_station(**overrides)
    await services.store.set(STATIONS_COLLECTION, station.id, StationCodec().encode(station))
    return station


async def _seed_user(services, user_id="user-1"):
    await services.users.create_profile(
        UserProfile(id=user_id, email=f"{user_id}@example.com", username=user_id,
                    date_joined=datetime(2024, 1, 1, tzinfo=timezone.utc))
    )


@pytest.mark.asyncio
async def test_root_endpoint(client: AsyncClient):
    """Test the root endpoint."""
    response = await client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert "name" in data
    assert "version" in data
    assert data["status"] == "operational"


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test health check endpoint."""
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_nearby_stations_sorted_by_distance(client: AsyncClient, services):
    await _seed_station(services, name="Farther", coordinate=Coordinate(51.5150, -0.1278))
    await _seed_station(services, name="Closest", coordinate=Coordinate(51.5080, -0.1278))
    await _seed_station(services, name="Other city", coordinate=Coordinate(48.8566, 2.3522))

    response = await client.get("/api/stations/nearby", params={"lat": LONDON.latitude, "lon": LONDON.longitude})

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 2
    assert [s["name"] for s in data["stations"]] == ["Closest", "Farther"]
    assert data["stations"][0]["distance_miles"] < data["stations"][1]["distance_miles"]
    assert data["stations"][0]["marker_color"] == "green"


@pytest.mark.asyncio
async def test_nearby_filters_by_cost(client: AsyncClient, services):
    await _seed_station(services, name="Free")
    await _seed_station(services, name="Paid", cost=RefillCost.PAID)

    response = await client.get(
        "/api/stations/nearby",
        params={"lat": LONDON.latitude, "lon": LONDON.longitude, "costs": ["Paid"]},
    )

    assert [s["name"] for s in response.json()["stations"]] == ["Paid"]


@pytest.mark.asyncio
async def test_nearby_empty_area_message(client: AsyncClient):
    response = await client.get("/api/stations/nearby", params={"lat": 0.0, "lon": 0.0})

    assert response.status_code == 200
    assert response.json()["message"].startswith("No stations found")


@pytest.mark.asyncio
async def test_nearby_rejects_invalid_latitude(client: AsyncClient):
    response = await client.get("/api/stations/nearby", params={"lat": 91, "lon": 0})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_station_not_found(client: AsyncClient):
    response = await client.get("/api/stations/missing")

    assert response.status_code == 404
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_submit_station_with_photo(client: AsyncClient, services):
    await _seed_user(services)
    station = {"name": "Library tap", "latitude": 51.51, "longitude": -0.12, "location_type": "Public Space"}

    response = await client.post(
        "/api/stations",
        data={"station": json.dumps(station)},
        files=[("photos", ("tap.jpg", make_jpeg(), "image/jpeg"))],
        headers=USER,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert len(data["storage_paths"]) == 1
    assert data["station"]["added_by_user_id"] == "user-1"

    profile = await services.users.get_profile("user-1")
    assert profile.stations_added == 1

    fetched = await client.get(f"/api/stations/{data['document_id']}")
    assert fetched.json()["name"] == "Library tap"


@pytest.mark.asyncio
async def test_submit_station_without_photo_is_rejected(client: AsyncClient):
    station = {"name": "No photo", "latitude": 51.51, "longitude": -0.12}

    response = await client.post("/api/stations", data={"station": json.dumps(station)}, headers=USER)

    assert response.status_code == 422
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_submit_station_requires_user(client: AsyncClient):
    response = await client.post("/api/stations", data={"station": json.dumps({"name": "x"})})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_draft_lifecycle(client: AsyncClient, services):
    saved = await client.put("/api/drafts/draft-1", json={"name": "Half done", "description": "Near the park"})
    assert saved.status_code == 200
    assert saved.json()["is_draft"] is True

    listing = await client.get("/api/drafts")
    assert listing.json()["count"] == 1

    submitted = await client.post(
        "/api/drafts/draft-1/submit",
        data={"latitude": "51.5", "longitude": "-0.12"},
        files=[("photos", ("p.jpg", make_jpeg(), "image/jpeg"))],
        headers=USER,
    )
    assert submitted.status_code == 201
    assert submitted.json()["station"]["is_draft"] is False
    assert (await client.get("/api/drafts")).json()["count"] == 0


@pytest.mark.asyncio
async def test_draft_without_coordinate_stays_after_failed_submit(client: AsyncClient):
    await client.put("/api/drafts/draft-2", json={"name": "Unplaced"})

    response = await client.post(
        "/api/drafts/draft-2/submit",
        files=[("photos", ("p.jpg", make_jpeg(), "image/jpeg"))],
        headers=USER,
    )

    assert response.status_code == 422
    assert (await client.get("/api/drafts")).json()["count"] == 1


@pytest.mark.asyncio
async def test_repeated_draft_submissions_do_not_accumulate_in_shared_controller(client: AsyncClient, services):
    for index in range(3):
        await client.put(f"/api/drafts/draft-{index}", json={"name": f"Tap {index}", "latitude": 51.5, "longitude": -0.12})
        submitted = await client.post(
            f"/api/drafts/draft-{index}/submit",
            files=[("photos", ("p.jpg", make_jpeg(), "image/jpeg"))],
            headers=USER,
        )
        assert submitted.status_code == 201

    assert services.controller.stations == []
    assert services.controller.user_stations == []
    assert (await client.get("/api/drafts")).json()["count"] == 0
    assert len(await services.store.where_equal("refillStations", addedBy="user-1")) == 3


@pytest.mark.asyncio
async def test_review_flow(client: AsyncClient, services):
    station = await _seed_station(services)
    await _seed_user(services)
    await _seed_user(services, "user-2")

    posted = await client.post(
        "/api/reviews",
        json={"station_id": station.id, "username": "User One", "rating": 4, "comment": "Cold water"},
        headers=USER,
    )
    assert posted.status_code == 201
    review_id = posted.json()["review"]["id"]

    own_helpful = await client.post(f"/api/reviews/{review_id}/helpful", headers=USER)
    assert own_helpful.status_code == 409
    helpful = await client.post(f"/api/reviews/{review_id}/helpful", headers={"X-User-Id": "user-2"})
    assert helpful.json()["review"]["helpful_count"] == 1

    forbidden = await client.put(
        f"/api/reviews/{review_id}", json={"rating": 1}, headers={"X-User-Id": "user-2"}
    )
    assert forbidden.status_code == 403

    listing = (await client.get(f"/api/reviews/stations/{station.id}", params={"user_id": "user-1"})).json()
    assert listing["average_rating"] == 4.0
    assert listing["user_review"]["id"] == review_id

    deleted = await client.delete(f"/api/reviews/{review_id}", headers=USER)
    assert deleted.status_code == 200
    assert (await client.get(f"/api/stations/{station.id}")).json()["average_rating"] is None


@pytest.mark.asyncio
async def test_review_rating_out_of_range(client: AsyncClient):
    response = await client.post(
        "/api/reviews", json={"station_id": "s", "username": "u", "rating": 6}, headers=USER
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_user_favorites_refills_and_badges(client: AsyncClient, services):
    station = await _seed_station(services)
    await _seed_user(services)

    assert (await client.put(f"/api/users/user-1/favorites/{station.id}", headers=USER)).status_code == 200
    favorites = (await client.get("/api/users/user-1/favorites")).json()
    assert [s["id"] for s in favorites["stations"]] == [station.id]

    assert (await client.post("/api/users/user-1/refills", headers=USER)).status_code == 200
    badges = (await client.get("/api/users/user-1/badges")).json()
    assert [b["id"] for b in badges["badges"]] == ["refill_1"]

    other = await client.post("/api/users/user-1/refills", headers={"X-User-Id": "user-2"})
    assert other.status_code == 403


@pytest.mark.asyncio
async def test_user_mutations_take_caller_from_header(client: AsyncClient, services):
    station = await _seed_station(services)
    await _seed_user(services)
    favorite_url = f"/api/users/user-1/favorites/{station.id}"

    assert (await client.put(favorite_url)).status_code == 401
    assert (await client.put(favorite_url, headers={"X-User-Id": "user-2"})).status_code == 403

    assert (await client.put(favorite_url, headers=USER)).status_code == 200
    removed = await client.delete(favorite_url, headers=USER)
    assert removed.status_code == 200
    assert removed.json()["station_id"] == station.id
    assert (await client.get("/api/users/user-1/favorites")).json()["stations"] == []

    photo = await client.post(
        "/api/users/user-1/photo", files={"photo": ("me.jpg", make_jpeg(), "image/jpeg")}, headers=USER
    )
    assert photo.status_code == 200
    assert photo.json()["profile_image_path"]


@pytest.mark.asyncio
async def test_unknown_user_profile(client: AsyncClient):
    response = await client.get("/api/users/ghost")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_create_profile_and_preferences(client: AsyncClient):
    created = await client.put(
        "/api/users/user-1", json={"email": "one@example.com", "username": "one"}, headers=USER
    )
    assert created.status_code == 201
    assert created.json()["total_contributions"] == 0

    updated = await client.put("/api/preferences", json={"default_search_radius": 3.0, "use_dark_mode": True})
    assert updated.json()["preferences"]["defaultSearchRadius"] == 3.0
    assert (await client.get("/api/preferences")).json()["preferences"]["useDarkMode"] is True


@pytest.mark.asyncio
async def test_system_summary_counts_documents(client: AsyncClient, services):
    await _seed_station(services)

    response = await client.get("/api/system/db/summary")

    assert response.status_code == 200
    assert response.json()["collections"] == {STATIONS_COLLECTION: 1}
    assert (await client.get("/api/system/logs")).json()["count"] == 0
