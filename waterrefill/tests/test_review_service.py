"""Tests for reviews and the station rating aggregate."""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from waterrefill.models.review import Review, average_rating, ratings_distribution, sorted_by_recent
from waterrefill.services.review_service import ReviewService
from waterrefill.services.station_codec import StationCodec
from waterrefill.services.station_query import STATIONS_COLLECTION
from waterrefill.services.station_submission import USERS_COLLECTION
from waterrefill.tests.conftest import make_station


@pytest.fixture
def station():
    return make_station()


@pytest_asyncio.fixture
async def seeded(document_store, station):
    await document_store.set(STATIONS_COLLECTION, station.id, StationCodec().encode(station))
    for user_id in ("alice", "bob"):
        await document_store.set(USERS_COLLECTION, user_id, {"reviewsWritten": 0, "contributions": 0})
    return document_store


def _review(station_id, user_id, rating, **kwargs):
    return Review(station_id=station_id, user_id=user_id, username=user_id.title(), rating=rating,
                  comment="ok", **kwargs)


def test_rating_out_of_range_is_rejected():
    with pytest.raises(ValueError):
        _review("s", "u", 6)


def test_review_helpers():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    old = _review("s", "a", 5, date_posted=now - timedelta(days=3))
    edited = _review("s", "b", 2, date_posted=now - timedelta(days=5), date_updated=now)

    assert average_rating([]) is None
    assert average_rating([old, edited]) == 3.5
    assert ratings_distribution([old, edited]) == {1: 0, 2: 1, 3: 0, 4: 0, 5: 1}
    assert sorted_by_recent([old, edited]) == [edited, old]


@pytest.mark.asyncio
async def test_posting_reviews_updates_station_rating(seeded, station):
    service = ReviewService(seeded)

    assert (await service.post_review(_review(station.id, "alice", 5))).success
    assert (await service.post_review(_review(station.id, "bob", 2))).success

    stored = StationCodec().decode((await seeded.get(STATIONS_COLLECTION, station.id)).data, station.id)
    assert stored.average_rating == 3.5
    assert stored.ratings_count == 2
    assert (await seeded.get(USERS_COLLECTION, "alice")).data["reviewsWritten"] == 1


@pytest.mark.asyncio
async def test_delete_last_review_clears_average(seeded, station):
    service = ReviewService(seeded)
    review = _review(station.id, "alice", 4)
    await service.post_review(review)

    assert (await service.delete_review(review)).success

    stored = StationCodec().decode((await seeded.get(STATIONS_COLLECTION, station.id)).data, station.id)
    assert stored.average_rating is None
    assert stored.ratings_count == 0
    assert (await seeded.get(USERS_COLLECTION, "alice")).data["contributions"] == 0


@pytest.mark.asyncio
async def test_update_marks_review_edited(seeded, station):
    service = ReviewService(seeded)
    review = _review(station.id, "alice", 4)
    await service.post_review(review)
    review.rating = 1

    result = await service.update_review(review)

    assert result.success
    reloaded = await service.get_review(review.id)
    assert reloaded.is_edited is True
    assert reloaded.rating == 1
    assert reloaded.date_updated is not None


@pytest.mark.asyncio
async def test_mark_helpful_rules(seeded, station):
    service = ReviewService(seeded)
    review = _review(station.id, "alice", 4)
    await service.post_review(review)

    own = await service.mark_helpful(review, "alice")
    first = await service.mark_helpful(review, "bob")
    again = await service.mark_helpful(first.value, "bob")

    assert not own.success
    assert first.success
    assert not again.success
    reloaded = await service.get_review(review.id)
    assert reloaded.helpful_count == 1
    assert reloaded.helpful_user_ids == ["bob"]


@pytest.mark.asyncio
async def test_report_and_user_reviews(seeded, station):
    service = ReviewService(seeded)
    review = _review(station.id, "bob", 3)
    await service.post_review(review)

    assert (await service.report_review(review)).success
    assert (await service.get_review(review.id)).report_count == 1
    assert await service.reviewed_station_ids("bob") == [station.id]
