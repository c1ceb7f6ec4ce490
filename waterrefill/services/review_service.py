"""Station reviews and the rating aggregate kept on each station."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional

from ..models.review import Review, ReviewDecodeError, average_rating
from .document_store import (
    ArrayUnion,
    DocumentNotFoundError,
    DocumentStore,
    DocumentStoreError,
    Increment,
)
from .results import OperationResult
from .station_query import STATIONS_COLLECTION
from .station_submission import USERS_COLLECTION

logger = logging.getLogger(__name__)

REVIEWS_COLLECTION = "reviews"


class ReviewService:
    """Creates, edits and moderates reviews.

    Every change that affects ratings recomputes the station's
    ``averageRating``/``ratingsCount`` from the stored reviews.
    """

    def __init__(self, store: DocumentStore):
        self._store = store

    async def fetch_reviews(self, station_id: str) -> List[Review]:
        snapshots = await self._store.where_equal(REVIEWS_COLLECTION, stationId=station_id)
        return self._decode_all(snapshots)

    async def fetch_user_reviews(self, user_id: str) -> List[Review]:
        snapshots = await self._store.where_equal(REVIEWS_COLLECTION, userId=user_id)
        return self._decode_all(snapshots)

    async def get_review(self, review_id: str) -> Optional[Review]:
        snapshot = await self._store.get(REVIEWS_COLLECTION, review_id)
        if snapshot is None:
            return None
        try:
            return Review.from_document(snapshot.id, snapshot.data)
        except ReviewDecodeError as exc:
            logger.warning("Unreadable review %s: %s", review_id, exc)
            return None

    async def reviewed_station_ids(self, user_id: str) -> List[str]:
        return [review.station_id for review in await self.fetch_user_reviews(user_id)]

    async def post_review(self, review: Review) -> OperationResult:
        try:
            await self._store.set(REVIEWS_COLLECTION, review.id, review.to_document())
        except DocumentStoreError as exc:
            return OperationResult.failed(f"Error posting review: {exc}")

        await self._refresh_station_rating(review.station_id)
        await self._bump_review_count(review.user_id, 1)
        return OperationResult.ok(review)

    async def update_review(self, review: Review) -> OperationResult:
        updated = replace(review, is_edited=True, date_updated=datetime.now(timezone.utc))
        try:
            await self._store.update(REVIEWS_COLLECTION, review.id, updated.to_document())
        except DocumentNotFoundError:
            return OperationResult.failed("Review no longer exists")
        except DocumentStoreError as exc:
            return OperationResult.failed(f"Error updating review: {exc}")

        await self._refresh_station_rating(review.station_id)
        return OperationResult.ok(updated)

    async def delete_review(self, review: Review) -> OperationResult:
        try:
            await self._store.delete(REVIEWS_COLLECTION, review.id)
        except DocumentStoreError as exc:
            return OperationResult.failed(f"Error deleting review: {exc}")

        await self._refresh_station_rating(review.station_id)
        await self._bump_review_count(review.user_id, -1)
        return OperationResult.ok()

    async def mark_helpful(self, review: Review, user_id: str) -> OperationResult:
        if review.user_id == user_id:
            return OperationResult.failed("You cannot mark your own review as helpful")
        if user_id in review.helpful_user_ids:
            return OperationResult.failed("You've already marked this review as helpful")

        try:
            await self._store.update(
                REVIEWS_COLLECTION,
                review.id,
                {"helpfulCount": Increment(1), "userHasMarkedHelpful": ArrayUnion(user_id)},
            )
        except DocumentStoreError as exc:
            return OperationResult.failed(f"Error marking review as helpful: {exc}")

        return OperationResult.ok(
            replace(
                review,
                helpful_count=review.helpful_count + 1,
                helpful_user_ids=[*review.helpful_user_ids, user_id],
            )
        )

    async def report_review(self, review: Review) -> OperationResult:
        try:
            await self._store.update(REVIEWS_COLLECTION, review.id, {"reportCount": Increment(1)})
        except DocumentStoreError as exc:
            return OperationResult.failed(f"Error reporting review: {exc}")
        return OperationResult.ok()

    async def _refresh_station_rating(self, station_id: str) -> None:
        try:
            reviews = await self.fetch_reviews(station_id)
            await self._store.update(
                STATIONS_COLLECTION,
                station_id,
                {"averageRating": average_rating(reviews), "ratingsCount": len(reviews)},
            )
        except DocumentStoreError as exc:
            logger.warning("Could not refresh rating for station %s: %s", station_id, exc)

    async def _bump_review_count(self, user_id: str, amount: int) -> None:
        try:
            await self._store.update(
                USERS_COLLECTION,
                user_id,
                {"reviewsWritten": Increment(amount), "contributions": Increment(amount)},
            )
        except DocumentStoreError as exc:
            logger.warning("Could not update review count for user %s: %s", user_id, exc)

    @staticmethod
    def _decode_all(snapshots) -> List[Review]:
        reviews = []
        for snapshot in snapshots:
            try:
                reviews.append(Review.from_document(snapshot.id, snapshot.data))
            except ReviewDecodeError as exc:
                logger.warning("Skipping review document: %s", exc)
        return reviews
