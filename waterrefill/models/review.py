"""Station review entity and helpers over review collections."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

MIN_RATING = 1
MAX_RATING = 5


class ReviewDecodeError(ValueError):
    """Raised when a stored review is missing required fields."""


def validate_rating(rating: int) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValueError("Rating must be an integer")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    return rating


@dataclass
class Review:
    """A 1-5 star rating with a comment, written by one user about one station."""

    station_id: str
    user_id: str
    username: str
    rating: int
    comment: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    date_posted: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    date_updated: Optional[datetime] = None
    is_edited: bool = False
    user_photo_url: Optional[str] = None
    helpful_count: int = 0
    report_count: int = 0
    helpful_user_ids: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        validate_rating(self.rating)

    @property
    def last_activity(self) -> datetime:
        return self.date_updated or self.date_posted

    def can_mark_helpful(self, user_id: str) -> bool:
        return user_id != self.user_id and user_id not in self.helpful_user_ids

    @classmethod
    def from_document(cls, document_id: str, data: Mapping[str, Any]) -> "Review":
        try:
            station_id = data["stationId"]
            user_id = data["userId"]
            username = data["username"]
            rating = data["rating"]
            comment = data["comment"]
            date_posted = data["datePosted"]
        except KeyError as exc:
            raise ReviewDecodeError(f"Review {document_id} is missing {exc.args[0]!r}") from exc

        if not isinstance(date_posted, datetime):
            raise ReviewDecodeError(f"Review {document_id} has an invalid datePosted")
        date_updated = data.get("dateUpdated")

        try:
            return cls(
                id=document_id,
                station_id=station_id,
                user_id=user_id,
                username=username,
                rating=rating,
                comment=comment,
                date_posted=date_posted,
                date_updated=date_updated if isinstance(date_updated, datetime) else None,
                is_edited=bool(data.get("isEdited", False)),
                user_photo_url=data.get("userPhotoURL"),
                helpful_count=int(data.get("helpfulCount") or 0),
                report_count=int(data.get("reportCount") or 0),
                helpful_user_ids=list(data.get("userHasMarkedHelpful") or []),
            )
        except ValueError as exc:
            raise ReviewDecodeError(f"Review {document_id}: {exc}") from exc

    def to_document(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "stationId": self.station_id,
            "userId": self.user_id,
            "username": self.username,
            "rating": self.rating,
            "comment": self.comment,
            "datePosted": self.date_posted,
            "isEdited": self.is_edited,
            "helpfulCount": self.helpful_count,
            "reportCount": self.report_count,
            "userHasMarkedHelpful": list(self.helpful_user_ids),
        }
        if self.date_updated is not None:
            data["dateUpdated"] = self.date_updated
        if self.user_photo_url is not None:
            data["userPhotoURL"] = self.user_photo_url
        return data


def average_rating(reviews: Iterable[Review]) -> Optional[float]:
    """Mean rating, or None when there are no reviews."""
    ratings = [review.rating for review in reviews]
    if not ratings:
        return None
    return sum(ratings) / len(ratings)


def ratings_distribution(reviews: Iterable[Review]) -> Dict[int, int]:
    distribution = {star: 0 for star in range(MIN_RATING, MAX_RATING + 1)}
    for review in reviews:
        distribution[review.rating] += 1
    return distribution


def sorted_by_recent(reviews: Iterable[Review]) -> List[Review]:
    return sorted(reviews, key=lambda review: review.last_activity, reverse=True)


def sorted_by_helpful(reviews: Iterable[Review]) -> List[Review]:
    return sorted(reviews, key=lambda review: review.helpful_count, reverse=True)
