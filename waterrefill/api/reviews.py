"""API routes for station reviews."""

from dataclasses import replace
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..models.review import Review, average_rating, ratings_distribution, sorted_by_helpful, sorted_by_recent
from ..services.container import ServiceContainer
from ..services.document_store import DocumentStoreError
from ..services.results import OperationResult
from .deps import current_user_id, failure, get_services
from .schemas import ReviewIn, ReviewOut, ReviewUpdate

router = APIRouter()


def _result_payload(result: OperationResult, status_code: int = status.HTTP_400_BAD_REQUEST):
    if not result.success:
        return failure(status_code, result.message)
    body = {"success": True, "message": result.message}
    if isinstance(result.value, Review):
        body["review"] = ReviewOut.from_review(result.value)
    return body


async def _load_review(services: ServiceContainer, review_id: str) -> Optional[Review]:
    return await services.reviews.get_review(review_id)


@router.get("/stations/{station_id}")
async def list_station_reviews(
    station_id: str,
    sort: str = Query("recent", pattern="^(recent|helpful)$"),
    user_id: Optional[str] = Query(None, description="Highlight this user's own review"),
    services: ServiceContainer = Depends(get_services),
):
    """Reviews for a station with the rating summary."""
    try:
        reviews = await services.reviews.fetch_reviews(station_id)
    except DocumentStoreError as exc:
        return failure(status.HTTP_502_BAD_GATEWAY, f"Error fetching reviews: {exc}")

    ordered = sorted_by_helpful(reviews) if sort == "helpful" else sorted_by_recent(reviews)
    own = next((review for review in reviews if user_id and review.user_id == user_id), None)
    return {
        "success": True,
        "average_rating": average_rating(reviews),
        "ratings_count": len(reviews),
        "distribution": ratings_distribution(reviews),
        "user_review": ReviewOut.from_review(own) if own else None,
        "reviews": [ReviewOut.from_review(review) for review in ordered],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def post_review(
    payload: ReviewIn,
    user_id: str = Depends(current_user_id),
    services: ServiceContainer = Depends(get_services),
):
    review = Review(
        station_id=payload.station_id,
        user_id=user_id,
        username=payload.username,
        rating=payload.rating,
        comment=payload.comment,
    )
    return _result_payload(await services.reviews.post_review(review), status.HTTP_502_BAD_GATEWAY)


@router.put("/{review_id}")
async def update_review(
    review_id: str,
    payload: ReviewUpdate,
    user_id: str = Depends(current_user_id),
    services: ServiceContainer = Depends(get_services),
):
    review = await _load_review(services, review_id)
    if review is None:
        return failure(status.HTTP_404_NOT_FOUND, f"Review {review_id} not found")
    if review.user_id != user_id:
        return failure(status.HTTP_403_FORBIDDEN, "You can only edit your own review")
    edited = replace(review, rating=payload.rating, comment=payload.comment)
    return _result_payload(await services.reviews.update_review(edited))


@router.delete("/{review_id}")
async def delete_review(
    review_id: str,
    user_id: str = Depends(current_user_id),
    services: ServiceContainer = Depends(get_services),
):
    review = await _load_review(services, review_id)
    if review is None:
        return failure(status.HTTP_404_NOT_FOUND, f"Review {review_id} not found")
    if review.user_id != user_id:
        return failure(status.HTTP_403_FORBIDDEN, "You can only delete your own review")
    return _result_payload(await services.reviews.delete_review(review))


@router.post("/{review_id}/helpful")
async def mark_review_helpful(
    review_id: str,
    user_id: str = Depends(current_user_id),
    services: ServiceContainer = Depends(get_services),
):
    review = await _load_review(services, review_id)
    if review is None:
        return failure(status.HTTP_404_NOT_FOUND, f"Review {review_id} not found")
    return _result_payload(await services.reviews.mark_helpful(review, user_id), status.HTTP_409_CONFLICT)


@router.post("/{review_id}/report")
async def report_review(
    review_id: str,
    _: str = Depends(current_user_id),
    services: ServiceContainer = Depends(get_services),
):
    review = await _load_review(services, review_id)
    if review is None:
        return failure(status.HTTP_404_NOT_FOUND, f"Review {review_id} not found")
    return _result_payload(await services.reviews.report_review(review))
