"""API routes for user profiles, favorites and badges."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, UploadFile, status

from ..models.user import UserProfile
from ..services.container import ServiceContainer
from ..services.document_store import DocumentStoreError
from ..services.station_query import StationQueryError
from ..services.user_service import UserNotFoundError
from .deps import current_user_id, failure, get_services
from .schemas import BadgeOut, StationOut, UserIn, UserOut

router = APIRouter()


def _forbidden_unless_self(user_id: str, caller_id: str):
    if user_id != caller_id:
        return failure(status.HTTP_403_FORBIDDEN, "You can only change your own profile")
    return None


@router.put("/{user_id}", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_profile(
    user_id: str,
    payload: UserIn,
    caller_id: str = Depends(current_user_id),
    services: ServiceContainer = Depends(get_services),
):
    denied = _forbidden_unless_self(user_id, caller_id)
    if denied:
        return denied
    profile = UserProfile(
        id=user_id,
        email=payload.email,
        username=payload.username,
        date_joined=datetime.now(timezone.utc),
        role=payload.role,
    )
    try:
        await services.users.create_profile(profile)
    except DocumentStoreError as exc:
        return failure(status.HTTP_502_BAD_GATEWAY, f"Error creating profile: {exc}")
    return UserOut.from_profile(profile)


@router.get("/{user_id}", response_model=UserOut)
async def get_profile(user_id: str, services: ServiceContainer = Depends(get_services)):
    try:
        profile = await services.users.get_profile(user_id)
    except UserNotFoundError as exc:
        return failure(status.HTTP_404_NOT_FOUND, str(exc))
    return UserOut.from_profile(profile)


@router.get("/{user_id}/badges")
async def list_badges(user_id: str, services: ServiceContainer = Depends(get_services)):
    """Badges the user has earned so far."""
    try:
        badges = await services.users.badges(user_id)
    except UserNotFoundError as exc:
        return failure(status.HTTP_404_NOT_FOUND, str(exc))
    return {"success": True, "count": len(badges), "badges": [BadgeOut.from_badge(b) for b in badges]}


@router.get("/{user_id}/favorites")
async def list_favorites(user_id: str, services: ServiceContainer = Depends(get_services)):
    try:
        stations = await services.users.favorite_stations(user_id)
    except UserNotFoundError as exc:
        return failure(status.HTTP_404_NOT_FOUND, str(exc))
    except StationQueryError as exc:
        return failure(status.HTTP_502_BAD_GATEWAY, f"Error loading favorites: {exc}")
    return {
        "success": True,
        "count": len(stations),
        "stations": [StationOut.from_station(station) for station in stations],
    }


@router.put("/{user_id}/favorites/{station_id}")
async def add_favorite(
    user_id: str,
    station_id: str,
    caller_id: str = Depends(current_user_id),
    services: ServiceContainer = Depends(get_services),
):
    denied = _forbidden_unless_self(user_id, caller_id)
    if denied:
        return denied
    result = await services.users.add_favorite(user_id, station_id)
    if not result.success:
        return failure(status.HTTP_400_BAD_REQUEST, result.message)
    return {"success": True, "station_id": station_id}


@router.delete("/{user_id}/favorites/{station_id}")
async def remove_favorite(
    user_id: str,
    station_id: str,
    caller_id: str = Depends(current_user_id),
    services: ServiceContainer = Depends(get_services),
):
    denied = _forbidden_unless_self(user_id, caller_id)
    if denied:
        return denied
    result = await services.users.remove_favorite(user_id, station_id)
    if not result.success:
        return failure(status.HTTP_400_BAD_REQUEST, result.message)
    return {"success": True, "station_id": station_id}


@router.post("/{user_id}/refills")
async def log_refill(
    user_id: str,
    caller_id: str = Depends(current_user_id),
    services: ServiceContainer = Depends(get_services),
):
    """Count one bottle refill towards the user's stats and badges."""
    denied = _forbidden_unless_self(user_id, caller_id)
    if denied:
        return denied
    result = await services.users.log_refill(user_id)
    if not result.success:
        return failure(status.HTTP_400_BAD_REQUEST, result.message)
    return {"success": True, "message": "Refill logged"}


@router.post("/{user_id}/photo")
async def upload_profile_photo(
    user_id: str,
    photo: UploadFile = File(...),
    caller_id: str = Depends(current_user_id),
    services: ServiceContainer = Depends(get_services),
):
    denied = _forbidden_unless_self(user_id, caller_id)
    if denied:
        return denied
    result = await services.users.upload_profile_photo(user_id, await photo.read())
    if not result.success:
        return failure(status.HTTP_502_BAD_GATEWAY, result.message)
    return {"success": True, "profile_image_path": result.value}
