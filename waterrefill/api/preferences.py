"""API routes for instance-local user preferences."""

from fastapi import APIRouter, Depends, status

from ..services.container import ServiceContainer
from ..services.local_store import LocalStorageError
from .deps import failure, get_services
from .schemas import PreferencesIn

router = APIRouter()


@router.get("")
async def get_preferences(services: ServiceContainer = Depends(get_services)):
    try:
        preferences = await services.preferences.as_dict()
    except LocalStorageError as exc:
        return failure(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Could not read preferences: {exc}")
    return {"success": True, "preferences": preferences}


@router.put("")
async def update_preferences(payload: PreferencesIn, services: ServiceContainer = Depends(get_services)):
    """Update only the preferences present in the body."""
    preferences = services.preferences
    try:
        if payload.default_search_radius is not None:
            await preferences.set_default_search_radius(payload.default_search_radius)
        if payload.use_dark_mode is not None:
            await preferences.set_use_dark_mode(payload.use_dark_mode)
        if payload.notifications_enabled is not None:
            await preferences.set_notifications_enabled(payload.notifications_enabled)
        current = await preferences.as_dict()
    except LocalStorageError as exc:
        return failure(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Could not save preferences: {exc}")
    return {"success": True, "preferences": current}
