"""API routes for locally stored draft stations."""

import logging
from dataclasses import replace
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from ..models.station import Coordinate
from ..services.container import ServiceContainer
from ..services.local_store import LocalStorageError
from ..services.station_submission import (
    InvalidStationError,
    PhotoUploadError,
    StationWriteError,
)
from .deps import current_user_id, failure, get_services
from .schemas import StationIn, StationOut, SubmissionResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def list_drafts(services: ServiceContainer = Depends(get_services)):
    """Drafts saved on this instance, newest first."""
    result = await services.controller.list_drafts()
    if not result.success:
        return failure(status.HTTP_500_INTERNAL_SERVER_ERROR, result.message)
    drafts = [StationOut.from_station(draft) for draft in result.value]
    return {"success": True, "count": len(drafts), "drafts": drafts}


@router.put("/{draft_id}", response_model=StationOut)
async def save_draft(
    draft_id: str,
    payload: StationIn,
    services: ServiceContainer = Depends(get_services),
):
    result = await services.controller.save_draft(payload.to_station(is_draft=True, station_id=draft_id))
    if not result.success:
        return failure(status.HTTP_500_INTERNAL_SERVER_ERROR, result.message)
    return StationOut.from_station(result.value)


@router.delete("/{draft_id}")
async def delete_draft(draft_id: str, services: ServiceContainer = Depends(get_services)):
    result = await services.controller.delete_draft(draft_id)
    if not result.success:
        return failure(status.HTTP_500_INTERNAL_SERVER_ERROR, result.message)
    return {"success": True, "message": result.message}


@router.post("/{draft_id}/submit", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit_draft(
    draft_id: str,
    latitude: Optional[float] = Form(None, ge=-90, le=90),
    longitude: Optional[float] = Form(None, ge=-180, le=180),
    photos: List[UploadFile] = File(default=[]),
    user_id: str = Depends(current_user_id),
    services: ServiceContainer = Depends(get_services),
):
    """
    Complete a draft and send it to the backend.

    A coordinate may be supplied now if the draft was saved without one. The
    draft is kept when submission fails.
    """
    try:
        draft = await services.drafts.get(draft_id)
    except LocalStorageError as exc:
        return failure(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Could not load draft: {exc}")
    if draft is None:
        return failure(status.HTTP_404_NOT_FOUND, f"Draft {draft_id} not found")

    coordinate = Coordinate(latitude, longitude) if latitude is not None and longitude is not None else None
    final = replace(draft.as_submitted(user_id), coordinate=coordinate or draft.coordinate)
    photo_bytes = [await upload.read() for upload in photos]
    try:
        result = await services.submission.submit(final, photo_bytes, user_id)
    except InvalidStationError as exc:
        return failure(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc))
    except (PhotoUploadError, StationWriteError) as exc:
        logger.warning("Draft %s submission by %s failed: %s", draft_id, user_id, exc)
        return failure(status.HTTP_502_BAD_GATEWAY, f"Failed to save station: {exc}")

    message = "Station submitted."
    try:
        await services.drafts.delete(draft_id)
    except LocalStorageError as exc:
        logger.error("Station %s submitted but draft %s was not removed: %s", result.document_id, draft_id, exc)
        message = f"Submitted, but the draft could not be removed: {exc}"

    return SubmissionResponse(
        message=message,
        document_id=result.document_id,
        storage_paths=result.storage_paths,
        station=StationOut.from_station(result.station),
    )
