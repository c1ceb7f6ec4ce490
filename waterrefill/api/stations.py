"""API routes for finding and adding refill stations."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from pydantic import ValidationError

from ..config import settings
from ..models.station import Coordinate, ListingType, LocationType, RefillCost
from ..services.container import ServiceContainer
from ..services.geo_service import GeoService
from ..services.station_filter import filter_stations
from ..services.station_query import StationQueryError
from ..services.station_submission import (
    InvalidStationError,
    PhotoUploadError,
    StationWriteError,
)
from ..services.stations_controller import EMPTY_AREA_MESSAGE
from .deps import current_user_id, failure, get_services
from .schemas import StationIn, StationListResponse, StationOut, SubmissionResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/nearby", response_model=StationListResponse)
async def find_nearby_stations(
    lat: float = Query(..., ge=-90, le=90, description="Search centre latitude"),
    lon: float = Query(..., ge=-180, le=180, description="Search centre longitude"),
    radius_miles: float = Query(
        settings.default_search_radius_miles, gt=0, le=settings.max_search_radius_miles
    ),
    types: Optional[List[LocationType]] = Query(None, description="Location types to keep"),
    costs: Optional[List[RefillCost]] = Query(None, description="Costs to keep"),
    car_accessible_only: bool = Query(False),
    services: ServiceContainer = Depends(get_services),
):
    """
    Stations within ``radius_miles`` of a point, nearest first.

    Optional filters narrow the result by type, cost and car access.
    """
    center = Coordinate(lat, lon)
    try:
        stations = await services.stations.find_nearby(center, radius_miles)
    except StationQueryError as exc:
        return failure(
            status.HTTP_502_BAD_GATEWAY,
            f"Failed to load stations: {exc}",
            count=0,
            stations=[],
        )

    visible = filter_stations(
        stations,
        set(types) if types else set(LocationType),
        set(costs) if costs else set(RefillCost),
        car_accessible_only,
    )
    ranked = GeoService.find_nearest(center, visible, max_results=len(visible))
    return StationListResponse(
        message=None if stations else EMPTY_AREA_MESSAGE,
        count=len(ranked),
        stations=[StationOut.from_station(station, distance) for station, distance in ranked],
    )


@router.get("/contributors/{user_id}", response_model=StationListResponse)
async def list_contributed_stations(
    user_id: str,
    listing_type: ListingType = Query(ListingType.USER),
    services: ServiceContainer = Depends(get_services),
):
    """Stations a user (or a business account) has added, newest first."""
    try:
        stations = await services.stations.find_by_contributor(user_id, listing_type)
    except StationQueryError as exc:
        return failure(status.HTTP_502_BAD_GATEWAY, f"Error loading stations: {exc}", count=0, stations=[])
    return StationListResponse(
        count=len(stations),
        stations=[StationOut.from_station(station) for station in stations],
    )


@router.get("/{station_id}", response_model=StationOut)
async def get_station(station_id: str, services: ServiceContainer = Depends(get_services)):
    try:
        station = await services.stations.get_station(station_id)
    except StationQueryError as exc:
        return failure(status.HTTP_502_BAD_GATEWAY, str(exc))
    if station is None:
        return failure(status.HTTP_404_NOT_FOUND, f"Station {station_id} not found")
    return StationOut.from_station(station)


@router.post("", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit_station(
    station: str = Form(..., description="Station fields as JSON"),
    photos: List[UploadFile] = File(default=[]),
    user_id: str = Depends(current_user_id),
    services: ServiceContainer = Depends(get_services),
):
    """
    Upload photos and save a new station.

    Photos are uploaded first; the station is written only if all of them
    succeed.
    """
    try:
        payload = StationIn.model_validate_json(station)
    except ValidationError as exc:
        return failure(status.HTTP_422_UNPROCESSABLE_ENTITY, "Invalid station", errors=exc.errors(include_context=False))

    photo_bytes = [await upload.read() for upload in photos]
    try:
        result = await services.submission.submit(payload.to_station(), photo_bytes, user_id)
    except InvalidStationError as exc:
        return failure(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc))
    except (PhotoUploadError, StationWriteError) as exc:
        logger.warning("Station submission by %s failed: %s", user_id, exc)
        return failure(status.HTTP_502_BAD_GATEWAY, f"Failed to save station: {exc}")

    return SubmissionResponse(
        document_id=result.document_id,
        storage_paths=result.storage_paths,
        station=StationOut.from_station(result.station),
    )
