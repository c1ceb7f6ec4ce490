"""Writing new stations: photo upload, document write, contributor counters."""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from ..models.station import ListingType, Station
from .document_store import DocumentStore, DocumentStoreError, Increment
from .object_storage import ObjectStorage, ObjectStorageError
from .photo_service import PhotoEncodingError, PhotoService
from .station_codec import StationCodec
from .station_query import STATIONS_COLLECTION

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"


class InvalidStationError(ValueError):
    """Raised when a station cannot be submitted in its current state."""


class SubmissionError(Exception):
    """Base class for failures while submitting a station."""


class PhotoUploadError(SubmissionError):
    """A photo could not be encoded or uploaded; nothing was written."""


class StationWriteError(SubmissionError):
    """The station document could not be written after the uploads."""


@dataclass
class SubmissionResult:
    document_id: str
    storage_paths: List[str] = field(default_factory=list)
    station: Optional[Station] = None


def validate_for_submission(station: Station, photo_count: int) -> None:
    if station.is_draft:
        raise InvalidStationError("Draft stations must be finalised before submission")
    if station.coordinate is None:
        raise InvalidStationError("A submitted station needs a coordinate")
    if station.listing_type is ListingType.USER and photo_count == 0:
        raise InvalidStationError("At least one photo is required for a user-added station")


class StationSubmissionService:
    """Uploads photos, then writes the station, then bumps the user's counters.

    Photos are all-or-nothing: the document is written only after every
    upload succeeded. Blobs already uploaded when a later step fails are left
    in storage.
    """

    def __init__(
        self,
        store: DocumentStore,
        storage: ObjectStorage,
        photos: Optional[PhotoService] = None,
        codec: Optional[StationCodec] = None,
    ):
        self._store = store
        self._storage = storage
        self._photos = photos or PhotoService()
        self._codec = codec or StationCodec()

    async def submit(
        self, station: Station, photos: Sequence[bytes], contributor_id: str
    ) -> SubmissionResult:
        validate_for_submission(station, len(photos))

        document_id = self._store.new_document_id()
        storage_paths = await self._upload_photos(document_id, photos)

        stored = replace(
            station,
            id=document_id,
            photo_references=storage_paths,
            date_added=datetime.now(timezone.utc),
            added_by_user_id=contributor_id,
            average_rating=None,
            ratings_count=0,
            verified=False,
            is_draft=False,
        )
        try:
            await self._store.set(STATIONS_COLLECTION, document_id, self._codec.encode(stored))
        except DocumentStoreError as exc:
            logger.error(
                "Writing station %s failed; %d uploaded photos left orphaned",
                document_id, len(storage_paths),
            )
            raise StationWriteError(f"Failed to save station: {exc}") from exc
        logger.info("Saved station %s (%s) with %d photos", document_id, stored.name, len(storage_paths))

        if contributor_id:
            await self._record_contribution(contributor_id)
        else:
            logger.debug("No contributor id for station %s, skipping counters", document_id)

        return SubmissionResult(document_id=document_id, storage_paths=storage_paths, station=stored)

    async def _upload_photos(self, document_id: str, photos: Sequence[bytes]) -> List[str]:
        paths: List[str] = []
        for index, raw in enumerate(photos, start=1):
            path = f"stations/{document_id}/{uuid.uuid4()}.{self._photos.extension}"
            try:
                encoded = await asyncio.to_thread(self._photos.compress, raw)
                paths.append(await self._storage.put(path, encoded, self._photos.content_type))
            except (PhotoEncodingError, ObjectStorageError) as exc:
                logger.error("Photo %d/%d for station %s failed: %s", index, len(photos), document_id, exc)
                raise PhotoUploadError(f"Failed to upload photo {index}: {exc}") from exc
        return paths

    async def _record_contribution(self, contributor_id: str) -> None:
        try:
            await self._store.update(
                USERS_COLLECTION,
                contributor_id,
                {"stationsAdded": Increment(1), "contributions": Increment(1)},
            )
        except DocumentStoreError as exc:
            logger.warning("Could not update counters for user %s: %s", contributor_id, exc)
