"""User profiles, favorites, refill logging and badges."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from ..models.badge import Badge, earned_badges
from ..models.station import Station
from ..models.user import UserDecodeError, UserProfile
from .document_store import (
    ArrayRemove,
    ArrayUnion,
    DocumentNotFoundError,
    DocumentStore,
    DocumentStoreError,
    Increment,
)
from .object_storage import ObjectStorage, ObjectStorageError
from .photo_service import PhotoEncodingError, PhotoService
from .results import OperationResult
from .station_query import NearbyStationService
from .station_submission import USERS_COLLECTION

logger = logging.getLogger(__name__)


class UserNotFoundError(Exception):
    """Raised when a user profile does not exist."""


class UserService:
    """Profile reads and per-user mutations."""

    def __init__(
        self,
        store: DocumentStore,
        stations: NearbyStationService,
        storage: Optional[ObjectStorage] = None,
        photos: Optional[PhotoService] = None,
    ):
        self._store = store
        self._stations = stations
        self._storage = storage
        self._photos = photos

    async def get_profile(self, user_id: str) -> UserProfile:
        snapshot = await self._store.get(USERS_COLLECTION, user_id)
        if snapshot is None:
            raise UserNotFoundError(f"Unknown user: {user_id}")
        try:
            return UserProfile.from_document(snapshot.id, snapshot.data)
        except UserDecodeError as exc:
            raise UserNotFoundError(str(exc)) from exc

    async def create_profile(self, profile: UserProfile) -> None:
        await self._store.set(USERS_COLLECTION, profile.id, profile.to_document())

    async def badges(self, user_id: str) -> List[Badge]:
        return earned_badges(await self.get_profile(user_id))

    async def add_favorite(self, user_id: str, station_id: str) -> OperationResult:
        return await self._update(
            user_id, {"favoriteStations": ArrayUnion(station_id)}, "Error adding to favorites"
        )

    async def remove_favorite(self, user_id: str, station_id: str) -> OperationResult:
        return await self._update(
            user_id, {"favoriteStations": ArrayRemove(station_id)}, "Error removing from favorites"
        )

    async def favorite_stations(self, user_id: str) -> List[Station]:
        profile = await self.get_profile(user_id)
        if not profile.favorite_stations:
            return []
        return await self._stations.get_stations(profile.favorite_stations)

    async def log_refill(self, user_id: str) -> OperationResult:
        return await self._update(
            user_id, {"personalRefillsLogged": Increment(1)}, "Error logging refill"
        )

    async def upload_profile_photo(self, user_id: str, image: bytes) -> OperationResult:
        """Store the photo at a fixed per-user path and record that path."""
        if self._storage is None:
            return OperationResult.failed("Photo storage is not configured")
        if self._photos is not None:
            try:
                image = await asyncio.to_thread(self._photos.compress, image)
            except PhotoEncodingError as exc:
                return OperationResult.failed(f"Could not process photo: {exc}")
        path = f"users/{user_id}/profile.jpg"
        try:
            await self._storage.put(path, image, "image/jpeg")
        except ObjectStorageError as exc:
            return OperationResult.failed(f"Profile photo upload failed: {exc}")
        result = await self._update(user_id, {"profileImageUrl": path}, "Error updating profile")
        return OperationResult.ok(path) if result.success else result

    async def _update(self, user_id: str, updates: dict, error_prefix: str) -> OperationResult:
        try:
            await self._store.update(USERS_COLLECTION, user_id, updates)
        except DocumentNotFoundError:
            return OperationResult.failed(f"{error_prefix}: unknown user {user_id}")
        except DocumentStoreError as exc:
            logger.error("%s for %s: %s", error_prefix, user_id, exc)
            return OperationResult.failed(f"{error_prefix}: {exc}")
        return OperationResult.ok()
