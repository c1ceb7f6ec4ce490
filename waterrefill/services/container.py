"""Explicitly constructed application services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ..config import Settings
from ..database import build_engine, build_session_factory, init_db
from .document_store import DocumentStore, SqlDocumentStore
from .draft_store import DraftStore
from .local_store import LocalKeyValueStore, PreferencesStore
from .object_storage import FileSystemObjectStorage, HttpObjectStorage, ObjectStorage
from .photo_service import PhotoService
from .review_service import ReviewService
from .station_codec import StationCodec
from .station_query import NearbyStationService
from .station_submission import StationSubmissionService
from .stations_controller import StationsController
from .user_service import UserService


def build_object_storage(settings: Settings) -> ObjectStorage:
    if settings.object_storage_backend == "http":
        return HttpObjectStorage(
            settings.object_storage_url,
            token=settings.object_storage_token,
            timeout=settings.object_storage_timeout,
        )
    if settings.object_storage_backend == "filesystem":
        return FileSystemObjectStorage(settings.object_storage_dir)
    raise ValueError(f"Unknown object storage backend: {settings.object_storage_backend}")


@dataclass
class ServiceContainer:
    """Everything the API needs, wired once per application lifetime."""

    store: DocumentStore
    storage: ObjectStorage
    drafts: DraftStore
    preferences: PreferencesStore
    stations: NearbyStationService
    submission: StationSubmissionService
    reviews: ReviewService
    users: UserService
    controller: StationsController
    engine: Optional[AsyncEngine] = None
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @classmethod
    def from_components(
        cls,
        store: DocumentStore,
        storage: ObjectStorage,
        local_store: LocalKeyValueStore,
        settings: Settings,
        engine: Optional[AsyncEngine] = None,
    ) -> "ServiceContainer":
        codec = StationCodec()
        photos = PhotoService(
            max_dimension=settings.photo_max_dimension,
            max_bytes=settings.photo_max_bytes,
            quality=settings.photo_jpeg_quality,
        )
        stations = NearbyStationService(store, codec)
        submission = StationSubmissionService(store, storage, photos, codec)
        drafts = DraftStore(local_store, codec)
        return cls(
            store=store,
            storage=storage,
            drafts=drafts,
            preferences=PreferencesStore(local_store, settings.default_search_radius_miles),
            stations=stations,
            submission=submission,
            reviews=ReviewService(store),
            users=UserService(store, stations, storage, photos),
            controller=StationsController(
                stations,
                submission,
                drafts,
                search_radius_miles=settings.default_search_radius_miles,
                debounce_seconds=settings.region_debounce_seconds,
            ),
            engine=engine,
            session_factory=build_session_factory(engine) if engine is not None else None,
        )

    @classmethod
    async def start(cls, settings: Settings) -> "ServiceContainer":
        engine = build_engine(settings.database_url)
        await init_db(engine)
        return cls.from_components(
            SqlDocumentStore(build_session_factory(engine)),
            build_object_storage(settings),
            LocalKeyValueStore(settings.local_store_path),
            settings,
            engine=engine,
        )

    async def stop(self) -> None:
        self.controller.debouncer.cancel()
        await self.storage.close()
        if self.engine is not None:
            await self.engine.dispose()
