"""Application services: geo math, storage adapters, station workflows."""

from .document_store import DocumentStore, DocumentStoreError, SqlDocumentStore
from .draft_store import DraftStore
from .geo_service import BoundingBox, GeoService
from .local_store import LocalKeyValueStore, LocalStorageError, PreferencesStore
from .object_storage import FileSystemObjectStorage, HttpObjectStorage, ObjectStorage, ObjectStorageError
from .photo_service import PhotoEncodingError, PhotoService
from .results import OperationResult
from .review_service import ReviewService
from .station_codec import StationCodec, StationDecodeError
from .station_filter import StationFilter, filter_stations
from .station_query import NearbyStationService, StationQueryError
from .station_submission import (
    InvalidStationError,
    PhotoUploadError,
    StationSubmissionService,
    StationWriteError,
    SubmissionError,
    SubmissionResult,
)
from .stations_controller import StationsController
from .user_service import UserNotFoundError, UserService

__all__ = [
    "BoundingBox",
    "DocumentStore",
    "DocumentStoreError",
    "DraftStore",
    "FileSystemObjectStorage",
    "GeoService",
    "HttpObjectStorage",
    "InvalidStationError",
    "LocalKeyValueStore",
    "LocalStorageError",
    "NearbyStationService",
    "ObjectStorage",
    "ObjectStorageError",
    "OperationResult",
    "PhotoEncodingError",
    "PhotoService",
    "PhotoUploadError",
    "PreferencesStore",
    "ReviewService",
    "SqlDocumentStore",
    "StationCodec",
    "StationDecodeError",
    "StationFilter",
    "StationQueryError",
    "StationSubmissionService",
    "StationWriteError",
    "StationsController",
    "SubmissionError",
    "SubmissionResult",
    "UserNotFoundError",
    "UserService",
    "filter_stations",
]
