"""Document store: schemaless JSON documents grouped in collections.

Values written through the store may contain :class:`Coordinate` geo-points
and timezone-aware ``datetime`` timestamps; both survive a round trip. Updates
accept :class:`Increment`, :class:`ArrayUnion` and :class:`ArrayRemove`
markers that are applied atomically inside the write transaction.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..models.document import Document
from ..models.station import Coordinate

logger = logging.getLogger(__name__)

_TYPE_KEY = "__type__"


class DocumentStoreError(Exception):
    """Raised when the underlying store cannot complete an operation."""


class DocumentNotFoundError(DocumentStoreError):
    """Raised when updating a document that does not exist."""


@dataclass(frozen=True)
class Increment:
    amount: Union[int, float] = 1


@dataclass(frozen=True)
class ArrayUnion:
    values: Tuple[Any, ...]

    def __init__(self, *values: Any) -> None:
        object.__setattr__(self, "values", tuple(values))


@dataclass(frozen=True)
class ArrayRemove:
    values: Tuple[Any, ...]

    def __init__(self, *values: Any) -> None:
        object.__setattr__(self, "values", tuple(values))


@dataclass
class DocumentSnapshot:
    id: str
    data: Dict[str, Any] = field(default_factory=dict)


def to_storage(value: Any) -> Any:
    """Convert a document value into plain JSON."""
    if isinstance(value, Coordinate):
        return {_TYPE_KEY: "geopoint", "latitude": value.latitude, "longitude": value.longitude}
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return {_TYPE_KEY: "timestamp", "value": value.isoformat()}
    if isinstance(value, Mapping):
        return {str(key): to_storage(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_storage(item) for item in value]
    return value


def from_storage(value: Any) -> Any:
    """Inverse of :func:`to_storage`."""
    if isinstance(value, dict):
        kind = value.get(_TYPE_KEY)
        if kind == "geopoint":
            return Coordinate(float(value["latitude"]), float(value["longitude"]))
        if kind == "timestamp":
            return datetime.fromisoformat(value["value"])
        return {key: from_storage(item) for key, item in value.items()}
    if isinstance(value, list):
        return [from_storage(item) for item in value]
    return value


def apply_updates(current: Dict[str, Any], updates: Mapping[str, Any]) -> Dict[str, Any]:
    """Return ``current`` with field updates and update markers applied."""
    merged = dict(current)
    for key, change in updates.items():
        if isinstance(change, Increment):
            existing = merged.get(key)
            base = existing if isinstance(existing, (int, float)) and not isinstance(existing, bool) else 0
            merged[key] = base + change.amount
        elif isinstance(change, ArrayUnion):
            existing = list(merged.get(key) or [])
            existing.extend(item for item in change.values if item not in existing)
            merged[key] = existing
        elif isinstance(change, ArrayRemove):
            merged[key] = [item for item in merged.get(key) or [] if item not in change.values]
        else:
            merged[key] = change
    return merged


class DocumentStore(ABC):
    """Operations the application needs from a document database."""

    def new_document_id(self) -> str:
        return uuid.uuid4().hex

    @abstractmethod
    async def get(self, collection: str, document_id: str) -> Optional[DocumentSnapshot]:
        """Fetch a single document, or None if it does not exist."""

    @abstractmethod
    async def set(self, collection: str, document_id: str, data: Mapping[str, Any]) -> None:
        """Create or replace a document."""

    @abstractmethod
    async def update(self, collection: str, document_id: str, updates: Mapping[str, Any]) -> None:
        """Update fields of an existing document."""

    @abstractmethod
    async def delete(self, collection: str, document_id: str) -> None:
        """Delete a document; deleting a missing document is a no-op."""

    @abstractmethod
    async def where_equal(self, collection: str, **filters: Any) -> List[DocumentSnapshot]:
        """Documents whose top-level fields equal every given value."""

    @abstractmethod
    async def query_range(
        self, collection: str, field_name: str, lower: Any, upper: Any
    ) -> List[DocumentSnapshot]:
        """Documents with ``lower <= field <= upper``.

        Only one field may carry inequality filters per query. Geo-points
        compare by latitude, then longitude.
        """

    async def get_many(self, collection: str, document_ids: List[str]) -> List[DocumentSnapshot]:
        snapshots = []
        for document_id in document_ids:
            snapshot = await self.get(collection, document_id)
            if snapshot is not None:
                snapshots.append(snapshot)
        return snapshots


def _geo_index(data: Mapping[str, Any]) -> Tuple[Optional[str], Optional[float], Optional[float]]:
    for key, value in data.items():
        if isinstance(value, Coordinate):
            return key, value.latitude, value.longitude
    return None, None, None


def _json_equals(column, value: Any):
    if isinstance(value, bool):
        return column.as_boolean() == value
    if isinstance(value, int):
        return column.as_integer() == value
    if isinstance(value, float):
        return column.as_float() == value
    return column.as_string() == str(value)


class SqlDocumentStore(DocumentStore):
    """Document store persisted through SQLAlchemy."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, collection: str, document_id: str) -> Optional[DocumentSnapshot]:
        try:
            async with self._session_factory() as session:
                record = await session.get(Document, (collection, document_id))
                return self._snapshot(record) if record else None
        except SQLAlchemyError as exc:
            raise DocumentStoreError(f"Failed to read {collection}/{document_id}") from exc

    async def set(self, collection: str, document_id: str, data: Mapping[str, Any]) -> None:
        geo_field, geo_lat, geo_lon = _geo_index(data)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    record = await session.get(Document, (collection, document_id))
                    if record is None:
                        record = Document(collection=collection, document_id=document_id)
                        session.add(record)
                    record.data = to_storage(dict(data))
                    record.geo_field = geo_field
                    record.geo_latitude = geo_lat
                    record.geo_longitude = geo_lon
        except SQLAlchemyError as exc:
            raise DocumentStoreError(f"Failed to write {collection}/{document_id}") from exc

    async def update(self, collection: str, document_id: str, updates: Mapping[str, Any]) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    record = await session.get(Document, (collection, document_id), with_for_update=True)
                    if record is None:
                        raise DocumentNotFoundError(f"No document {collection}/{document_id}")
                    merged = apply_updates(from_storage(record.data), updates)
                    geo_field, geo_lat, geo_lon = _geo_index(merged)
                    # Assign a new object so the JSON column is flagged dirty
                    record.data = to_storage(merged)
                    record.geo_field = geo_field
                    record.geo_latitude = geo_lat
                    record.geo_longitude = geo_lon
        except SQLAlchemyError as exc:
            raise DocumentStoreError(f"Failed to update {collection}/{document_id}") from exc

    async def delete(self, collection: str, document_id: str) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    record = await session.get(Document, (collection, document_id))
                    if record is not None:
                        await session.delete(record)
        except SQLAlchemyError as exc:
            raise DocumentStoreError(f"Failed to delete {collection}/{document_id}") from exc

    async def where_equal(self, collection: str, **filters: Any) -> List[DocumentSnapshot]:
        stmt = select(Document).where(Document.collection == collection)
        for key, value in filters.items():
            stmt = stmt.where(_json_equals(Document.data[key], value))
        return await self._run(stmt, collection)

    async def query_range(
        self, collection: str, field_name: str, lower: Any, upper: Any
    ) -> List[DocumentSnapshot]:
        stmt = select(Document).where(Document.collection == collection)
        if isinstance(lower, Coordinate) and isinstance(upper, Coordinate):
            lat, lon = Document.geo_latitude, Document.geo_longitude
            stmt = stmt.where(
                Document.geo_field == field_name,
                or_(lat > lower.latitude, and_(lat == lower.latitude, lon >= lower.longitude)),
                or_(lat < upper.latitude, and_(lat == upper.latitude, lon <= upper.longitude)),
            )
        else:
            column = Document.data[field_name].as_float()
            stmt = stmt.where(column >= lower, column <= upper)
        return await self._run(stmt, collection)

    async def _run(self, stmt, collection: str) -> List[DocumentSnapshot]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                records = result.scalars().all()
        except SQLAlchemyError as exc:
            raise DocumentStoreError(f"Query on {collection} failed") from exc
        logger.debug("Query on %s returned %d documents", collection, len(records))
        return [self._snapshot(record) for record in records]

    @staticmethod
    def _snapshot(record: Document) -> DocumentSnapshot:
        return DocumentSnapshot(id=record.document_id, data=from_storage(record.data))
