"""Storage model for schemaless documents."""

from typing import Any, Dict, Optional

from sqlalchemy import JSON, Float, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class Document(Base, TimestampMixin):
    """A JSON document addressed by (collection, document id).

    Documents holding a geo-point keep a copy of it in ``geo_*`` columns so
    range queries on that field can run in SQL.
    """

    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_geo", "collection", "geo_field", "geo_latitude", "geo_longitude"),
    )

    collection: Mapped[str] = mapped_column(String(64), primary_key=True)
    document_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    data: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    geo_field: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    geo_latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    geo_longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    def __repr__(self) -> str:
        return f"<Document(collection={self.collection}, id={self.document_id})>"
