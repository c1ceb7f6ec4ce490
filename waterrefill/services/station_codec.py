"""Mapping between stored station documents and :class:`Station` objects."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from ..models.station import Coordinate, ListingType, LocationType, RefillCost, Station

logger = logging.getLogger(__name__)


class StationDecodeError(ValueError):
    """Raised when a document lacks a required station field."""


def _require(raw: Mapping[str, Any], key: str, expected_type, document_id: str):
    if key not in raw or raw[key] is None:
        raise StationDecodeError(f"Station {document_id} is missing {key!r}")
    value = raw[key]
    if not isinstance(value, expected_type):
        raise StationDecodeError(
            f"Station {document_id} has {key!r} of type {type(value).__name__}"
        )
    return value


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


class StationCodec:
    """Encodes stations for the ``refillStations`` collection and local drafts."""

    def decode(self, raw: Mapping[str, Any], document_id: str) -> Station:
        location = _require(raw, "location", Coordinate, document_id)
        name = _require(raw, "name", str, document_id)
        type_value = _require(raw, "type", str, document_id)
        cost_value = _require(raw, "cost", str, document_id)
        description = _require(raw, "description", str, document_id)
        limitations = _require(raw, "limitations", str, document_id)
        photo_ids = _require(raw, "photoIDs", list, document_id)
        date_added = _require(raw, "dateAdded", datetime, document_id)
        added_by = _require(raw, "addedBy", str, document_id)

        if not all(isinstance(path, str) for path in photo_ids):
            raise StationDecodeError(f"Station {document_id} has non-string photo references")

        ratings_count = raw.get("ratingsCount")
        ratings_count = ratings_count if isinstance(ratings_count, int) and not isinstance(ratings_count, bool) else 0
        average_rating = raw.get("averageRating")
        if ratings_count == 0 or not isinstance(average_rating, (int, float)) or isinstance(average_rating, bool):
            average_rating = None
        else:
            average_rating = float(average_rating)

        car_accessible = raw.get("isCarAccessible")

        return Station(
            id=document_id,
            coordinate=location,
            name=name,
            description=description,
            limitations=limitations,
            location_type=LocationType.from_wire(type_value),
            cost=RefillCost.from_wire(cost_value),
            listing_type=ListingType.from_wire(raw.get("listingType")),
            photo_references=list(photo_ids),
            date_added=date_added,
            added_by_user_id=added_by,
            average_rating=average_rating,
            ratings_count=ratings_count,
            is_car_accessible=car_accessible if isinstance(car_accessible, bool) else None,
            is_draft=False,
            manual_address=_optional_str(raw.get("manualAddress")),
            manual_description=_optional_str(raw.get("manualDescription")),
            verified=raw.get("verified") is True,
        )

    def try_decode(self, raw: Mapping[str, Any], document_id: str) -> Optional[Station]:
        """Decode or return None, logging why the document was skipped."""
        try:
            return self.decode(raw, document_id)
        except StationDecodeError as exc:
            logger.warning("Skipping station document: %s", exc)
            return None

    def encode(self, station: Station) -> Dict[str, Any]:
        return {
            "location": station.coordinate,
            "name": station.name,
            "type": station.location_type.value,
            "cost": station.cost.value,
            "description": station.description,
            "limitations": station.limitations,
            "photoIDs": list(station.photo_references),
            "dateAdded": station.date_added,
            "addedBy": station.added_by_user_id,
            "listingType": station.listing_type.value,
            "averageRating": station.average_rating if station.average_rating is not None else 0.0,
            "ratingsCount": station.ratings_count,
            "isCarAccessible": station.is_car_accessible,
            "manualAddress": station.manual_address,
            "manualDescription": station.manual_description,
            "verified": station.verified,
        }

    # Local drafts are plain JSON: no geo-point or timestamp types.

    def to_local(self, station: Station) -> Dict[str, Any]:
        coordinate = station.coordinate
        return {
            "id": station.id,
            "name": station.name,
            "description": station.description,
            "limitations": station.limitations,
            "latitude": coordinate.latitude if coordinate else None,
            "longitude": coordinate.longitude if coordinate else None,
            "locationType": station.location_type.value,
            "cost": station.cost.value,
            "listingType": station.listing_type.value,
            "photoIDs": list(station.photo_references),
            "dateAdded": station.date_added.timestamp(),
            "addedByUserID": station.added_by_user_id,
            "isCarAccessible": station.is_car_accessible,
            "isDraft": station.is_draft,
            "manualAddress": station.manual_address,
            "manualDescription": station.manual_description,
        }

    def from_local(self, raw: Mapping[str, Any]) -> Station:
        try:
            station_id = raw["id"]
            name = raw["name"]
            date_added = datetime.fromtimestamp(float(raw["dateAdded"]), tz=timezone.utc)
            latitude, longitude = raw.get("latitude"), raw.get("longitude")
            coordinate = (
                Coordinate(float(latitude), float(longitude))
                if latitude is not None and longitude is not None
                else None
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise StationDecodeError(f"Invalid local draft: {exc}") from exc

        car_accessible = raw.get("isCarAccessible")

        return Station(
            id=str(station_id),
            name=str(name),
            description=raw.get("description") or "",
            limitations=raw.get("limitations") or "",
            coordinate=coordinate,
            location_type=LocationType.from_wire(raw.get("locationType")),
            cost=RefillCost.from_wire(raw.get("cost")),
            listing_type=ListingType.from_wire(raw.get("listingType")),
            photo_references=list(raw.get("photoIDs") or []),
            date_added=date_added,
            added_by_user_id=raw.get("addedByUserID") or "",
            is_car_accessible=car_accessible if isinstance(car_accessible, bool) else None,
            is_draft=bool(raw.get("isDraft", True)),
            manual_address=_optional_str(raw.get("manualAddress")),
            manual_description=_optional_str(raw.get("manualDescription")),
        )
