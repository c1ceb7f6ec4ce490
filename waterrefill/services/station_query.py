"""Read-side access to submitted stations."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from ..models.station import Coordinate, ListingType, Station
from .document_store import DocumentSnapshot, DocumentStore, DocumentStoreError
from .geo_service import GeoService
from .station_codec import StationCodec

logger = logging.getLogger(__name__)

STATIONS_COLLECTION = "refillStations"
LOCATION_FIELD = "location"


class StationQueryError(Exception):
    """Raised when stations cannot be fetched from the document store."""


class NearbyStationService:
    """Finds stations around a point and other station lookups."""

    def __init__(
        self,
        store: DocumentStore,
        codec: Optional[StationCodec] = None,
        geo: Optional[GeoService] = None,
    ):
        self._store = store
        self._codec = codec or StationCodec()
        self._geo = geo or GeoService()

    async def find_nearby(self, center: Coordinate, radius_miles: float) -> List[Station]:
        """
        Stations within ``radius_miles`` of ``center``.

        The store only filters on one field at a time, so it is asked for a
        coarse latitude/longitude range and the result is trimmed to an exact
        disk here. Undecodable documents are skipped.

        Raises:
            StationQueryError: If the store query fails. No partial results.
        """
        box = self._geo.bounding_box(center, radius_miles)
        logger.debug(
            "Querying stations in lat [%f, %f] lon [%f, %f]",
            box.lat_min, box.lat_max, box.lon_min, box.lon_max,
        )
        try:
            snapshots = await self._store.query_range(
                STATIONS_COLLECTION, LOCATION_FIELD, box.lower, box.upper
            )
        except DocumentStoreError as exc:
            logger.error("Nearby station query failed: %s", exc)
            raise StationQueryError(str(exc)) from exc

        stations = [
            station
            for station in self._decode_all(snapshots)
            if station.coordinate is not None
            and self._geo.within_radius(center, station.coordinate, radius_miles)
        ]
        logger.info(
            "Found %d stations within %.2f miles (%d candidates)",
            len(stations), radius_miles, len(snapshots),
        )
        return stations

    async def find_by_contributor(
        self, user_id: str, listing_type: ListingType = ListingType.USER
    ) -> List[Station]:
        """Stations a user added as the given listing type, newest first."""
        try:
            snapshots = await self._store.where_equal(
                STATIONS_COLLECTION, addedBy=user_id, listingType=listing_type.value
            )
        except DocumentStoreError as exc:
            raise StationQueryError(str(exc)) from exc
        stations = self._decode_all(snapshots)
        return sorted(stations, key=lambda station: station.date_added, reverse=True)

    async def get_station(self, station_id: str) -> Optional[Station]:
        try:
            snapshot = await self._store.get(STATIONS_COLLECTION, station_id)
        except DocumentStoreError as exc:
            raise StationQueryError(str(exc)) from exc
        if snapshot is None:
            return None
        return self._codec.try_decode(snapshot.data, snapshot.id)

    async def get_stations(self, station_ids: Iterable[str]) -> List[Station]:
        try:
            snapshots = await self._store.get_many(STATIONS_COLLECTION, list(station_ids))
        except DocumentStoreError as exc:
            raise StationQueryError(str(exc)) from exc
        return self._decode_all(snapshots)

    def _decode_all(self, snapshots: Iterable[DocumentSnapshot]) -> List[Station]:
        stations = []
        for snapshot in snapshots:
            station = self._codec.try_decode(snapshot.data, snapshot.id)
            if station is not None:
                stations.append(station)
        return stations
