"""Stateful coordinator behind the map and station screens."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from ..models.station import Coordinate, ListingType, Station
from .draft_store import DraftStore
from .local_store import LocalStorageError
from .region_debouncer import MapRegion, RegionDebouncer
from .results import OperationResult
from .station_filter import StationFilter
from .station_query import NearbyStationService, StationQueryError
from .station_submission import InvalidStationError, StationSubmissionService, SubmissionError

logger = logging.getLogger(__name__)

EMPTY_AREA_MESSAGE = "No stations found in your area yet. Be the first to add one!"


class StationsController:
    """Owns the loaded station list, filters, loading flag and error message.

    All state is mutated from coroutines on one event loop. Overlapping
    ``load_nearby`` calls are numbered; a response that is not the newest
    one issued is dropped instead of overwriting fresher results.
    """

    def __init__(
        self,
        query: NearbyStationService,
        submission: StationSubmissionService,
        drafts: DraftStore,
        search_radius_miles: float = 1.0,
        debounce_seconds: float = 1.0,
    ):
        self._query = query
        self._submission = submission
        self._drafts = drafts
        self.search_radius_miles = search_radius_miles
        self.filters = StationFilter()
        self.stations: List[Station] = []
        self.user_stations: List[Station] = []
        self.is_loading = False
        self.error_message: Optional[str] = None
        self._request_seq = 0
        self._in_flight = 0
        self.debouncer = RegionDebouncer(self._on_region_settled, quiet_period=debounce_seconds)

    @property
    def filtered_stations(self) -> List[Station]:
        return self.filters.apply(self.stations)

    def region_did_change(self, region: MapRegion) -> None:
        self.debouncer.region_did_change(region)

    async def _on_region_settled(self, region: MapRegion) -> None:
        await self.load_nearby(region.center, self.search_radius_miles)

    async def load_nearby(self, center: Coordinate, radius_miles: float) -> OperationResult:
        self._request_seq += 1
        seq = self._request_seq
        self._in_flight += 1
        self.is_loading = True
        self.error_message = None

        try:
            stations = await self._query.find_nearby(center, radius_miles)
        except StationQueryError as exc:
            result = OperationResult.failed(f"Failed to load stations: {exc}")
            if seq == self._request_seq:
                self.stations = []
                self.error_message = result.message
            return result
        finally:
            self._in_flight -= 1
            self.is_loading = self._in_flight > 0

        if seq != self._request_seq:
            logger.debug("Discarding stale nearby response %d (latest %d)", seq, self._request_seq)
            return OperationResult.ok(stations, "stale")

        self.stations = stations
        self.error_message = EMPTY_AREA_MESSAGE if not stations else None
        return OperationResult.ok(stations, self.error_message)

    async def add_station(
        self, station: Station, photos: Sequence[bytes], contributor_id: str
    ) -> OperationResult:
        if station.is_draft or station.coordinate is None:
            return OperationResult.failed("Internal error: Station is a draft or has no coordinates.")

        self.is_loading = True
        self.error_message = None
        try:
            result = await self._submission.submit(station, photos, contributor_id)
        except (InvalidStationError, SubmissionError) as exc:
            logger.error("Station submission failed: %s", exc)
            return OperationResult.failed(f"Failed to save station: {exc}")
        finally:
            self.is_loading = False

        saved = result.station
        if all(existing.id != saved.id for existing in self.stations):
            self.stations.append(saved)
        if contributor_id and all(existing.id != saved.id for existing in self.user_stations):
            self.user_stations.append(saved)
        return OperationResult.ok(result)

    async def save_draft(self, station: Station) -> OperationResult:
        try:
            draft = await self._drafts.save(station)
        except LocalStorageError as exc:
            return OperationResult.failed(f"Could not save draft: {exc}")
        return OperationResult.ok(draft, "Draft saved.")

    async def list_drafts(self) -> OperationResult:
        try:
            return OperationResult.ok(await self._drafts.load_sorted())
        except LocalStorageError as exc:
            return OperationResult.failed(f"Could not load drafts: {exc}")

    async def delete_draft(self, draft_id: str) -> OperationResult:
        try:
            await self._drafts.delete(draft_id)
        except LocalStorageError as exc:
            return OperationResult.failed(f"Could not delete draft: {exc}")
        return OperationResult.ok(message="Draft deleted.")

    async def submit_draft(
        self,
        draft: Station,
        photos: Sequence[bytes],
        contributor_id: str,
        coordinate: Optional[Coordinate] = None,
    ) -> OperationResult:
        """Submit a completed draft; the local copy is removed only on success."""
        final = replace(draft.as_submitted(contributor_id), coordinate=coordinate or draft.coordinate)
        result = await self.add_station(final, photos, contributor_id)
        if not result.success:
            return result

        try:
            await self._drafts.delete(draft.id)
        except LocalStorageError as exc:
            logger.error("Station %s submitted but draft %s was not removed: %s",
                         result.value.document_id, draft.id, exc)
            return OperationResult.ok(result.value, f"Submitted, but the draft could not be removed: {exc}")
        return result

    async def load_user_stations(
        self, user_id: str, listing_type: ListingType = ListingType.USER
    ) -> OperationResult:
        self.is_loading = True
        self.error_message = None
        self.user_stations = []
        try:
            self.user_stations = await self._query.find_by_contributor(user_id, listing_type)
        except StationQueryError as exc:
            self.error_message = f"Error loading your stations: {exc}"
            return OperationResult.failed(self.error_message)
        finally:
            self.is_loading = False
        return OperationResult.ok(self.user_stations)
