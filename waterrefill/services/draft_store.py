"""Local persistence for stations that have not been submitted yet."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Optional

from ..models.station import Station
from .local_store import LocalKeyValueStore, LocalStorageError
from .station_codec import StationCodec, StationDecodeError

logger = logging.getLogger(__name__)

DRAFTS_KEY = "draftStations"


class DraftStore:
    """Drafts keyed by station id under a single local entry."""

    def __init__(self, store: LocalKeyValueStore, codec: Optional[StationCodec] = None):
        self._store = store
        self._codec = codec or StationCodec()

    @staticmethod
    def _checked(entries) -> Dict[str, dict]:
        if not isinstance(entries, dict):
            raise LocalStorageError(f"Local entry {DRAFTS_KEY!r} is not a mapping")
        return entries

    async def _entries(self) -> Dict[str, dict]:
        return self._checked(await self._store.get(DRAFTS_KEY, {}))

    async def save(self, station: Station) -> Station:
        """Insert or replace the draft with ``station.id``."""
        draft = station if station.is_draft else replace(station, is_draft=True)
        encoded = self._codec.to_local(draft)

        def put(entries):
            entries = dict(self._checked(entries))
            entries[draft.id] = encoded
            return entries

        await self._store.update(DRAFTS_KEY, put, {})
        logger.info("Saved draft station %s", draft.id)
        return draft

    async def load_all(self) -> List[Station]:
        drafts = []
        for draft_id, raw in (await self._entries()).items():
            try:
                drafts.append(self._codec.from_local(raw))
            except StationDecodeError as exc:
                logger.warning("Ignoring unreadable draft %s: %s", draft_id, exc)
        return drafts

    async def load_sorted(self) -> List[Station]:
        """Drafts, newest first."""
        return sorted(await self.load_all(), key=lambda draft: draft.date_added, reverse=True)

    async def get(self, draft_id: str) -> Optional[Station]:
        raw = (await self._entries()).get(draft_id)
        if raw is None:
            return None
        try:
            return self._codec.from_local(raw)
        except StationDecodeError as exc:
            logger.warning("Ignoring unreadable draft %s: %s", draft_id, exc)
            return None

    async def delete(self, draft_id: str) -> None:
        removed = []

        def drop(entries):
            entries = dict(self._checked(entries))
            if entries.pop(draft_id, None) is not None:
                removed.append(draft_id)
            return entries

        await self._store.update(DRAFTS_KEY, drop, {})
        if not removed:
            return
        logger.info("Deleted draft station %s", draft_id)
