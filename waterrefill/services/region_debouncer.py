"""Coalesces rapid map-region changes into occasional reloads."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from ..models.station import Coordinate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MapRegion:
    center: Coordinate
    latitude_delta: float
    longitude_delta: float


RegionHandler = Callable[[MapRegion], Awaitable[None]]


class RegionDebouncer:
    """Calls ``handler`` once a region has been stable for ``quiet_period`` seconds.

    A settled region equal to the last dispatched one is dropped. A dispatch
    that has already started is never cancelled by later changes.
    """

    def __init__(self, handler: RegionHandler, quiet_period: float = 1.0):
        self._handler = handler
        self.quiet_period = quiet_period
        self._pending: Optional[asyncio.Task] = None
        self._last_dispatched: Optional[MapRegion] = None

    @property
    def last_dispatched(self) -> Optional[MapRegion]:
        return self._last_dispatched

    def region_did_change(self, region: MapRegion) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = asyncio.create_task(self._settle(region))
        self._pending.add_done_callback(self._log_failure)

    @staticmethod
    def _log_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Region reload failed: %s", exc, exc_info=exc)

    async def _settle(self, region: MapRegion) -> None:
        await asyncio.sleep(self.quiet_period)
        self._pending = None
        if region == self._last_dispatched:
            logger.debug("Region unchanged, skipping reload")
            return
        self._last_dispatched = region
        logger.debug("Region settled at %s", region.center)
        await self._handler(region)

    async def wait(self) -> None:
        """Wait for the pending region, if any, to settle and dispatch.

        Handler failures are logged, not raised here.
        """
        while self._pending is not None:
            task = self._pending
            await asyncio.wait({task})
            if self._pending is task:
                break

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
