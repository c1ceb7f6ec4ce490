"""On-device key-value state kept in a single JSON file."""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Optional

DEFAULT_SEARCH_RADIUS_KEY = "defaultSearchRadius"
USE_DARK_MODE_KEY = "useDarkMode"
NOTIFICATIONS_ENABLED_KEY = "notificationsEnabled"


class LocalStorageError(Exception):
    """Raised when local state cannot be read or written."""


class LocalKeyValueStore:
    """JSON-file backed key-value store for a single app instance.

    Writes replace the file atomically; there is no cross-process locking.
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read_all(self) -> Dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            raise LocalStorageError(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise LocalStorageError(f"{self.path} does not contain a JSON object")
        return payload

    def _write_all(self, payload: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(payload, handle, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, TypeError, ValueError) as exc:
            raise LocalStorageError(f"Cannot write {self.path}: {exc}") from exc

    async def get(self, key: str, default: Any = None) -> Any:
        payload = await asyncio.to_thread(self._read_all)
        return payload.get(key, default)

    async def set(self, key: str, value: Any) -> None:
        async with self._lock:
            payload = await asyncio.to_thread(self._read_all)
            payload[key] = value
            await asyncio.to_thread(self._write_all, payload)

    async def update(self, key: str, fn: Callable[[Any], Any], default: Any = None) -> Any:
        """Replace the value at ``key`` with ``fn(current)`` under the write lock."""
        async with self._lock:
            payload = await asyncio.to_thread(self._read_all)
            value = fn(payload.get(key, default))
            payload[key] = value
            await asyncio.to_thread(self._write_all, payload)
            return value

    async def delete(self, key: str) -> None:
        async with self._lock:
            payload = await asyncio.to_thread(self._read_all)
            if key in payload:
                del payload[key]
                await asyncio.to_thread(self._write_all, payload)


class PreferencesStore:
    """User settings stored as individual scalar entries."""

    def __init__(self, store: LocalKeyValueStore, default_search_radius: float = 1.0):
        self._store = store
        self._default_search_radius = default_search_radius

    async def default_search_radius(self) -> float:
        value = await self._store.get(DEFAULT_SEARCH_RADIUS_KEY)
        return float(value) if isinstance(value, (int, float)) else self._default_search_radius

    async def set_default_search_radius(self, miles: float) -> None:
        if miles <= 0:
            raise ValueError("Search radius must be positive")
        await self._store.set(DEFAULT_SEARCH_RADIUS_KEY, float(miles))

    async def use_dark_mode(self) -> bool:
        return bool(await self._store.get(USE_DARK_MODE_KEY, False))

    async def set_use_dark_mode(self, enabled: bool) -> None:
        await self._store.set(USE_DARK_MODE_KEY, bool(enabled))

    async def notifications_enabled(self) -> bool:
        return bool(await self._store.get(NOTIFICATIONS_ENABLED_KEY, True))

    async def set_notifications_enabled(self, enabled: bool) -> None:
        await self._store.set(NOTIFICATIONS_ENABLED_KEY, bool(enabled))

    async def as_dict(self) -> Dict[str, Optional[Any]]:
        return {
            DEFAULT_SEARCH_RADIUS_KEY: await self.default_search_radius(),
            USE_DARK_MODE_KEY: await self.use_dark_mode(),
            NOTIFICATIONS_ENABLED_KEY: await self.notifications_enabled(),
        }
