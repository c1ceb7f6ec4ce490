"""Blob storage addressed by string paths."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class ObjectStorageError(Exception):
    """Raised when a blob cannot be stored or retrieved."""


def normalize_path(path: str) -> str:
    """Validate a storage path and return it without leading slashes."""
    cleaned = path.strip().lstrip("/")
    parts = PurePosixPath(cleaned).parts
    if not parts or any(part in ("..", ".") for part in parts):
        raise ObjectStorageError(f"Invalid storage path: {path!r}")
    return "/".join(parts)


class ObjectStorage(ABC):
    """Put/get binary blobs by path."""

    @abstractmethod
    async def put(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        """Store ``data`` at ``path`` and return the normalized path."""

    @abstractmethod
    async def get(self, path: str, max_size: Optional[int] = None) -> bytes:
        """Return the blob stored at ``path``."""

    async def close(self) -> None:
        return None


class FileSystemObjectStorage(ObjectStorage):
    """Stores blobs as files below a root directory."""

    def __init__(self, root: str):
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        return self.root / normalize_path(path)

    async def put(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        target = self._resolve(path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as exc:
            raise ObjectStorageError(f"Failed to store {path}: {exc}") from exc
        return normalize_path(path)

    async def get(self, path: str, max_size: Optional[int] = None) -> bytes:
        target = self._resolve(path)
        try:
            data = await asyncio.to_thread(target.read_bytes)
        except FileNotFoundError as exc:
            raise ObjectStorageError(f"No object at {path}") from exc
        except OSError as exc:
            raise ObjectStorageError(f"Failed to read {path}: {exc}") from exc
        if max_size is not None and len(data) > max_size:
            raise ObjectStorageError(f"Object at {path} exceeds {max_size} bytes")
        return data


class HttpObjectStorage(ObjectStorage):
    """Stores blobs behind an HTTP endpoint accepting PUT and GET per path."""

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout, headers=headers)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{normalize_path(path)}"

    async def put(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        try:
            response = await self._client.put(
                self._url(path), content=data, headers={"Content-Type": content_type}
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ObjectStorageError(f"Failed to upload {path}: {exc}") from exc
        logger.debug("Uploaded %d bytes to %s", len(data), path)
        return normalize_path(path)

    async def get(self, path: str, max_size: Optional[int] = None) -> bytes:
        try:
            response = await self._client.get(self._url(path))
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ObjectStorageError(f"Failed to download {path}: {exc}") from exc
        data = response.content
        if max_size is not None and len(data) > max_size:
            raise ObjectStorageError(f"Object at {path} exceeds {max_size} bytes")
        return data

    async def close(self) -> None:
        await self._client.aclose()
