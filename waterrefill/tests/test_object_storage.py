"""Tests for blob storage backends."""

from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from waterrefill.services.object_storage import (
    HttpObjectStorage,
    ObjectStorageError,
    normalize_path,
)


def test_normalize_path():
    assert normalize_path("/stations/abc/1.jpg") == "stations/abc/1.jpg"
    for bad in ("", "/", "../etc/passwd", "stations/../x.jpg"):
        with pytest.raises(ObjectStorageError):
            normalize_path(bad)


@pytest.mark.asyncio
async def test_filesystem_put_and_get(object_storage):
    path = await object_storage.put("/stations/doc/a.jpg", b"jpeg-bytes", "image/jpeg")

    assert path == "stations/doc/a.jpg"
    assert await object_storage.get(path) == b"jpeg-bytes"
    with pytest.raises(ObjectStorageError):
        await object_storage.get(path, max_size=3)


@pytest.mark.asyncio
async def test_filesystem_missing_object(object_storage):
    with pytest.raises(ObjectStorageError):
        await object_storage.get("stations/none.jpg")


@pytest.mark.asyncio
@patch("httpx.AsyncClient.put")
async def test_http_put_sends_content_type(mock_put):
    """Test uploads are PUT to the base URL joined with the path."""
    mock_response = AsyncMock()
    mock_response.raise_for_status = Mock()
    mock_put.return_value = mock_response

    storage = HttpObjectStorage("https://blobs.example.com/bucket/", token="secret")
    path = await storage.put("stations/doc/a.jpg", b"data", "image/jpeg")
    await storage.close()

    assert path == "stations/doc/a.jpg"
    args, kwargs = mock_put.call_args
    assert args[0] == "https://blobs.example.com/bucket/stations/doc/a.jpg"
    assert kwargs["headers"]["Content-Type"] == "image/jpeg"


@pytest.mark.asyncio
async def test_http_errors_become_storage_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    storage = HttpObjectStorage("https://blobs.example.com", client=client)

    with pytest.raises(ObjectStorageError):
        await storage.put("stations/doc/a.jpg", b"data")
    with pytest.raises(ObjectStorageError):
        await storage.get("stations/doc/a.jpg")
    await storage.close()
