"""Tests for photo compression."""

import io
import os

import pytest
from PIL import Image

from waterrefill.services.photo_service import PhotoEncodingError, PhotoService
from waterrefill.tests.conftest import make_jpeg


def _png(width, height, mode="RGBA"):
    buffer = io.BytesIO()
    Image.new(mode, (width, height), (10, 200, 90, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_large_image_is_scaled_to_max_dimension():
    encoded = PhotoService(max_dimension=100).compress(make_jpeg(400, 200))

    with Image.open(io.BytesIO(encoded)) as image:
        assert image.format == "JPEG"
        assert image.size == (100, 50)


def test_transparent_png_becomes_jpeg():
    encoded = PhotoService().compress(_png(32, 32))

    with Image.open(io.BytesIO(encoded)) as image:
        assert image.format == "JPEG"
        assert image.mode == "RGB"


def test_garbage_input_raises():
    with pytest.raises(PhotoEncodingError):
        PhotoService().compress(b"definitely not an image")


def test_oversized_pixel_count_raises_encoding_error(monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

    with pytest.raises(PhotoEncodingError):
        PhotoService().compress(make_jpeg(64, 48))


def test_incompressible_photo_raises():
    buffer = io.BytesIO()
    Image.frombytes("RGB", (256, 256), os.urandom(256 * 256 * 3)).save(buffer, format="PNG")

    with pytest.raises(PhotoEncodingError):
        PhotoService(max_bytes=1024).compress(buffer.getvalue())
