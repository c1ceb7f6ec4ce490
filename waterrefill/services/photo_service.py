"""Photo re-encoding before upload."""

from __future__ import annotations

import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)

MIN_JPEG_QUALITY = 30
QUALITY_STEP = 10


class PhotoEncodingError(Exception):
    """Raised when a photo cannot be decoded or squeezed under the size limit."""


class PhotoService:
    """Compresses user photos into bounded-size JPEGs."""

    content_type = "image/jpeg"
    extension = "jpg"

    def __init__(self, max_dimension: int = 1600, max_bytes: int = 1024 * 1024, quality: int = 70):
        self.max_dimension = max_dimension
        self.max_bytes = max_bytes
        self.quality = quality

    def compress(self, raw: bytes) -> bytes:
        try:
            with Image.open(io.BytesIO(raw)) as source:
                image = ImageOps.exif_transpose(source)
                if image.mode != "RGB":
                    image = image.convert("RGB")
                image.thumbnail((self.max_dimension, self.max_dimension))
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
            raise PhotoEncodingError(f"Unreadable image: {exc}") from exc

        quality = self.quality
        while True:
            buffer = io.BytesIO()
            image.save(buffer, format="JPEG", quality=quality, optimize=True)
            encoded = buffer.getvalue()
            if len(encoded) <= self.max_bytes:
                return encoded
            if quality <= MIN_JPEG_QUALITY:
                raise PhotoEncodingError(
                    f"Photo is {len(encoded)} bytes at quality {quality}, limit is {self.max_bytes}"
                )
            logger.debug("Photo is %d bytes at quality %d, retrying", len(encoded), quality)
            quality = max(MIN_JPEG_QUALITY, quality - QUALITY_STEP)
