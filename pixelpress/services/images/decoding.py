"""Decode uploaded bytes into Pillow images."""

from __future__ import annotations

from io import BytesIO

import anyio
from PIL import Image as PilImage

from .errors import ImageDecodeError


def decode_image(data: bytes) -> PilImage.Image:
    """Parse ``data`` into a fully loaded image.

    The caller owns the returned image and should close it (it is a context
    manager).
    """
    if not data:
        raise ImageDecodeError("Image data is empty")

    try:
        image = PilImage.open(BytesIO(data))
    except (PilImage.DecompressionBombError, OSError, ValueError) as exc:
        raise ImageDecodeError(f"Cannot decode image: {exc}") from exc

    try:
        image.load()
    except (PilImage.DecompressionBombError, OSError, ValueError) as exc:
        image.close()
        raise ImageDecodeError(f"Cannot decode image: {exc}") from exc

    if image.width <= 0 or image.height <= 0:
        image.close()
        raise ImageDecodeError(f"Image has invalid size {image.size}")
    return image


async def decode_image_async(data: bytes) -> PilImage.Image:
    """Decode in a worker thread so request handlers stay responsive."""
    return await anyio.to_thread.run_sync(decode_image, data)
