"""Resize engine.

Two modes are supported:

* dimension-based: scale the image to fit pixel bounds, aspect ratio kept,
  then re-encode once at default quality;
* size-based: keep the pixels, step the lossy quality down from 90 to 10
  until the encoded bytes fit the budget.

The functions here are synchronous and CPU bound. Async callers should use
``resize_image_async`` which runs the work in a thread.
"""

from __future__ import annotations

import logging
from typing import Final

import anyio
from PIL import Image as PilImage

from .encoders import iter_frames, select_encoder
from .errors import ImageProcessingError
from .models import EncodedResult, ResizeMode, ResizeRequest

logger = logging.getLogger("pixelpress.resize")

QUALITY_START: Final[int] = 90
QUALITY_STEP: Final[int] = 10
QUALITY_FLOOR: Final[int] = 10


def quality_steps() -> range:
    """Qualities tried by the size search, highest first (90, 80, ..., 10)."""
    return range(QUALITY_START, QUALITY_FLOOR - 1, -QUALITY_STEP)


def _scaled(value: int, numerator: int, denominator: int) -> int:
    return max(1, round(value * numerator / denominator))


def fit_dimensions(
    width: int,
    height: int,
    max_width: int | None = None,
    max_height: int | None = None,
) -> tuple[int, int]:
    """Compute the output size for a dimension-based resize.

    With both bounds the image is shrunk (never enlarged) to fit the box.
    With a single bound that side is set to the bound exactly and the other
    side follows the aspect ratio.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid source size {width}x{height}")

    if max_width is not None and max_height is not None:
        if width <= max_width and height <= max_height:
            return width, height
        # Whichever side needs the larger reduction decides the scale.
        if max_width * height <= max_height * width:
            return max_width, min(max_height, _scaled(height, max_width, width))
        return min(max_width, _scaled(width, max_height, height)), max_height

    if max_width is not None:
        return max_width, _scaled(height, max_width, width)

    if max_height is not None:
        return _scaled(width, max_height, height), max_height

    raise ValueError("max_width or max_height is required")


def resize_by_dimensions(
    image: PilImage.Image,
    max_width: int | None,
    max_height: int | None,
    content_type: str,
) -> EncodedResult:
    """Scale ``image`` into the given bounds and encode it.

    Every frame of an animated image is scaled. The input image is left
    untouched; the resized frames are discarded after encoding.
    """
    new_width, new_height = fit_dimensions(
        image.width, image.height, max_width, max_height
    )
    logger.info(
        "Resizing by dimensions: %sx%s -> %sx%s (bounds %sx%s)",
        image.width,
        image.height,
        new_width,
        new_height,
        max_width,
        max_height,
    )

    encoder = select_encoder(content_type)
    if (new_width, new_height) == image.size:
        data = encoder.encode(image)
    else:
        frames: list[PilImage.Image] = []
        try:
            for frame in iter_frames(image):
                frames.append(
                    frame.resize((new_width, new_height), PilImage.Resampling.LANCZOS)
                )
        except (OSError, ValueError) as exc:
            for frame in frames:
                frame.close()
            raise ImageProcessingError(f"Cannot resize {image.mode} image: {exc}") from exc
        try:
            data = encoder.encode_frames(frames)
        finally:
            for frame in frames:
                frame.close()

    logger.info("Dimension resize done: %s bytes", len(data))
    return EncodedResult(
        data=data,
        content_type=encoder.content_type,
        width=new_width,
        height=new_height,
        quality=encoder.quality,
    )


def resize_by_target_size(
    image: PilImage.Image,
    target_size: int,
    content_type: str,
) -> EncodedResult:
    """Encode ``image`` at the highest quality that fits ``target_size`` bytes.

    Pixel dimensions never change. Formats without a quality parameter are
    encoded once. If even the lowest quality is too large, that encoding is
    returned with ``target_met`` set to False.
    """
    if target_size <= 0:
        raise ValueError(f"target_size must be positive, got {target_size}")

    encoder = select_encoder(content_type)
    width, height = image.size

    if not encoder.supports_quality:
        data = encoder.encode(image)
        logger.info(
            "%s has no quality setting, encoded once: %s bytes (target %s)",
            encoder.content_type,
            len(data),
            target_size,
        )
        return EncodedResult(
            data=data,
            content_type=encoder.content_type,
            width=width,
            height=height,
            target_met=len(data) <= target_size,
        )

    data = b""
    quality = QUALITY_START
    attempts = 0
    for quality in quality_steps():
        attempts += 1
        data = encoder.with_quality(quality).encode(image)
        logger.debug("Quality %s -> %s bytes", quality, len(data))
        if len(data) <= target_size:
            logger.info(
                "Target size reached at quality %s: %s bytes (target %s)",
                quality,
                len(data),
                target_size,
            )
            return EncodedResult(
                data=data,
                content_type=encoder.content_type,
                width=width,
                height=height,
                quality=quality,
                attempts=attempts,
            )

    logger.warning(
        "Could not reach target size: %s bytes at quality %s (target %s)",
        len(data),
        quality,
        target_size,
    )
    return EncodedResult(
        data=data,
        content_type=encoder.content_type,
        width=width,
        height=height,
        quality=quality,
        attempts=attempts,
        target_met=False,
    )


def resize_image(image: PilImage.Image, request: ResizeRequest) -> EncodedResult:
    """Run whichever resize mode ``request`` selects."""
    if request.mode is ResizeMode.TARGET_SIZE and request.target_size is not None:
        return resize_by_target_size(image, request.target_size, request.content_type)
    return resize_by_dimensions(
        image, request.max_width, request.max_height, request.content_type
    )


async def resize_image_async(
    image: PilImage.Image, request: ResizeRequest
) -> EncodedResult:
    """Run ``resize_image`` in a worker thread."""
    return await anyio.to_thread.run_sync(resize_image, image, request)
