"""Image resize routes."""

import logging
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from fastapi.responses import Response

from pixelpress.config import config
from pixelpress.services.images import (
    ImageDecodeError,
    ResizeRequest,
    decode_image_async,
    is_supported_content_type,
    resize_image_async,
)

logger = logging.getLogger("pixelpress.resize")

router = APIRouter(prefix="/api", tags=["resize"])


def _parse_positive_int(value: str | None) -> int | None:
    """Parse an optional numeric form field.

    Blank, non-numeric and non-positive values count as not supplied.
    """

    if value is None:
        return None

    cleaned = str(value).strip()
    if not cleaned:
        return None

    try:
        parsed = int(cleaned)
    except ValueError:
        return None
    return parsed if parsed > 0 else None


def _download_name(filename: str | None) -> str:
    """Build the attachment name for a resized upload."""

    name = Path(filename).name if filename else ""
    # Header values must be latin-1; keep it to plain ASCII.
    name = name.encode("ascii", "ignore").decode().replace('"', "")
    return f"resized_{name or 'image.jpg'}"


def _bad_request(detail: str) -> HTTPException:
    logger.warning(detail)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _build_request(
    content_type: str,
    max_width: int | None,
    max_height: int | None,
    target_size: int | None,
) -> ResizeRequest:
    if max_width is None and max_height is None and target_size is None:
        raise _bad_request("Please provide at least one resize parameter")

    if max_width is not None and not (
        config.MIN_DIMENSION <= max_width <= config.MAX_DIMENSION
    ):
        raise _bad_request("Width must be between 1 and 10,000 pixels")
    if max_height is not None and not (
        config.MIN_DIMENSION <= max_height <= config.MAX_DIMENSION
    ):
        raise _bad_request("Height must be between 1 and 10,000 pixels")
    if target_size is not None and not (
        config.MIN_TARGET_SIZE <= target_size <= config.MAX_TARGET_SIZE
    ):
        raise _bad_request("Target size must be between 1KB and 100MB")

    return ResizeRequest(
        content_type=content_type,
        max_width=max_width,
        max_height=max_height,
        target_size=target_size,
    )


@router.post("/resize")
async def resize(
    image: UploadFile | None = File(None),
    max_width: Annotated[str | None, Form(alias="maxWidth")] = None,
    max_height: Annotated[str | None, Form(alias="maxHeight")] = None,
    target_size: Annotated[str | None, Form(alias="targetSize")] = None,
) -> Response:
    """Resize an uploaded image to pixel bounds or a byte budget."""
    if image is None:
        raise _bad_request("No image file provided")

    content = await image.read()
    if not content:
        raise _bad_request("No image file provided")

    content_type = image.content_type or ""
    logger.info(
        "Processing image: %s, size: %s bytes, content type: %s",
        image.filename,
        len(content),
        content_type,
    )

    if len(content) > config.MAX_UPLOAD_BYTES:
        raise _bad_request("File size too large. Maximum size is 20MB")

    if not is_supported_content_type(content_type):
        raise _bad_request(
            "Invalid image format. Supported formats: JPG, PNG, GIF, BMP, WEBP"
        )

    request = _build_request(
        content_type,
        _parse_positive_int(max_width),
        _parse_positive_int(max_height),
        _parse_positive_int(target_size),
    )
    logger.info(
        "Resize parameters - width: %s, height: %s, target size: %s",
        request.max_width,
        request.max_height,
        request.target_size,
    )

    try:
        decoded = await decode_image_async(content)
    except ImageDecodeError:
        logger.exception("Failed to load image file")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid image file. Please upload a valid image.",
        ) from None

    try:
        with decoded:
            logger.info("Image loaded: %sx%s", decoded.width, decoded.height)
            result = await resize_image_async(decoded, request)
    except Exception:
        logger.exception("Unexpected error during image processing")
        return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.info("Resize completed. Result size: %s bytes", result.size)

    headers = {
        "Content-Disposition": (
            f'attachment; filename="{_download_name(image.filename)}"'
        ),
        "X-Resize-Attempts": str(result.attempts),
        "X-Target-Met": "true" if result.target_met else "false",
    }
    if result.quality is not None:
        headers["X-Resize-Quality"] = str(result.quality)

    return Response(content=result.data, media_type=content_type, headers=headers)
