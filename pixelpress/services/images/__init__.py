"""Image decoding, resizing and encoding (safe from async request handlers)."""

from __future__ import annotations

from .decoding import decode_image, decode_image_async
from .encoders import (
    SUPPORTED_CONTENT_TYPES,
    Encoder,
    is_supported_content_type,
    select_encoder,
)
from .engine import (
    fit_dimensions,
    resize_by_dimensions,
    resize_by_target_size,
    resize_image,
    resize_image_async,
)
from .errors import ImageDecodeError, ImageEncodeError, ImageProcessingError
from .models import EncodedResult, ResizeMode, ResizeRequest

__all__ = [
    "SUPPORTED_CONTENT_TYPES",
    "EncodedResult",
    "Encoder",
    "ImageDecodeError",
    "ImageEncodeError",
    "ImageProcessingError",
    "ResizeMode",
    "ResizeRequest",
    "decode_image",
    "decode_image_async",
    "fit_dimensions",
    "is_supported_content_type",
    "resize_by_dimensions",
    "resize_by_target_size",
    "resize_image",
    "resize_image_async",
    "select_encoder",
]
