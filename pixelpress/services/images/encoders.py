"""Map content types to Pillow encoders."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, replace
from io import BytesIO
from typing import Any, Final

from PIL import Image as PilImage
from PIL import ImageSequence

from .errors import ImageEncodeError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE: Final[str] = "image/jpeg"

# content type -> (Pillow format, has a lossy quality parameter)
_FORMATS: Final[dict[str, tuple[str, bool]]] = {
    "image/jpeg": ("JPEG", True),
    "image/jpg": ("JPEG", True),
    "image/png": ("PNG", False),
    "image/gif": ("GIF", False),
    "image/bmp": ("BMP", False),
    "image/webp": ("WEBP", False),
}

SUPPORTED_CONTENT_TYPES: Final[tuple[str, ...]] = tuple(_FORMATS)

# Pixel modes each writer accepts as-is; anything else is converted first.
# GIF is None because its writer quantizes every mode itself.
_WRITABLE_MODES: Final[dict[str, tuple[str, ...] | None]] = {
    "JPEG": ("RGB", "L", "CMYK"),
    "PNG": ("1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"),
    "GIF": None,
    "BMP": ("1", "L", "P", "RGB", "RGBA"),
    "WEBP": ("RGB", "RGBA"),
}

# Formats whose writers take several frames (save_all).
_ANIMATED_FORMATS: Final[frozenset[str]] = frozenset({"GIF", "WEBP"})

# Formats whose writers embed ICC profiles and EXIF blocks.
_METADATA_FORMATS: Final[frozenset[str]] = frozenset({"JPEG", "PNG", "WEBP"})


def normalize_content_type(content_type: str | None) -> str:
    """Lowercase a content type and drop any media-type parameters."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def is_supported_content_type(content_type: str | None) -> bool:
    return normalize_content_type(content_type) in _FORMATS


def _has_alpha(image: PilImage.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info


def _flatten(image: PilImage.Image) -> PilImage.Image:
    """Composite transparent images onto white so they fit an RGB-only codec."""
    if not _has_alpha(image):
        return image.convert("RGB")

    rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    background = PilImage.new("RGB", rgba.size, (255, 255, 255))
    background.paste(rgba, mask=rgba.split()[-1])
    if rgba is not image:
        rgba.close()
    return background


def is_animated(image: PilImage.Image) -> bool:
    return getattr(image, "n_frames", 1) > 1


def iter_frames(image: PilImage.Image) -> Iterator[PilImage.Image]:
    """Yield every frame of ``image``; a still image yields itself.

    Frames are the live image seeked to each position, so copy or resize
    one before asking for the next. The image is rewound afterwards.
    """
    if not is_animated(image):
        yield image
        return
    try:
        yield from ImageSequence.Iterator(image)
    finally:
        image.seek(0)


@dataclass(frozen=True)
class Encoder:
    """A format-specific writer for Pillow images.

    ``supports_quality`` tells callers whether varying ``quality`` changes
    the output at all; the size search relies on it instead of looking at
    the content type.
    """

    format: str
    content_type: str
    supports_quality: bool = False
    quality: int | None = None

    def with_quality(self, quality: int | None) -> Encoder:
        """Return a copy that encodes at ``quality``.

        Encoders without a quality parameter ignore the value.
        """
        if not self.supports_quality:
            return self
        _check_quality(quality)
        return replace(self, quality=quality)

    def _prepare(self, image: PilImage.Image) -> PilImage.Image:
        modes = _WRITABLE_MODES.get(self.format)
        if modes is None or image.mode in modes:
            return image
        if self.format == "JPEG":
            return _flatten(image)
        if _has_alpha(image) and "RGBA" in modes:
            return image.convert("RGBA")
        return image.convert("RGB")

    def _save_params(self, frames: Sequence[PilImage.Image]) -> dict[str, Any]:
        source = frames[0]
        params: dict[str, Any] = {}
        if self.supports_quality and self.quality is not None:
            params["quality"] = self.quality

        if self.format in _METADATA_FORMATS:
            for key in ("icc_profile", "exif"):
                value = source.info.get(key)
                if value:
                    params[key] = value

        if len(frames) > 1 and self.format in _ANIMATED_FORMATS:
            params["save_all"] = True
            params["duration"] = [frame.info.get("duration", 100) for frame in frames]
            if "loop" in source.info:
                params["loop"] = source.info["loop"]
        return params

    def encode(self, image: PilImage.Image) -> bytes:
        """Serialize ``image`` into an in-memory buffer, every frame included."""
        if not is_animated(image) or self.format not in _ANIMATED_FORMATS:
            return self.encode_frames([image])

        frames = [frame.copy() for frame in iter_frames(image)]
        try:
            return self.encode_frames(frames)
        finally:
            for frame in frames:
                frame.close()

    def encode_frames(self, frames: Sequence[PilImage.Image]) -> bytes:
        """Serialize a frame sequence.

        Formats that cannot animate keep only the first frame. Metadata and
        timing are read from the frames' ``info`` so converted copies do not
        lose it.
        """
        if not frames:
            raise ValueError("No frames to encode")
        if self.format not in _ANIMATED_FORMATS:
            frames = frames[:1]

        params = self._save_params(frames)
        buffer = BytesIO()
        prepared: list[PilImage.Image] = []
        try:
            for frame in frames:
                prepared.append(self._prepare(frame))
            first, *rest = prepared
            if rest:
                params["append_images"] = rest
            first.save(buffer, format=self.format, **params)
        except (OSError, ValueError) as exc:
            raise ImageEncodeError(
                f"Cannot encode {frames[0].mode} image as {self.format}: {exc}"
            ) from exc
        finally:
            for original, converted in zip(frames, prepared):
                if converted is not original:
                    converted.close()
        return buffer.getvalue()


def _check_quality(quality: int | None) -> None:
    if quality is not None and not 0 <= quality <= 100:
        raise ValueError(f"Quality must be between 0 and 100, got {quality}")


def select_encoder(content_type: str | None, quality: int | None = None) -> Encoder:
    """Return the encoder for ``content_type``.

    JPEG honours ``quality``; every other recognised format ignores it.
    Unknown content types get a default-quality JPEG encoder instead of an
    error.
    """
    key = normalize_content_type(content_type)
    known = _FORMATS.get(key)
    if known is None:
        logger.debug(
            "Unrecognised content type %r, falling back to %s",
            content_type,
            DEFAULT_CONTENT_TYPE,
        )
        return Encoder("JPEG", DEFAULT_CONTENT_TYPE, supports_quality=True)

    pil_format, supports_quality = known
    if not supports_quality:
        return Encoder(pil_format, key)

    _check_quality(quality)
    return Encoder(pil_format, key, supports_quality=True, quality=quality)
