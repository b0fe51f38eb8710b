"""Value objects that flow through the resize pipeline.

A ``ResizeRequest`` describes what the caller wants, an ``EncodedResult``
is what the engine hands back. Both are immutable.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ResizeMode(Enum):
    """Which constraint drives the resize."""

    DIMENSIONS = "dimensions"
    TARGET_SIZE = "target_size"


@dataclass(frozen=True)
class ResizeRequest:
    """Resize parameters for a single image.

    Either a pixel bound (``max_width`` and/or ``max_height``) or a byte
    budget (``target_size``) must be set. When both are present the byte
    budget wins.
    """

    content_type: str
    max_width: int | None = None
    max_height: int | None = None
    target_size: int | None = None

    def __post_init__(self) -> None:
        if self.target_size is None and self.max_width is None and self.max_height is None:
            raise ValueError("At least one resize parameter is required")

    @property
    def mode(self) -> ResizeMode:
        if self.target_size is not None:
            return ResizeMode.TARGET_SIZE
        return ResizeMode.DIMENSIONS


@dataclass(frozen=True)
class EncodedResult:
    """Encoded image bytes plus what it took to produce them."""

    data: bytes
    content_type: str
    width: int
    height: int
    quality: int | None = None
    attempts: int = 1
    target_met: bool = True

    @property
    def size(self) -> int:
        """Encoded size in bytes."""
        return len(self.data)
