"""Errors raised by the image pipeline."""


class ImageProcessingError(Exception):
    """Base error for decode/resize/encode failures."""


class ImageDecodeError(ImageProcessingError):
    """Uploaded bytes could not be parsed into a raster image."""


class ImageEncodeError(ImageProcessingError):
    """The codec could not write the current pixel buffer."""
