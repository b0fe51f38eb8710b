"""Tests for content type to encoder mapping."""

from io import BytesIO

import pytest
from PIL import Image as PilImage

from pixelpress.services.images import ImageEncodeError, select_encoder
from pixelpress.services.images.encoders import (
    SUPPORTED_CONTENT_TYPES,
    Encoder,
    is_supported_content_type,
    normalize_content_type,
)


@pytest.mark.parametrize(
    ("content_type", "pil_format"),
    [
        ("image/jpeg", "JPEG"),
        ("image/jpg", "JPEG"),
        ("image/png", "PNG"),
        ("image/gif", "GIF"),
        ("image/bmp", "BMP"),
        ("image/webp", "WEBP"),
    ],
)
def test_select_encoder_known_types(content_type: str, pil_format: str) -> None:
    encoder = select_encoder(content_type)
    assert encoder.format == pil_format
    assert encoder.content_type == content_type


def test_select_encoder_is_case_insensitive() -> None:
    assert select_encoder("IMAGE/PNG").format == "PNG"
    assert select_encoder("Image/WebP").format == "WEBP"


def test_select_encoder_ignores_parameters() -> None:
    encoder = select_encoder(" image/png; charset=binary ")
    assert encoder.format == "PNG"
    assert encoder.content_type == "image/png"


def test_jpeg_honours_quality() -> None:
    encoder = select_encoder("image/jpeg", quality=55)
    assert encoder.supports_quality
    assert encoder.quality == 55


def test_jpeg_default_quality_is_unset() -> None:
    encoder = select_encoder("image/jpg")
    assert encoder.supports_quality
    assert encoder.quality is None


@pytest.mark.parametrize("content_type", ["image/png", "image/gif", "image/bmp", "image/webp"])
def test_other_formats_ignore_quality(content_type: str) -> None:
    encoder = select_encoder(content_type, quality=20)
    assert not encoder.supports_quality
    assert encoder.quality is None
    assert encoder.with_quality(30) is encoder


def test_unknown_type_falls_back_to_jpeg() -> None:
    encoder = select_encoder("application/octet-stream", quality=40)
    assert encoder.format == "JPEG"
    assert encoder.content_type == "image/jpeg"
    assert encoder.quality is None


def test_missing_type_falls_back_to_jpeg() -> None:
    assert select_encoder(None).format == "JPEG"
    assert select_encoder("").format == "JPEG"


def test_invalid_quality_rejected() -> None:
    with pytest.raises(ValueError):
        select_encoder("image/jpeg", quality=101)
    with pytest.raises(ValueError):
        select_encoder("image/jpeg").with_quality(-1)


def test_supported_content_types() -> None:
    assert len(SUPPORTED_CONTENT_TYPES) == 6
    assert is_supported_content_type("image/JPEG")
    assert not is_supported_content_type("image/tiff")
    assert not is_supported_content_type(None)
    assert normalize_content_type("Image/Gif;x=1") == "image/gif"


def test_lower_quality_gives_smaller_jpeg(make_image) -> None:
    image = make_image((128, 128), noisy=True)
    high = select_encoder("image/jpeg", quality=90).encode(image)
    low = select_encoder("image/jpeg", quality=10).encode(image)
    assert len(low) < len(high)


def test_jpeg_flattens_transparency(make_image) -> None:
    image = make_image((16, 16), mode="RGBA", color=(0, 0, 0, 0))
    data = select_encoder("image/jpeg").encode(image)

    with PilImage.open(BytesIO(data)) as decoded:
        assert decoded.format == "JPEG"
        assert decoded.mode == "RGB"
        r, g, b = decoded.getpixel((8, 8))
        assert min(r, g, b) > 240


@pytest.mark.parametrize(
    ("content_type", "mode", "color"),
    [
        ("image/png", "RGBA", (10, 20, 30, 255)),
        ("image/gif", "RGB", (10, 20, 30)),
        ("image/bmp", "LA", (100, 128)),
        ("image/webp", "P", 3),
        ("image/jpeg", "P", 3),
    ],
)
def test_encode_writes_requested_format(
    make_image, content_type: str, mode: str, color: tuple[int, ...] | int
) -> None:
    image = make_image((20, 10), mode=mode, color=color)
    encoder = select_encoder(content_type)
    data = encoder.encode(image)

    with PilImage.open(BytesIO(data)) as decoded:
        assert decoded.format == encoder.format
        assert decoded.size == (20, 10)


def test_encode_does_not_touch_input(make_image) -> None:
    image = make_image((16, 16), mode="RGBA", color=(1, 2, 3, 4))
    select_encoder("image/jpeg").encode(image)
    assert image.mode == "RGBA"


class _BrokenImage:
    mode = "RGB"
    info: dict[str, object] = {}

    def save(self, *args: object, **kwargs: object) -> None:
        raise OSError("codec exploded")


def test_encode_failure_is_wrapped() -> None:
    encoder = Encoder("PNG", "image/png")
    with pytest.raises(ImageEncodeError, match="codec exploded"):
        encoder.encode(_BrokenImage())  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("mode", "color"),
    [("CMYK", (0, 255, 255, 0)), ("YCbCr", (76, 85, 255)), ("F", 0.5)],
)
def test_png_converts_modes_it_cannot_write(
    mode: str, color: tuple[int, ...] | float
) -> None:
    image = PilImage.new(mode, (12, 8), color)
    data = select_encoder("image/png").encode(image)

    with PilImage.open(BytesIO(data)) as decoded:
        assert decoded.format == "PNG"
        assert decoded.mode == "RGB"
        assert decoded.size == (12, 8)
    assert image.mode == mode


def test_encode_frames_requires_a_frame() -> None:
    with pytest.raises(ValueError):
        select_encoder("image/gif").encode_frames([])


def test_encode_frames_keeps_only_first_frame_for_jpeg(make_image) -> None:
    frames = [
        make_image((10, 10), color=(255, 0, 0)),
        make_image((10, 10), color=(0, 0, 255)),
    ]
    data = select_encoder("image/jpeg").encode_frames(frames)

    with PilImage.open(BytesIO(data)) as decoded:
        red, _, blue = decoded.getpixel((5, 5))
        assert red > 200 and blue < 60
