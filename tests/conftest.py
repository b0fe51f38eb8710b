from collections.abc import AsyncGenerator, Callable
from io import BytesIO

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image as PilImage

from pixelpress.main import app


@pytest.fixture
async def test_client() -> AsyncGenerator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def _encode(image: PilImage.Image, fmt: str) -> bytes:
    buf = BytesIO()
    image.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def make_image() -> Callable[..., PilImage.Image]:
    """Build an in-memory image; ``noisy`` gives JPEG something to compress."""

    def _make(
        size: tuple[int, int] = (64, 64),
        *,
        mode: str = "RGB",
        color: tuple[int, ...] = (200, 30, 30),
        noisy: bool = False,
    ) -> PilImage.Image:
        if noisy:
            noise = PilImage.effect_noise(size, 80)
            return PilImage.merge("RGB", (noise, noise.rotate(90), noise.rotate(180)))
        return PilImage.new(mode, size, color)

    return _make


@pytest.fixture
def make_image_bytes(make_image) -> Callable[..., bytes]:
    def _make(
        size: tuple[int, int] = (64, 64), fmt: str = "JPEG", *, noisy: bool = False
    ) -> bytes:
        return _encode(make_image(size, noisy=noisy), fmt)

    return _make
