from io import BytesIO

import numpy as np
import pytest
from PIL import Image as PILImage

from toonify.api_server import create_app
from toonify.models.pixel_buffer import PixelBuffer
from toonify.repositories.output_repository import OutputRepository
from toonify.repositories.template_repository import TemplateRepository


def solid(width, height, rgba=(0, 0, 0, 255)) -> PixelBuffer:
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[:] = rgba
    return PixelBuffer(pixels=pixels)


def split(width, height, left_rgba, right_rgba, boundary) -> PixelBuffer:
    """Columns [0, boundary) get left_rgba, the rest right_rgba."""
    buf = solid(width, height, right_rgba)
    buf.pixels[:, :boundary] = left_rgba
    return buf


def checkerboard(width, height, period, dark=(0, 0, 0, 255), light=(255, 255, 255, 255)) -> PixelBuffer:
    ys, xs = np.mgrid[0:height, 0:width]
    cells = ((xs // period) + (ys // period)) % 2 == 1
    buf = solid(width, height, dark)
    buf.pixels[cells] = light
    return buf


def png_bytes(buffer: PixelBuffer) -> bytes:
    out = BytesIO()
    PILImage.fromarray(buffer.pixels).save(out, format="PNG")
    return out.getvalue()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def noisy_buffer(rng):
    def _make(width=40, height=30):
        return PixelBuffer(pixels=rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8))
    return _make


@pytest.fixture
def registry():
    return TemplateRepository()


@pytest.fixture
def sink(tmp_path):
    return OutputRepository(tmp_path / "outputs")


@pytest.fixture
def app(registry, sink, monkeypatch):
    monkeypatch.delenv("ADD_TEST_TEMPLATE", raising=False)
    app = create_app(registry=registry, sink=sink)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
