import numpy as np
import pytest

from toonify.errors import DecodeError, EncodeError
from toonify.models.pixel_buffer import PixelBuffer
from toonify.repositories.image_repository import ImageRepository

from conftest import png_bytes, solid


@pytest.fixture
def repo():
    return ImageRepository()


def test_decode_png_keeps_pixels_and_alpha(repo, noisy_buffer):
    original = noisy_buffer(17, 11)
    decoded = repo.decode(png_bytes(original))
    assert (decoded.width, decoded.height) == (17, 11)
    assert decoded.pixels.size == decoded.width * decoded.height * 4
    np.testing.assert_array_equal(decoded.pixels, original.pixels)


def test_decode_grayscale_becomes_opaque_rgba(repo):
    from io import BytesIO
    from PIL import Image as PILImage

    out = BytesIO()
    PILImage.new("L", (5, 4), color=77).save(out, format="PNG")
    decoded = repo.decode(out.getvalue())
    assert decoded.pixels.shape == (4, 5, 4)
    assert (decoded.pixels[:, :, :3] == 77).all()
    assert (decoded.pixels[:, :, 3] == 255).all()


@pytest.mark.parametrize("data", [b"", b"definitely not an image", b"\x89PNG\r\n\x1a\n"])
def test_decode_rejects_malformed_input(repo, data):
    with pytest.raises(DecodeError):
        repo.decode(data)


def test_decode_rejects_truncated_input(repo, noisy_buffer):
    data = png_bytes(noisy_buffer(64, 64))
    with pytest.raises(DecodeError):
        repo.decode(data[: len(data) // 2])


def test_encode_jpeg_drops_alpha(repo):
    buf = solid(8, 8, (200, 40, 40, 0))
    decoded = repo.decode(repo.encode(buf, quality=95))
    assert (decoded.pixels[:, :, 3] == 255).all()
    assert abs(int(decoded.pixels[4, 4, 0]) - 200) < 8


def test_encode_png_is_lossless(repo, noisy_buffer):
    buf = noisy_buffer(9, 7)
    decoded = repo.decode(repo.encode(buf, fmt="png"))
    np.testing.assert_array_equal(decoded.pixels, buf.pixels)


@pytest.mark.parametrize("shape", [(0, 5, 4), (5, 0, 4)])
def test_encode_rejects_empty_buffer(repo, shape):
    with pytest.raises(EncodeError) as info:
        repo.encode(PixelBuffer(pixels=np.zeros(shape, dtype=np.uint8)))
    assert "encode" in str(info.value)


@pytest.mark.parametrize("quality", [-1, 101])
def test_encode_rejects_bad_quality(repo, quality):
    with pytest.raises(EncodeError):
        repo.encode(solid(2, 2), quality=quality)


def test_encode_rejects_unknown_format(repo):
    with pytest.raises(EncodeError):
        repo.encode(solid(2, 2), fmt="TIFF")


def test_pixel_buffer_rejects_wrong_shape():
    with pytest.raises(ValueError):
        PixelBuffer(pixels=np.zeros((4, 4, 3), dtype=np.uint8))


def test_iter_dir_skips_unreadable_files(repo, tmp_path):
    (tmp_path / "a.png").write_bytes(png_bytes(solid(3, 3)))
    (tmp_path / "b.jpg").write_bytes(b"junk")
    (tmp_path / "notes.txt").write_text("not an image")

    loaded = list(repo.iter_dir(tmp_path))
    assert [p.name for p, _ in loaded] == ["a.png"]


def test_decode_16bit_grayscale_is_scaled(repo):
    from io import BytesIO
    from PIL import Image as PILImage

    out = BytesIO()
    PILImage.fromarray(np.full((3, 4), 30000, dtype=np.uint16)).save(out, format="PNG")
    decoded = repo.decode(out.getvalue())
    assert decoded.pixels.shape == (3, 4, 4)
    assert decoded.pixels[1, 2].tolist() == [117, 117, 117, 255]
