import pytest

from toonify.cli.batch_convert import build_parser, main, run
from toonify.errors import EncodeError
from toonify.services.image_service import ImageService

from conftest import checkerboard, png_bytes


def test_batch_converts_readable_photos(tmp_path):
    photos = tmp_path / "photos"
    photos.mkdir()
    (photos / "a.png").write_bytes(png_bytes(checkerboard(20, 20, 5)))
    (photos / "b.png").write_bytes(png_bytes(checkerboard(30, 10, 5)))
    (photos / "broken.jpg").write_bytes(b"junk")
    out_dir = tmp_path / "out"

    args = build_parser().parse_args([str(photos), "--out-dir", str(out_dir), "--no-colored"])
    assert run(args) == 2
    assert sorted(p.name for p in out_dir.iterdir()) == ["a_outline.jpg", "b_outline.jpg"]


def test_main_fails_when_nothing_converted(tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    assert main([str(empty), "--out-dir", str(tmp_path / "out")]) == 1


def test_both_outputs_disabled_is_a_usage_error(tmp_path, capsys):
    with pytest.raises(SystemExit) as info:
        main([str(tmp_path), "--no-outline", "--no-colored"])
    assert info.value.code == 2
    assert "nothing to do" in capsys.readouterr().err


def test_missing_folder_exits_non_zero(tmp_path, caplog):
    assert main([str(tmp_path / "nope"), "--out-dir", str(tmp_path / "out")]) == 1
    assert "Input folder not found" in caplog.text


def test_photo_counts_only_when_a_file_was_written(tmp_path):
    class FailingEncoder(ImageService):
        def encode(self, buffer, quality=None, fmt="JPEG"):
            raise EncodeError("disk says no", operation="encode")

    photos = tmp_path / "photos"
    photos.mkdir()
    (photos / "a.png").write_bytes(png_bytes(checkerboard(20, 20, 5)))
    out_dir = tmp_path / "out"

    args = build_parser().parse_args([str(photos), "--out-dir", str(out_dir)])
    assert run(args, image_service=FailingEncoder()) == 0
    assert list(out_dir.iterdir()) == []
