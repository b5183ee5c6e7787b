import pytest

from toonify.errors import EmptyInputError
from toonify.models.template_style import ColorSample, TemplateStyle
from toonify.pipeline.template_analyzer import analyze_template, decode_template_images, register_template

from conftest import png_bytes, solid


def test_analyze_template_averages_all_images():
    style = analyze_template([solid(2, 2, (0, 0, 0, 255)), solid(2, 2, (100, 50, 20, 255))])
    assert style == TemplateStyle(dominant_color=ColorSample(50, 25, 10), sample_count=8)


def test_analyze_template_needs_images():
    with pytest.raises(EmptyInputError):
        analyze_template([])


def test_decode_skips_bad_uploads(caplog):
    uploads = [b"junk", png_bytes(solid(3, 3, (1, 2, 3, 255))), b""]
    images = decode_template_images(uploads)
    assert len(images) == 1
    assert "Skipping template image #0" in caplog.text


def test_decode_fails_when_nothing_decodes():
    with pytest.raises(EmptyInputError):
        decode_template_images([b"junk", b"more junk"])


def test_register_template_stores_everything(registry, sink):
    uploads = [png_bytes(solid(40, 20, (200, 100, 0, 255)))] * 4 + [b"junk"]
    template = register_template("warm", uploads, registry, sink, thumbnail_size=16)

    assert registry.get(template.id) is template
    assert template.image_count == 5
    assert template.style_data.dominant_color == ColorSample(200, 100, 0)
    assert template.style_data.sample_count == 4 * 40 * 20

    filename = template.thumbnail_url.rsplit("/", 1)[-1]
    assert template.thumbnail_url.startswith("/outputs/thumbnail-")
    assert sink.path_for(filename).is_file()


def test_register_template_needs_enough_images(registry, sink):
    with pytest.raises(ValueError):
        register_template("few", [png_bytes(solid(2, 2))] * 4, registry, sink)
    assert len(registry) == 0
