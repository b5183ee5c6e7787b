# pipeline/template_analyzer.py
from datetime import datetime, timezone
from typing import Iterable, List, Sequence
import logging
import os
import uuid

from dotenv import load_dotenv

from ..errors import DecodeError, EmptyInputError
from ..models.pixel_buffer import PixelBuffer
from ..models.template_style import Template, TemplateStyle
from ..repositories.output_repository import OutputRepository
from ..repositories.template_repository import TemplateRepository
from ..services.color_service import ColorService
from ..services.image_service import ImageService
from ..services.thumbnail_service import ThumbnailService

# ------------------------------------------------------------------
# env‑vars
load_dotenv()
MIN_TEMPLATE_IMAGES = int(os.getenv("MIN_TEMPLATE_IMAGES", "5"))
THUMBNAIL_SIZE      = int(os.getenv("THUMBNAIL_SIZE", "200"))

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
def analyze_template(
    images: Sequence[PixelBuffer],
    *,
    color_service: ColorService = ColorService(),
) -> TemplateStyle:
    """
    Capture a template's style: the mean color over all of its images.
    """
    color, sample_count = color_service.compute_average(images)
    return TemplateStyle(dominant_color=color, sample_count=sample_count)


def decode_template_images(
    uploads: Iterable[bytes],
    *,
    image_service: ImageService = ImageService(),
) -> List[PixelBuffer]:
    """
    Decode every upload, skipping (and logging) the ones that fail.

    Raises:
        EmptyInputError: not a single upload could be decoded.
    """
    images = []
    for i, data in enumerate(uploads):
        try:
            images.append(image_service.decode(data))
        except DecodeError as err:
            logger.warning(f"Skipping template image #{i}: {err}")

    if not images:
        raise EmptyInputError("None of the template images could be decoded",
                              operation="decode_template_images")
    return images


def register_template(
    name: str,
    uploads: Sequence[bytes],
    registry: TemplateRepository,
    sink: OutputRepository,
    *,
    thumbnail_size: int = THUMBNAIL_SIZE,
    min_images: int = MIN_TEMPLATE_IMAGES,
    image_service: ImageService = ImageService(),
    thumbnail_service: ThumbnailService = ThumbnailService(),
) -> Template:
    """
    Full registration:
        • at least *min_images* uploads must be supplied
        • decode them (bad ones skipped)
        • average their colors
        • store a square thumbnail of the first decodable image
        • add the template to *registry*
    """
    if not name:
        raise ValueError("Template name is required")
    if len(uploads) < min_images:
        raise ValueError(f"Need at least {min_images} template images, got {len(uploads)}")

    images = decode_template_images(uploads, image_service=image_service)
    style = analyze_template(images)

    template_id = uuid.uuid4().hex
    thumb_bytes = thumbnail_service.encode_thumbnail(images[0], thumbnail_size)
    thumb_name = sink.save(thumb_bytes, prefix=f"thumbnail-{template_id}")

    template = Template(
        id=template_id,
        name=name,
        image_count=len(uploads),
        thumbnail_url=sink.url_for(thumb_name),
        style_data=style,
        created_at=datetime.now(timezone.utc),
    )
    registry.add(template)

    logger.info(f"Registered template '{name}' ({template_id}): {len(images)}/{len(uploads)} images decoded, "
                f"dominant color {style.dominant_color.as_dict()}")
    return template
