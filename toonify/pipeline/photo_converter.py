# pipeline/photo_converter.py
import logging
import os

from dotenv import load_dotenv

from ..errors import NoOutputError
from ..models.conversion_result import ConversionResult
from ..models.pixel_buffer import PixelBuffer
from ..services.composite_service import CompositeService
from ..services.edge_service import DEFAULT_THRESHOLD, MASK_MODE, OUTLINE_MODE, EdgeService
from ..services.stylize_service import StylizeService

# ------------------------------------------------------------------
# env‑vars
load_dotenv()
EDGE_THRESHOLD = int(os.getenv("EDGE_THRESHOLD", str(DEFAULT_THRESHOLD)))

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
def generate_outline(
    photo: PixelBuffer,
    *,
    threshold: int = EDGE_THRESHOLD,
    edge_service: EdgeService = EdgeService(),
) -> PixelBuffer:
    """Black line drawing on white, traced from the original photo."""
    edges = edge_service.detect_edges(photo, threshold=threshold)
    return edge_service.render_edges(edges, mode=OUTLINE_MODE)


def generate_colored(
    photo: PixelBuffer,
    *,
    threshold: int = EDGE_THRESHOLD,
    edge_service: EdgeService = EdgeService(),
    stylize_service: StylizeService = StylizeService(),
    composite_service: CompositeService = CompositeService(),
) -> PixelBuffer:
    """
    Posterized illustration with black outlines.
    Edges are traced on the stylized buffer so they follow the quantized
    color boundaries, not the photo's.
    """
    stylized = stylize_service.stylize(photo)
    edges = edge_service.detect_edges(stylized, threshold=threshold)
    overlay = edge_service.render_edges(edges, mode=MASK_MODE)
    return composite_service.composite(stylized, overlay)


def convert_photo(
    photo: PixelBuffer,
    want_outline: bool,
    want_colored: bool,
    *,
    threshold: int = EDGE_THRESHOLD,
    edge_service: EdgeService = EdgeService(),
    stylize_service: StylizeService = StylizeService(),
    composite_service: CompositeService = CompositeService(),
) -> ConversionResult:
    """
    Run the requested branches independently.  A failing branch is logged
    and recorded in ``result.errors``; the other branch still runs.

    Raises:
        NoOutputError: nothing requested, or every requested branch failed.
    """
    result = ConversionResult()

    if want_outline:
        try:
            result.outline = generate_outline(photo, threshold=threshold, edge_service=edge_service)
        except Exception as err:
            logger.exception(f"Outline generation failed for {photo.width}x{photo.height} photo")
            result.errors["outline"] = str(err)

    if want_colored:
        try:
            result.colored = generate_colored(photo, threshold=threshold,
                                              edge_service=edge_service,
                                              stylize_service=stylize_service,
                                              composite_service=composite_service)
        except Exception as err:
            logger.exception(f"Colored generation failed for {photo.width}x{photo.height} photo")
            result.errors["colored"] = str(err)

    if result.is_empty:
        reason = "no output requested" if not (want_outline or want_colored) else "every requested branch failed"
        raise NoOutputError(f"Conversion produced no output: {reason}",
                            branch_errors=result.errors, operation="convert_photo",
                            width=photo.width, height=photo.height)

    logger.info(f"Converted {photo.width}x{photo.height} photo "
                f"(outline={result.outline is not None}, colored={result.colored is not None})")
    return result
