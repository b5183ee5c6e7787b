import logging

import numpy as np

from ..models.edge_mask import EdgeMask
from ..models.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 100

OUTLINE_MODE = "outline"   # opaque white canvas, black edges
MASK_MODE = "mask"         # transparent canvas, black edges, for compositing

_EDGE_RGBA = np.array([0, 0, 0, 255], dtype=np.uint8)
_CANVAS_RGBA = {
    OUTLINE_MODE: np.array([255, 255, 255, 255], dtype=np.uint8),
    MASK_MODE: np.array([0, 0, 0, 0], dtype=np.uint8),
}


class EdgeService:
    """
    Finite-difference edge detector.

    Each interior pixel compares its left/right neighbours and its top/bottom
    neighbours; the summed absolute RGB difference of either pair above the
    threshold makes it an edge.  The first and last row and column are never
    edges.
    """

    @staticmethod
    def _axis_diff(a: np.ndarray, b: np.ndarray) -> np.ndarray:
        return np.abs(a - b).sum(axis=2)

    def detect_edges(self, buffer: PixelBuffer, threshold: int = DEFAULT_THRESHOLD) -> EdgeMask:
        if threshold < 0:
            raise ValueError(f"threshold must be >= 0, got {threshold}")

        h, w = buffer.height, buffer.width
        mask = np.zeros((h, w), dtype=bool)
        if h < 3 or w < 3:
            return EdgeMask(mask=mask)

        rgb = buffer.pixels[:, :, :3].astype(np.int16)

        # neighbours of every interior pixel, each shaped (h-2, w-2, 3)
        left, right = rgb[1:-1, :-2], rgb[1:-1, 2:]
        top, bottom = rgb[:-2, 1:-1], rgb[2:, 1:-1]

        diff_x = self._axis_diff(left, right)
        diff_y = self._axis_diff(top, bottom)
        mask[1:-1, 1:-1] = (diff_x > threshold) | (diff_y > threshold)

        edges = EdgeMask(mask=mask)
        logger.debug(f"Detected {edges.edge_count} edge pixels in {w}x{h} buffer (threshold={threshold})")
        return edges

    @staticmethod
    def render_edges(edges: EdgeMask, mode: str = OUTLINE_MODE) -> PixelBuffer:
        """
        Paint an edge mask onto a fresh canvas.

        mode "outline" → white background, for the standalone line drawing.
        mode "mask"    → transparent background, to be composited later.
        """
        if mode not in _CANVAS_RGBA:
            raise ValueError(f"Unknown render mode: {mode!r}")

        canvas = np.empty((edges.height, edges.width, 4), dtype=np.uint8)
        canvas[:] = _CANVAS_RGBA[mode]
        canvas[edges.mask] = _EDGE_RGBA
        return PixelBuffer(pixels=canvas)
