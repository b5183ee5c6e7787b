from typing import Sequence, Tuple
import logging

import numpy as np

from ..errors import EmptyInputError
from ..models.pixel_buffer import PixelBuffer
from ..models.template_style import ColorSample

logger = logging.getLogger(__name__)


class ColorService:
    """
    Color statistics over one or more buffers.
    """

    @staticmethod
    def _channel_sums(buffer: PixelBuffer) -> np.ndarray:
        rgb = buffer.pixels[:, :, :3].reshape(-1, 3)
        return rgb.sum(axis=0, dtype=np.int64)

    @staticmethod
    def _round_half_up(total: int, count: int) -> int:
        # exact integer form of floor(total / count + 0.5)
        return (2 * total + count) // (2 * count)

    def compute_average(self, buffers: Sequence[PixelBuffer]) -> Tuple[ColorSample, int]:
        """
        Mean RGB over every pixel of every buffer.

        Args:
            buffers: decoded template images, in any order.

        Returns:
            (ColorSample, sample_count) where sample_count is the total pixel count.

        Raises:
            EmptyInputError: no buffers, or only zero-sized ones.
        """
        if not buffers:
            raise EmptyInputError("No buffers to average", operation="compute_average")

        totals = np.zeros(3, dtype=np.int64)
        pixel_count = 0
        for buffer in buffers:
            totals += self._channel_sums(buffer)
            pixel_count += buffer.width * buffer.height

        if pixel_count == 0:
            raise EmptyInputError("Buffers contain no pixels", operation="compute_average")

        r, g, b = (min(255, max(0, self._round_half_up(int(t), pixel_count))) for t in totals)
        logger.debug(f"Averaged {pixel_count} pixels from {len(buffers)} buffers -> ({r}, {g}, {b})")
        return ColorSample(r=r, g=g, b=b), pixel_count
