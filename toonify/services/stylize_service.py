import logging

import numpy as np

from ..models.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

SATURATION_BOOST = 0.5
QUANT_STEP = 32


class StylizeService:
    """
    Posterizer: push each channel away from the pixel's gray level, then
    snap it to a multiple of QUANT_STEP.  Boost always runs before quantization.
    """

    @staticmethod
    def boost_saturation(rgb: np.ndarray, factor: float = SATURATION_BOOST) -> np.ndarray:
        """rgb: float array (..., 3). Returns clamped float array."""
        avg = rgb.sum(axis=-1, keepdims=True) / 3.0
        return np.clip(rgb + (rgb - avg) * factor, 0, 255)

    @staticmethod
    def quantize(rgb: np.ndarray, step: int = QUANT_STEP) -> np.ndarray:
        # halves round up
        return np.clip(np.floor(rgb / step + 0.5) * step, 0, 255)

    def stylize(self, buffer: PixelBuffer) -> PixelBuffer:
        """
        Returns a new buffer; alpha is carried over untouched.
        """
        rgb = buffer.pixels[:, :, :3].astype(np.float64)
        posterized = self.quantize(self.boost_saturation(rgb))

        out = buffer.copy()
        out.pixels[:, :, :3] = posterized.astype(np.uint8)
        logger.debug(f"Stylized {buffer.width}x{buffer.height} buffer")
        return out
