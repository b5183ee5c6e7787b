import numpy as np

from ..errors import DimensionMismatchError
from ..models.pixel_buffer import PixelBuffer


class CompositeService:
    """
    Source-over alpha blending at full source and destination opacity.
    """

    @staticmethod
    def _source_over(base: np.ndarray, overlay: np.ndarray) -> np.ndarray:
        a_d = base[:, :, 3:4].astype(np.float64) / 255.0
        a_s = overlay[:, :, 3:4].astype(np.float64) / 255.0
        c_d = base[:, :, :3].astype(np.float64)
        c_s = overlay[:, :, :3].astype(np.float64)

        a_out = a_s + a_d * (1.0 - a_s)
        premul = c_s * a_s + c_d * a_d * (1.0 - a_s)
        c_out = np.divide(premul, a_out, out=np.zeros_like(premul), where=a_out > 0)

        out = np.empty_like(base)
        out[:, :, :3] = np.clip(np.rint(c_out), 0, 255).astype(np.uint8)
        out[:, :, 3:4] = np.clip(np.rint(a_out * 255.0), 0, 255).astype(np.uint8)

        # a transparent overlay pixel leaves the base pixel as it was
        untouched = overlay[:, :, 3] == 0
        out[untouched] = base[untouched]
        return out

    def composite(self, base: PixelBuffer, overlay: PixelBuffer) -> PixelBuffer:
        """
        Blend overlay over base using the overlay's alpha channel.

        Raises:
            DimensionMismatchError: overlay and base differ in size.
        """
        if (base.width, base.height) != (overlay.width, overlay.height):
            raise DimensionMismatchError(
                f"Overlay is {overlay.width}x{overlay.height}, base is {base.width}x{base.height}",
                operation="composite", width=base.width, height=base.height,
            )
        return PixelBuffer(pixels=self._source_over(base.pixels, overlay.pixels))
