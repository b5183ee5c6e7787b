import logging

from ..errors import InvalidSizeError
from ..models.pixel_buffer import PixelBuffer
from .image_service import ImageService

logger = logging.getLogger(__name__)

THUMBNAIL_QUALITY = 80


class ThumbnailService:
    """
    Square thumbnails: center crop, resize, re-encode.
    """

    def __init__(self, image_service: ImageService = None):
        self.image_service = image_service or ImageService()

    @staticmethod
    def get_square_bounds(width: int, height: int):
        """
        Largest centered square inside width x height.
        Returns (left, top, right, bottom).
        """
        edge = min(width, height)
        left = (width - edge) // 2
        top = (height - edge) // 2
        return left, top, left + edge, top + edge

    def _crop_and_resize(self, buffer: PixelBuffer, target_size: int) -> PixelBuffer:
        if target_size <= 0:
            raise InvalidSizeError(f"Thumbnail size must be positive, got {target_size}",
                                   operation="make_thumbnail",
                                   width=buffer.width, height=buffer.height)
        if buffer.width == 0 or buffer.height == 0:
            raise InvalidSizeError("Cannot make a thumbnail of an empty buffer",
                                   operation="make_thumbnail",
                                   width=buffer.width, height=buffer.height)

        left, top, right, bottom = self.get_square_bounds(buffer.width, buffer.height)
        square = self.image_service.crop_pixels(buffer, bound_r=right, bound_l=left,
                                                bound_t=top, bound_b=bottom)
        return self.image_service.resize(square, target_size, target_size)

    def encode_thumbnail(self, buffer: PixelBuffer, target_size: int) -> bytes:
        """
        Thumbnail as JPEG bytes at the fixed thumbnail quality.
        """
        resized = self._crop_and_resize(buffer, target_size)
        return self.image_service.encode(resized, quality=THUMBNAIL_QUALITY, fmt="JPEG")

    def make_thumbnail(self, buffer: PixelBuffer, target_size: int) -> PixelBuffer:
        """
        Thumbnail as a buffer, i.e. exactly what a client gets back after the JPEG round trip.
        The input buffer is never modified.
        """
        return self.image_service.decode(self.encode_thumbnail(buffer, target_size))
