from __future__ import annotations
from pathlib import Path
from typing import Iterable, Iterator, Tuple, Union
import logging
import os

import cv2
import numpy as np
from dotenv import load_dotenv

from ..errors import InvalidSizeError
from ..models.pixel_buffer import PixelBuffer
from ..repositories.image_repository import ImageRepository

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class ImageService:
    """Buffer-level helpers: codec access, copies, crops and resizes."""
    def __init__(self):
        self.OUTPUT_JPEG_QUALITY = int(os.getenv("OUTPUT_JPEG_QUALITY", "90"))
        self.image_repository = ImageRepository()

    def create_buffer(self, pixels: np.ndarray) -> PixelBuffer:
        return self.image_repository.create_buffer(pixels)

    def decode(self, data: bytes) -> PixelBuffer:
        return self.image_repository.decode(data)

    def encode(self, buffer: PixelBuffer, quality: int = None, fmt: str = "JPEG") -> bytes:
        """
        Encode with the configured output quality unless one is given.
        """
        if quality is None:
            quality = self.OUTPUT_JPEG_QUALITY
        return self.image_repository.encode(buffer, quality=quality, fmt=fmt)

    def stream_gallery(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
    ) -> Iterator[Tuple[Path, PixelBuffer]]:
        """
        Yield images lazily instead of returning a gigantic list.
        """
        return self.image_repository.iter_dir(folder, recursive=recursive, exts=exts)

    def get_image_dimensions(self, buffer: PixelBuffer) -> Tuple[int, int]:
        return self.image_repository.retrieve_dimensions(buffer)

    def crop_pixels(self, buffer: PixelBuffer, bound_r, bound_l, bound_t, bound_b) -> PixelBuffer:
        img_h, img_w = self.get_image_dimensions(buffer)
        width = bound_r - bound_l
        height = bound_b - bound_t

        if (bound_l < 0 or bound_t < 0 or bound_r > img_w or bound_b > img_h
                or bound_l >= bound_r or bound_t >= bound_b):
            logger.error(f"Invalid crop bounds ({bound_l},{bound_t},{bound_r},{bound_b}) "
                         f"for {img_w}x{img_h} image")
            raise InvalidSizeError(f"Invalid crop bounds would create {width}x{height} image",
                                   operation="crop", width=img_w, height=img_h)

        return self.create_buffer(buffer.pixels[bound_t:bound_b, bound_l:bound_r].copy())

    def resize(self, buffer: PixelBuffer, width: int, height: int) -> PixelBuffer:
        """
        Resize to width x height with area resampling (deterministic).
        """
        if width <= 0 or height <= 0:
            raise InvalidSizeError(f"Cannot resize to {width}x{height}", operation="resize",
                                   width=buffer.width, height=buffer.height)
        resized = cv2.resize(np.ascontiguousarray(buffer.pixels), (width, height),
                             interpolation=cv2.INTER_AREA)
        return self.create_buffer(resized)
