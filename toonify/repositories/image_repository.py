from __future__ import annotations
from io import BytesIO
from pathlib import Path
from typing import Iterable, Iterator, Tuple, Union
import logging
import os
import struct

import numpy as np
from PIL import Image as PILImage
from dotenv import load_dotenv

from ..errors import DecodeError, EncodeError
from ..models.pixel_buffer import PixelBuffer

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

_DECODE_FAILURES = (OSError, ValueError, SyntaxError, EOFError, struct.error,
                    PILImage.DecompressionBombError)
_SUPPORTED_FORMATS = {"JPEG", "PNG"}
_WIDE_GRAY_MODES = {"I", "I;16", "I;16B", "I;16L", "I;16N"}


class ImageRepository:
    """
    Codec adapter: bytes <-> PixelBuffer, plus file streaming for batch jobs.
    Pillow is only touched inside this file.
    """
    def __init__(self):
        exts = os.getenv("VALID_IMAGE_EXTENSIONS", ".jpg,.jpeg,.png,.bmp,.gif,.webp")
        self.VALID_EXTS = {ext.strip().lower() for ext in exts.split(",") if ext.strip()}

    @staticmethod
    def create_buffer(pixels: np.ndarray) -> PixelBuffer:
        return PixelBuffer(pixels=pixels)

    @staticmethod
    def retrieve_dimensions(buffer: PixelBuffer) -> Tuple[int, int]:
        return buffer.height, buffer.width

    @staticmethod
    def _to_8bit(gray: np.ndarray) -> np.ndarray:
        # 16-bit samples scaled onto 0-255
        return np.clip(np.rint(gray.astype(np.float64) / 257.0), 0, 255).astype(np.uint8)

    @staticmethod
    def decode(data: bytes) -> PixelBuffer:
        """
        Decode compressed bytes to an RGBA buffer.

        Raises:
            DecodeError: empty, malformed, unsupported or truncated input.
        """
        if not data:
            raise DecodeError("No image data", operation="decode")
        try:
            with PILImage.open(BytesIO(data)) as pil_img:
                pil_img.load()  # force full decode so truncation surfaces here
                if pil_img.mode in _WIDE_GRAY_MODES:
                    pil_img = PILImage.fromarray(ImageRepository._to_8bit(np.asarray(pil_img)))
                if pil_img.mode not in ("RGBA", "RGB", "L", "LA", "P"):
                    pil_img = pil_img.convert("RGB")
                rgba = pil_img.convert("RGBA")
        except _DECODE_FAILURES as err:
            raise DecodeError(f"Cannot decode image: {err}", operation="decode") from err

        pixels = np.array(rgba, dtype=np.uint8)
        return PixelBuffer(pixels=pixels)

    @staticmethod
    def encode(buffer: PixelBuffer, quality: int = 90, fmt: str = "JPEG") -> bytes:
        """
        Encode a buffer to compressed bytes.
        JPEG drops the alpha channel; PNG keeps it and ignores quality.

        Raises:
            EncodeError: zero-sized buffer, quality outside 0-100, unknown format.
        """
        fmt = fmt.upper()
        if buffer.width == 0 or buffer.height == 0:
            raise EncodeError("Cannot encode an empty buffer", operation="encode",
                              width=buffer.width, height=buffer.height)
        if not 0 <= quality <= 100:
            raise EncodeError(f"Quality must be within 0-100, got {quality}", operation="encode",
                              width=buffer.width, height=buffer.height)
        if fmt not in _SUPPORTED_FORMATS:
            raise EncodeError(f"Unsupported output format: {fmt}", operation="encode",
                              width=buffer.width, height=buffer.height)

        pil_img = PILImage.fromarray(np.ascontiguousarray(buffer.pixels))
        out = BytesIO()
        if fmt == "JPEG":
            pil_img.convert("RGB").save(out, format="JPEG", quality=quality)
        else:
            pil_img.save(out, format="PNG")
        return out.getvalue()

    def load(self, path: Union[str, Path]) -> PixelBuffer:
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Image not found or unreadable: {path}")
        return self.decode(path.read_bytes())

    def iter_dir(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
    ) -> Iterator[Tuple[Path, PixelBuffer]]:
        """
        Yield (path, buffer) pairs one at a time.  Nothing accumulates in memory.
        Unreadable files are logged and skipped.
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise NotADirectoryError(folder)

        allowed = {e.lower() for e in (exts or self.VALID_EXTS)}
        pattern = "**/*" if recursive else "*"

        for p in sorted(folder.glob(pattern)):
            if p.suffix.lower() not in allowed or not p.is_file():
                logger.debug(f"Skipping {p}")
                continue
            try:
                yield p, self.load(p)
            except DecodeError as err:
                logger.warning(f"Skipping {p.name}: {err}")

