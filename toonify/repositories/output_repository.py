from __future__ import annotations
from pathlib import Path
from typing import Union
import logging
import uuid

from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


class OutputRepository:
    """
    Sink for encoded outputs: stores bytes under a generated file name
    and hands back the URL they are served from.
    """

    def __init__(self, results_folder: Union[str, Path], url_prefix: str = "/outputs"):
        self.results_folder = Path(results_folder)
        self.url_prefix = url_prefix.rstrip("/")
        self.results_folder.mkdir(parents=True, exist_ok=True)

    def save(self, data: bytes, prefix: str, ext: str = ".jpg") -> str:
        filename = f"{prefix}-{uuid.uuid4().hex}{ext}"
        (self.results_folder / filename).write_bytes(data)
        logger.info(f"Stored {len(data)} bytes as {filename}")
        return filename

    def url_for(self, filename: str) -> str:
        return f"{self.url_prefix}/{filename}"

    def path_for(self, filename: str) -> Path:
        """
        Resolve a stored file name to its path.
        Names that would leave the results folder are rejected.
        """
        safe = secure_filename(filename)
        if not safe or safe != filename:
            raise ValueError(f"Invalid output file name: {filename!r}")
        return self.results_folder / safe
