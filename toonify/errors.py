from __future__ import annotations
from typing import Dict, Optional


class PipelineError(Exception):
    """
    Base error for every pixel-pipeline failure.

    Carries the operation name and, when known, the dimensions of the
    buffer being processed so a log line alone is enough to diagnose it.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.width = width
        self.height = height

    def __str__(self) -> str:
        if self.operation is None:
            return self.message
        if self.width is None or self.height is None:
            return f"{self.message} [{self.operation}]"
        return f"{self.message} [{self.operation} {self.width}x{self.height}]"


class DecodeError(PipelineError):
    """Bytes could not be decoded into a pixel buffer."""


class EncodeError(PipelineError):
    """A pixel buffer could not be encoded."""


class EmptyInputError(PipelineError):
    """No buffers, or no pixels, to work on."""


class InvalidSizeError(PipelineError):
    """Requested output size is not usable."""


class DimensionMismatchError(PipelineError):
    """Two buffers that must match in size do not."""


class NoOutputError(PipelineError):
    """A conversion finished without producing any output."""

    def __init__(self, message: str, *, branch_errors: Optional[Dict[str, str]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.branch_errors = dict(branch_errors or {})
