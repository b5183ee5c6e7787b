from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Optional

from .pixel_buffer import PixelBuffer


@dataclass
class ConversionResult:
    """
    Outputs of a single photo conversion.
    A branch that was not requested, or that failed, stays None.
    """
    outline: Optional[PixelBuffer] = None
    colored: Optional[PixelBuffer] = None
    errors: Dict[str, str] = field(default_factory=dict)  # branch name -> error message

    @property
    def is_empty(self) -> bool:
        return self.outline is None and self.colored is None
