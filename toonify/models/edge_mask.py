from __future__ import annotations
from dataclasses import dataclass
import numpy as np


@dataclass
class EdgeMask:
    """
    Boolean (H, W) grid, True where a boundary was detected.
    Lives only for the duration of one conversion.
    """
    mask: np.ndarray

    @property
    def height(self) -> int:
        return int(self.mask.shape[0])

    @property
    def width(self) -> int:
        return int(self.mask.shape[1])

    @property
    def edge_count(self) -> int:
        return int(np.count_nonzero(self.mask))
