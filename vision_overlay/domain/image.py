from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .geometry import ImageSize

if TYPE_CHECKING:  # pragma: no cover - type checking only
    import numpy as np


@dataclass(frozen=True)
class Image:
    """Decoded picture in BGR channel order, as OpenCV produces it."""

    data: "np.ndarray"
    source: str = "memory"

    @property
    def size(self) -> ImageSize:
        height, width = self.data.shape[:2]
        return ImageSize(width=float(width), height=float(height))
