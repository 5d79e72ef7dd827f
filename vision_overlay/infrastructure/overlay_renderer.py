from __future__ import annotations

import threading
from dataclasses import dataclass

import cv2
import cvzone
import numpy as np

from ..domain.geometry import ImageSize, MappedRect, ViewRect, fitted_image_rect
from ..domain.image import Image

LINE_WIDTH = 3
LINE_COLOR = (0, 255, 255)  # yellow, BGR
BACKGROUND_COLOR = (0, 0, 0)


@dataclass(frozen=True)
class Overlay:
    rect: MappedRect
    caption: str | None = None


class OverlayRenderer:
    """Ordered collection of outlines drawn over an aspect-fit view of the image."""

    def __init__(self, *, line_width: int = LINE_WIDTH, line_color: tuple[int, int, int] = LINE_COLOR) -> None:
        self._overlays: list[Overlay] = []
        self._lock = threading.RLock()
        self._line_width = line_width
        self._line_color = line_color

    def add_overlay(self, rect: MappedRect, caption: str | None = None) -> Overlay:
        overlay = Overlay(rect=rect, caption=caption)
        with self._lock:
            self._overlays.append(overlay)
        return overlay

    def clear_overlays(self) -> int:
        with self._lock:
            removed = len(self._overlays)
            self._overlays.clear()
        return removed

    @property
    def overlays(self) -> tuple[Overlay, ...]:
        with self._lock:
            return tuple(self._overlays)

    def render(self, image: Image, view_rect: ViewRect) -> np.ndarray:
        """Compose ``image`` into a view-sized canvas and outline every overlay."""

        canvas = compose_aspect_fit(image.data, view_rect)
        for overlay in self.overlays:
            x1, y1, x2, y2 = overlay.rect.as_int_corners()
            cv2.rectangle(canvas, (x1, y1), (x2, y2), self._line_color, self._line_width)
            if overlay.caption:
                cvzone.putTextRect(
                    canvas,
                    overlay.caption,
                    (x1, max(0, y1 - 10)),
                    scale=1,
                    thickness=1,
                    offset=5,
                )
        return canvas


def compose_aspect_fit(frame: np.ndarray, view_rect: ViewRect) -> np.ndarray:
    """Scale ``frame`` uniformly into a ``view_rect``-sized canvas, centered, with letterboxing."""

    view_width = max(1, int(round(view_rect.width)))
    view_height = max(1, int(round(view_rect.height)))
    height, width = frame.shape[:2]

    footprint = fitted_image_rect(ImageSize(width, height), view_rect)
    new_width = max(1, int(round(footprint.width)))
    new_height = max(1, int(round(footprint.height)))
    interpolation = cv2.INTER_AREA if new_width < width else cv2.INTER_LINEAR
    resized = cv2.resize(frame, (new_width, new_height), interpolation=interpolation)

    canvas = np.zeros((view_height, view_width, 3), dtype=np.uint8)
    canvas[:] = BACKGROUND_COLOR
    x_offset = min(max(0, int(round(footprint.x))), view_width - 1)
    y_offset = min(max(0, int(round(footprint.y))), view_height - 1)
    paste_width = min(new_width, view_width - x_offset)
    paste_height = min(new_height, view_height - y_offset)
    canvas[y_offset : y_offset + paste_height, x_offset : x_offset + paste_width] = resized[:paste_height, :paste_width]
    return canvas


__all__ = ["LINE_COLOR", "LINE_WIDTH", "Overlay", "OverlayRenderer", "compose_aspect_fit"]
