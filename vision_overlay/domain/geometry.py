"""Rectangles in image and view space and the aspect-fit mapping between them."""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..shared.errors import ContractViolationError


@dataclass(frozen=True)
class ImageSize:
    """Pixel dimensions of a source image."""

    width: float
    height: float

    def ensure_valid(self) -> "ImageSize":
        _ensure_positive(self.width, "Image width")
        _ensure_positive(self.height, "Image height")
        return self

    def as_tuple(self) -> tuple[float, float]:
        return self.width, self.height


@dataclass(frozen=True)
class ViewRect:
    """Frame of the view displaying the image in aspect-fit mode."""

    x: float
    y: float
    width: float
    height: float

    def ensure_valid(self) -> "ViewRect":
        _ensure_positive(self.width, "View width")
        _ensure_positive(self.height, "View height")
        return self


@dataclass(frozen=True)
class FeatureRect:
    """Bounding box of a detected feature in image pixel coordinates."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_corners(cls, x1: float, y1: float, x2: float, y2: float) -> "FeatureRect":
        left, right = sorted((x1, x2))
        top, bottom = sorted((y1, y2))
        return cls(x=left, y=top, width=right - left, height=bottom - top)

    @classmethod
    def from_points(cls, points) -> "FeatureRect":
        """Smallest rectangle enclosing ``points`` (an iterable of ``(x, y)``)."""

        xs: list[float] = []
        ys: list[float] = []
        for px, py in points:
            xs.append(float(px))
            ys.append(float(py))
        if not xs:
            raise ValueError("Cannot build a rectangle from an empty point set")
        return cls.from_corners(min(xs), min(ys), max(xs), max(ys))

    def as_tuple(self) -> tuple[float, float, float, float]:
        return self.x, self.y, self.width, self.height


@dataclass(frozen=True)
class MappedRect:
    """Feature rectangle expressed in view-local coordinates."""

    x: float
    y: float
    width: float
    height: float

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    def as_tuple(self) -> tuple[float, float, float, float]:
        return self.x, self.y, self.width, self.height

    def as_int_corners(self) -> tuple[int, int, int, int]:
        """Corners rounded to whole pixels, for drawing."""

        return (
            int(round(self.x)),
            int(round(self.y)),
            int(round(self.x2)),
            int(round(self.y2)),
        )


def aspect_fit_scale(image_size: ImageSize, view_rect: ViewRect) -> float:
    """Uniform scale that fits ``image_size`` entirely inside ``view_rect``.

    When the view is relatively wider than the image the height is the binding
    dimension, otherwise (including equal aspect ratios) the width is.
    """

    image_size.ensure_valid()
    view_rect.ensure_valid()
    r_view = view_rect.width / view_rect.height
    r_image = image_size.width / image_size.height
    if r_view > r_image:
        return view_rect.height / image_size.height
    return view_rect.width / image_size.width


def fitted_image_rect(image_size: ImageSize, view_rect: ViewRect) -> MappedRect:
    """Footprint of the whole scaled image, centered inside the view."""

    scale = aspect_fit_scale(image_size, view_rect)
    image_width_scaled = image_size.width * scale
    image_height_scaled = image_size.height * scale
    offset_x = (view_rect.width - image_width_scaled) / 2
    offset_y = (view_rect.height - image_height_scaled) / 2
    return MappedRect(offset_x, offset_y, image_width_scaled, image_height_scaled)


def map_to_view(feature_rect: FeatureRect, image_size: ImageSize, view_rect: ViewRect) -> MappedRect:
    """Convert ``feature_rect`` from image pixels to the aspect-fit view.

    The result is relative to the view's own origin; ``view_rect.x`` and
    ``view_rect.y`` take no part in the computation. Raises
    :class:`ContractViolationError` when either size has a non-positive or
    non-finite dimension.
    """

    scale = aspect_fit_scale(image_size, view_rect)
    footprint = fitted_image_rect(image_size, view_rect)
    return MappedRect(
        x=footprint.x + feature_rect.x * scale,
        y=footprint.y + feature_rect.y * scale,
        width=feature_rect.width * scale,
        height=feature_rect.height * scale,
    )


def _ensure_positive(value: float, field_name: str) -> None:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ContractViolationError(f"{field_name} must be a number, got {value!r}") from exc
    if not math.isfinite(number) or number <= 0:
        raise ContractViolationError(f"{field_name} must be a positive finite number, got {value!r}")


__all__ = [
    "FeatureRect",
    "ImageSize",
    "MappedRect",
    "ViewRect",
    "aspect_fit_scale",
    "fitted_image_rect",
    "map_to_view",
]
