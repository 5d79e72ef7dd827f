from __future__ import annotations

import math

import pytest

from vision_overlay.domain.geometry import (
    FeatureRect,
    ImageSize,
    MappedRect,
    ViewRect,
    aspect_fit_scale,
    fitted_image_rect,
    map_to_view,
)
from vision_overlay.shared.errors import ContractViolationError


def _approx(rect: MappedRect, expected: tuple[float, float, float, float]) -> None:
    assert rect.as_tuple() == pytest.approx(expected)


def test_wide_view_pillarboxes_the_image() -> None:
    mapped = map_to_view(FeatureRect(10, 20, 30, 40), ImageSize(100, 200), ViewRect(0, 0, 400, 400))

    _approx(mapped, (120, 40, 60, 80))


def test_tall_view_letterboxes_the_image() -> None:
    mapped = map_to_view(FeatureRect(0, 0, 200, 100), ImageSize(200, 100), ViewRect(0, 0, 100, 400))

    _approx(mapped, (0, 175, 100, 50))


def test_matching_sizes_map_to_identity() -> None:
    feature = FeatureRect(12.5, 7.25, 33, 41)

    mapped = map_to_view(feature, ImageSize(640, 480), ViewRect(0, 0, 640, 480))

    assert mapped.as_tuple() == feature.as_tuple()


@pytest.mark.parametrize(
    ("image", "view"),
    [
        (ImageSize(100, 200), ViewRect(0, 0, 400, 400)),
        (ImageSize(200, 100), ViewRect(0, 0, 100, 400)),
        (ImageSize(1920, 1080), ViewRect(0, 0, 375, 667)),
        (ImageSize(3, 7), ViewRect(0, 0, 1000, 10)),
    ],
)
def test_whole_image_maps_to_centered_footprint(image: ImageSize, view: ViewRect) -> None:
    mapped = map_to_view(FeatureRect(0, 0, image.width, image.height), image, view)
    footprint = fitted_image_rect(image, view)

    _approx(mapped, footprint.as_tuple())
    assert footprint.x >= -1e-9 and footprint.y >= -1e-9
    # one axis is binding, so it has no margin
    assert min(footprint.x, footprint.y) == pytest.approx(0.0, abs=1e-9)


def test_extent_scales_linearly() -> None:
    image = ImageSize(300, 200)
    view = ViewRect(0, 0, 500, 500)
    base = map_to_view(FeatureRect(10, 10, 20, 30), image, view)
    tripled = map_to_view(FeatureRect(10, 10, 60, 90), image, view)

    assert tripled.width == pytest.approx(base.width * 3)
    assert tripled.height == pytest.approx(base.height * 3)
    assert (tripled.x, tripled.y) == pytest.approx((base.x, base.y))


def test_origin_mapping_is_affine() -> None:
    image = ImageSize(300, 200)
    view = ViewRect(0, 0, 500, 500)
    scale = aspect_fit_scale(image, view)
    origin = map_to_view(FeatureRect(0, 0, 1, 1), image, view)
    shifted = map_to_view(FeatureRect(40, 25, 1, 1), image, view)

    assert shifted.x - origin.x == pytest.approx(40 * scale)
    assert shifted.y - origin.y == pytest.approx(25 * scale)


def test_view_origin_does_not_move_the_result() -> None:
    feature = FeatureRect(5, 5, 10, 10)
    image = ImageSize(100, 50)

    at_zero = map_to_view(feature, image, ViewRect(0, 0, 200, 200))
    elsewhere = map_to_view(feature, image, ViewRect(64, 300, 200, 200))

    assert at_zero == elsewhere


def test_equal_aspect_uses_width_scale() -> None:
    assert aspect_fit_scale(ImageSize(200, 100), ViewRect(0, 0, 100, 50)) == pytest.approx(0.5)


def test_feature_inside_image_stays_inside_view() -> None:
    image = ImageSize(1280, 720)
    view = ViewRect(0, 0, 390, 844)
    mapped = map_to_view(FeatureRect(1200, 650, 80, 70), image, view)

    assert mapped.x >= 0 and mapped.y >= 0
    assert mapped.x2 <= view.width + 1e-9
    assert mapped.y2 <= view.height + 1e-9


@pytest.mark.parametrize(
    "image",
    [ImageSize(0, 100), ImageSize(100, 0), ImageSize(-5, 10), ImageSize(math.inf, 10), ImageSize(math.nan, 10)],
)
def test_degenerate_image_size_is_rejected(image: ImageSize) -> None:
    with pytest.raises(ContractViolationError):
        map_to_view(FeatureRect(0, 0, 1, 1), image, ViewRect(0, 0, 100, 100))


def test_degenerate_view_is_rejected_as_value_error() -> None:
    with pytest.raises(ValueError):
        map_to_view(FeatureRect(0, 0, 1, 1), ImageSize(10, 10), ViewRect(0, 0, 100, 0))


def test_feature_rect_from_points_encloses_all_points() -> None:
    rect = FeatureRect.from_points([(10, 40), (30, 5), (25, 60), (12, 20)])

    assert rect.as_tuple() == (10, 5, 20, 55)


def test_feature_rect_from_corners_normalises_order() -> None:
    assert FeatureRect.from_corners(50, 60, 10, 20).as_tuple() == (10, 20, 40, 40)


def test_mapped_rect_int_corners() -> None:
    assert MappedRect(1.4, 2.6, 10.2, 5.0).as_int_corners() == (1, 3, 12, 8)
