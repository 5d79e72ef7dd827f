from __future__ import annotations

import numpy as np

from vision_overlay.domain.geometry import MappedRect, ViewRect
from vision_overlay.domain.image import Image
from vision_overlay.infrastructure.overlay_renderer import LINE_COLOR, OverlayRenderer, compose_aspect_fit


def test_compose_letterboxes_into_view() -> None:
    frame = np.full((200, 100, 3), 255, dtype=np.uint8)

    canvas = compose_aspect_fit(frame, ViewRect(0, 0, 400, 400))

    assert canvas.shape == (400, 400, 3)
    # image occupies x in [100, 300)
    assert canvas[200, 50].tolist() == [0, 0, 0]
    assert canvas[200, 200].tolist() == [255, 255, 255]
    assert canvas[200, 350].tolist() == [0, 0, 0]


def test_overlays_are_ordered_and_cleared() -> None:
    renderer = OverlayRenderer()
    first = renderer.add_overlay(MappedRect(0, 0, 10, 10))
    second = renderer.add_overlay(MappedRect(5, 5, 10, 10), "cup 0.50")

    assert renderer.overlays == (first, second)
    assert renderer.clear_overlays() == 2
    assert renderer.overlays == ()


def test_render_outlines_overlay() -> None:
    renderer = OverlayRenderer()
    renderer.add_overlay(MappedRect(10, 10, 40, 40))
    image = Image(data=np.zeros((100, 100, 3), dtype=np.uint8))

    canvas = renderer.render(image, ViewRect(0, 0, 100, 100))

    assert tuple(canvas[10, 30].tolist()) == LINE_COLOR
    assert canvas[30, 30].tolist() == [0, 0, 0]


def test_render_with_caption_does_not_fail() -> None:
    renderer = OverlayRenderer()
    renderer.add_overlay(MappedRect(20, 40, 30, 30), "Dog")
    image = Image(data=np.zeros((120, 80, 3), dtype=np.uint8))

    canvas = renderer.render(image, ViewRect(0, 0, 160, 160))

    assert canvas.shape == (160, 160, 3)
