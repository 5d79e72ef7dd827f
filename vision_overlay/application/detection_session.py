from __future__ import annotations

import asyncio
import threading
from concurrent.futures import Executor
from dataclasses import dataclass, field
from typing import Sequence

from ..domain.detector import (
    FAILED_TO_DETECT_OBJECTS_MESSAGE,
    NO_RESULTS_MESSAGE,
    DetectionFailed,
    DetectionOutcome,
    DetectionSucceeded,
    DetectorFactory,
    DetectorKind,
)
from ..domain.events import (
    ERROR_TOPIC,
    OVERLAY_TOPIC,
    RESULTS_TOPIC,
    ErrorRaised,
    OverlayAdded,
    OverlaysCleared,
    ResultsChanged,
)
from ..domain.features import Feature, LabelFeature, ObjectFeature, TextFeature
from ..domain.geometry import MappedRect, ViewRect, map_to_view
from ..domain.image import Image
from ..infrastructure.overlay_renderer import OverlayRenderer
from ..shared.bus import EventBus
from ..shared.errors import ApplicationError

NO_IMAGE_MESSAGE = "No image selected."


@dataclass(frozen=True)
class MappedFeature:
    feature: Feature
    rect: MappedRect | None


@dataclass(frozen=True)
class DetectionReport:
    kind: DetectorKind
    outcome: DetectionOutcome | None
    message: str
    mapped: Sequence[MappedFeature] = field(default_factory=tuple)

    @property
    def succeeded(self) -> bool:
        return isinstance(self.outcome, DetectionSucceeded)


class DetectionSession:
    """State behind one detection screen: the picture, its view, overlays and results text."""

    def __init__(
        self,
        detector_factory: DetectorFactory,
        renderer: OverlayRenderer,
        event_bus: EventBus,
        logger,
        *,
        view_rect: ViewRect | None = None,
        executor: Executor | None = None,
    ) -> None:
        self._detector_factory = detector_factory
        self._renderer = renderer
        self._bus = event_bus
        self._logger = logger
        self._executor = executor
        self._image: Image | None = None
        self._view_rect = view_rect
        self._results_text = ""
        self._lock = threading.RLock()

    @property
    def image(self) -> Image | None:
        return self._image

    @property
    def view_rect(self) -> ViewRect | None:
        return self._view_rect

    @property
    def results_text(self) -> str:
        return self._results_text

    @property
    def renderer(self) -> OverlayRenderer:
        return self._renderer

    def set_view_rect(self, view_rect: ViewRect) -> None:
        self._view_rect = view_rect.ensure_valid()

    def select_image(self, image: Image | None) -> None:
        """Replace the displayed picture; previous overlays and results no longer apply."""

        with self._lock:
            self._image = image
        self.clear("image-selected")
        if image is not None:
            self._logger.info("image.selected", source=image.source, size=image.size.as_tuple())

    def switch_model(self, model_path: str) -> None:
        self.clear("model-switched")
        self._detector_factory.select_custom_model(model_path)

    def clear(self, reason: str = "cleared") -> None:
        removed = self._renderer.clear_overlays()
        self._set_results(None, "")
        self._bus.publish(OVERLAY_TOPIC, OverlaysCleared(reason))
        self._logger.debug("overlays.cleared", reason=reason, removed=removed)

    async def run(self, kind: DetectorKind | str) -> DetectionReport:
        """Run one detector over the current image and overlay whatever it finds."""

        kind = DetectorKind(kind)
        self._set_results(kind, "")
        image = self._image
        if image is None:
            self._logger.info("detection.skipped", kind=kind.value, reason=NO_IMAGE_MESSAGE)
            return DetectionReport(kind=kind, outcome=None, message=NO_IMAGE_MESSAGE)
        view_rect = self._view_for(image)
        image.size.ensure_valid()

        outcome = await self._detect(kind, image)
        if isinstance(outcome, DetectionFailed):
            message = f"{kind.short_title}: {outcome.reason}"
            self._logger.info("detection.failed", kind=kind.value, reason=outcome.reason)
            self._set_results(kind, message)
            return DetectionReport(kind=kind, outcome=outcome, message=message)

        mapped: list[MappedFeature] = []
        for feature in outcome.features:
            rect = None
            if feature.frame is not None:
                rect = map_to_view(feature.frame, image.size, view_rect)
                self._renderer.add_overlay(rect, feature.caption)
                self._bus.publish(OVERLAY_TOPIC, OverlayAdded(kind=kind, feature=feature, rect=rect))
            mapped.append(MappedFeature(feature=feature, rect=rect))

        message = results_text(kind, outcome.features)
        self._logger.info(
            "detection.completed",
            kind=kind.value,
            features=len(outcome.features),
            overlays=sum(1 for item in mapped if item.rect is not None),
            duration_ms=round(outcome.duration_ms, 2),
        )
        self._set_results(kind, message, outcome.features)
        return DetectionReport(kind=kind, outcome=outcome, message=message, mapped=tuple(mapped))

    def effective_view_rect(self) -> ViewRect:
        image = self._image
        if image is None:
            raise ApplicationError(NO_IMAGE_MESSAGE)
        return self._view_for(image)

    def render(self):
        image = self._image
        if image is None:
            raise ApplicationError(NO_IMAGE_MESSAGE)
        return self._renderer.render(image, self._view_for(image))

    async def _detect(self, kind: DetectorKind, image: Image) -> DetectionOutcome:
        loop = asyncio.get_running_loop()
        start = loop.time()
        try:
            detector = self._detector_factory.create(kind)
            features = await loop.run_in_executor(self._executor, detector.detect, image)
        except ApplicationError as exc:
            return DetectionFailed(reason=str(exc), exception=exc)
        except Exception as exc:
            self._logger.exception("detector.crashed", kind=kind.value)
            self._bus.publish(ERROR_TOPIC, ErrorRaised(f"{kind.title} failed", exc))
            return DetectionFailed(reason=str(exc) or type(exc).__name__, exception=exc)

        if not features:
            empty = FAILED_TO_DETECT_OBJECTS_MESSAGE if kind is DetectorKind.CUSTOM_MODEL else NO_RESULTS_MESSAGE
            return DetectionFailed(reason=empty)
        return DetectionSucceeded(features=tuple(features), duration_ms=(loop.time() - start) * 1000)

    def _view_for(self, image: Image) -> ViewRect:
        if self._view_rect is None:
            # Without an explicit view the picture is shown at its own size.
            size = image.size
            return ViewRect(0.0, 0.0, size.width, size.height)
        return self._view_rect

    def _set_results(self, kind: DetectorKind | None, text: str, features: Sequence[Feature] = ()) -> None:
        with self._lock:
            self._results_text = text
        self._bus.publish(RESULTS_TOPIC, ResultsChanged(kind=kind, text=text, features=tuple(features)))


def results_text(kind: DetectorKind, features: Sequence[Feature]) -> str:
    """Text shown under the picture after a successful detection."""

    if kind in (DetectorKind.TEXT, DetectorKind.CLOUD_TEXT):
        return "\n".join(f.text for f in features if isinstance(f, TextFeature))
    if kind in (DetectorKind.LABEL, DetectorKind.CLOUD_LABEL):
        return "\n".join(f"{f.label} - {f.confidence}" for f in features if isinstance(f, LabelFeature))
    if kind is DetectorKind.CUSTOM_MODEL:
        return "".join(f"{f.label}: {f.confidence}\n" for f in features if isinstance(f, ObjectFeature))
    return ""


__all__ = [
    "DetectionReport",
    "DetectionSession",
    "MappedFeature",
    "NO_IMAGE_MESSAGE",
    "results_text",
]
