from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Sequence, Union

from .features import Feature
from .image import Image

NO_RESULTS_MESSAGE = "No results returned."
FAILED_TO_DETECT_OBJECTS_MESSAGE = "Failed to detect objects in image."


class DetectorKind(str, Enum):
    """Detection variants, in the order they are offered to the user."""

    TEXT = "text"
    BARCODE = "barcode"
    LABEL = "label"
    FACE = "face"
    CLOUD_TEXT = "cloud_text"
    CLOUD_LABEL = "cloud_label"
    CLOUD_LANDMARK = "cloud_landmark"
    CUSTOM_MODEL = "custom_model"

    @property
    def title(self) -> str:
        return _TITLES[self]

    @property
    def short_title(self) -> str:
        """Prefix used for status messages such as ``"Face Detection: ..."``."""

        return _SHORT_TITLES[self]

    @property
    def is_cloud(self) -> bool:
        return self.value.startswith("cloud_")


_TITLES = {
    DetectorKind.TEXT: "On-Device Text Recognition",
    DetectorKind.BARCODE: "Barcode Scanning",
    DetectorKind.LABEL: "On-Device Label Detection",
    DetectorKind.FACE: "On-Device Face Detection",
    DetectorKind.CLOUD_TEXT: "Cloud Text Recognition",
    DetectorKind.CLOUD_LABEL: "Cloud Label Detection",
    DetectorKind.CLOUD_LANDMARK: "Cloud Landmark Detection",
    DetectorKind.CUSTOM_MODEL: "Custom Model Object Detection",
}

_SHORT_TITLES = {
    DetectorKind.TEXT: "Text detection",
    DetectorKind.BARCODE: "Barcode detection",
    DetectorKind.LABEL: "Label detection",
    DetectorKind.FACE: "Face Detection",
    DetectorKind.CLOUD_TEXT: "Text detection",
    DetectorKind.CLOUD_LABEL: "Label detection",
    DetectorKind.CLOUD_LANDMARK: "Landmark Detection",
    DetectorKind.CUSTOM_MODEL: "Object Detection",
}


@dataclass(frozen=True)
class DetectionSucceeded:
    features: Sequence[Feature]
    duration_ms: float = 0.0


@dataclass(frozen=True)
class DetectionFailed:
    reason: str
    exception: Exception | None = None


DetectionOutcome = Union[DetectionSucceeded, DetectionFailed]


class Detector(ABC):
    """Runs one detection variant over a still image."""

    kind: DetectorKind

    @abstractmethod
    def detect(self, image: Image) -> Sequence[Feature]:
        """Return every feature found; raise ``InfrastructureError`` on backend failure."""
        raise NotImplementedError


class DetectorFactory(Protocol):
    def create(self, kind: DetectorKind) -> Detector:
        ...

    def select_custom_model(self, model_path: str) -> None:
        ...


__all__ = [
    "DetectionFailed",
    "DetectionOutcome",
    "DetectionSucceeded",
    "Detector",
    "DetectorFactory",
    "DetectorKind",
    "FAILED_TO_DETECT_OBJECTS_MESSAGE",
    "NO_RESULTS_MESSAGE",
]
