from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .detector import DetectorKind
from .features import Feature
from .geometry import MappedRect

OVERLAY_TOPIC = "vision.overlay"
RESULTS_TOPIC = "vision.results"
ERROR_TOPIC = "errors"


@dataclass(frozen=True)
class OverlayAdded:
    kind: DetectorKind
    feature: Feature
    rect: MappedRect


@dataclass(frozen=True)
class OverlaysCleared:
    reason: str


@dataclass(frozen=True)
class ResultsChanged:
    kind: DetectorKind | None
    text: str
    features: Sequence[Feature] = ()


@dataclass(frozen=True)
class ErrorRaised:
    message: str
    exception: Exception | None = None
