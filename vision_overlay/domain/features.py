"""Detected features and the metadata each detector attaches to them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence

from .geometry import FeatureRect

Point = tuple[float, float]


@dataclass(frozen=True)
class Feature:
    """A single detection. ``frame`` is ``None`` for whole-image results such as labels."""

    frame: FeatureRect | None

    @property
    def caption(self) -> str | None:
        return None

    def details(self) -> dict[str, object]:
        return {}


@dataclass(frozen=True)
class FaceLandmark:
    type: str
    position: tuple[float, float]


@dataclass(frozen=True)
class FaceFeature(Feature):
    landmarks: Sequence[FaceLandmark] = ()
    head_euler_angle_y: float | None = None
    head_euler_angle_z: float | None = None
    smiling_probability: float | None = None
    left_eye_open_probability: float | None = None
    right_eye_open_probability: float | None = None
    tracking_id: int | None = None

    def details(self) -> dict[str, object]:
        return {
            "landmarks": {lm.type: list(lm.position) for lm in self.landmarks},
            "head_euler_angle_y": self.head_euler_angle_y,
            "head_euler_angle_z": self.head_euler_angle_z,
            "smiling_probability": self.smiling_probability,
            "left_eye_open_probability": self.left_eye_open_probability,
            "right_eye_open_probability": self.right_eye_open_probability,
            "tracking_id": self.tracking_id,
        }


@dataclass(frozen=True)
class TextFeature(Feature):
    text: str = ""
    corner_points: Sequence[Point] = ()
    lines: Sequence[str] = ()
    confidence: float | None = None

    @property
    def caption(self) -> str | None:
        return self.text or None

    def details(self) -> dict[str, object]:
        return {
            "text": self.text,
            "corner_points": [list(point) for point in self.corner_points],
            "lines": list(self.lines),
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class LabelFeature(Feature):
    label: str = ""
    confidence: float = 0.0
    entity_id: str | None = None

    @property
    def caption(self) -> str | None:
        return self.label

    def details(self) -> dict[str, object]:
        return {"label": self.label, "confidence": self.confidence, "entity_id": self.entity_id}


@dataclass(frozen=True)
class BarcodeFeature(Feature):
    raw_value: str = ""
    display_value: str = ""
    format: str = "qr_code"
    value_type: str = "text"
    corner_points: Sequence[Point] = ()

    @property
    def caption(self) -> str | None:
        return self.display_value or None

    def details(self) -> dict[str, object]:
        return {
            "raw_value": self.raw_value,
            "display_value": self.display_value,
            "format": self.format,
            "value_type": self.value_type,
            "corner_points": [list(point) for point in self.corner_points],
        }


@dataclass(frozen=True)
class GeoLocation:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class LandmarkFeature(Feature):
    landmark: str = ""
    entity_id: str | None = None
    confidence: float | None = None
    locations: Sequence[GeoLocation] = ()

    @property
    def caption(self) -> str | None:
        return self.landmark or None

    def details(self) -> dict[str, object]:
        return {
            "landmark": self.landmark,
            "entity_id": self.entity_id,
            "confidence": self.confidence,
            "locations": [
                {"latitude": loc.latitude, "longitude": loc.longitude} for loc in self.locations
            ],
        }


@dataclass(frozen=True)
class ObjectFeature(Feature):
    label: str = ""
    confidence: float = 0.0
    extras: Mapping[str, object] = field(default_factory=dict)

    @property
    def caption(self) -> str | None:
        return f"{self.label} {self.confidence:.2f}"

    def details(self) -> dict[str, object]:
        return {"label": self.label, "confidence": self.confidence, **dict(self.extras)}


def classify_barcode_value(raw_value: str) -> str:
    """Best-effort value type of a decoded QR payload."""

    lowered = raw_value.strip().lower()
    if lowered.startswith(("http://", "https://")):
        return "url"
    if lowered.startswith("mailto:") or lowered.startswith("matmsg:"):
        return "email"
    if lowered.startswith("tel:"):
        return "phone"
    if lowered.startswith(("smsto:", "sms:")):
        return "sms"
    if lowered.startswith("wifi:"):
        return "wifi"
    if lowered.startswith("geo:"):
        return "geo"
    if lowered.startswith("begin:vcard") or lowered.startswith("mecard:"):
        return "contact_info"
    if lowered.startswith("begin:vevent"):
        return "calendar_event"
    return "text"


__all__ = [
    "BarcodeFeature",
    "FaceFeature",
    "FaceLandmark",
    "Feature",
    "GeoLocation",
    "LabelFeature",
    "LandmarkFeature",
    "ObjectFeature",
    "Point",
    "TextFeature",
    "classify_barcode_value",
]
