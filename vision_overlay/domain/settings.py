from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class VisionSettings:
    custom_model_path: str
    label_model_path: str
    label_confidence_threshold: float = 0.75
    object_confidence_threshold: float = 0.5
    landmark_max_results: int = 20
    cloud_timeout_seconds: float = 30.0
    device: str | None = None

    def __post_init__(self) -> None:
        if not self.custom_model_path:
            raise ValueError("Custom model path must not be empty")
        if not self.label_model_path:
            raise ValueError("Label model path must not be empty")
        if not (0 < self.label_confidence_threshold <= 1):
            raise ValueError("Label confidence threshold must be within (0, 1]")
        if not (0 < self.object_confidence_threshold <= 1):
            raise ValueError("Object confidence threshold must be within (0, 1]")
        if self.landmark_max_results <= 0:
            raise ValueError("Landmark max results must be positive")
        if self.cloud_timeout_seconds <= 0:
            raise ValueError("Cloud timeout must be positive")
        if self.device not in (None, "cpu", "cuda"):
            raise ValueError("Device must be 'cpu' or 'cuda'")
