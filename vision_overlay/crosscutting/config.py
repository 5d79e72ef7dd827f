"""Application configuration loading helpers."""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.settings import VisionSettings


class AppSettings(BaseSettings):
    """Runtime configuration read from ``VISION_OVERLAY_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="VISION_OVERLAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "vision-overlay"
    log_level: str = Field(default="INFO", description="Root log level for structlog and stdlib logging.")

    models_dir: str = "models"
    custom_model_path: str = "models/best.pt"
    label_model_path: str = "yolov8n-cls.pt"
    device: str | None = None
    label_confidence_threshold: float = Field(default=0.75, gt=0.0, le=1.0)
    object_confidence_threshold: float = Field(default=0.5, gt=0.0, le=1.0)

    text_detection_model_path: str = "models/text/DB_TD500_resnet18.onnx"
    text_recognition_model_path: str = "models/text/crnn_cs.onnx"
    text_vocabulary_path: str = "models/text/alphabet_94.txt"

    cloud_api_key: SecretStr | None = None
    cloud_endpoint: str = "https://vision.googleapis.com/v1/images:annotate"
    cloud_timeout_seconds: float = Field(default=30.0, gt=0.0)
    landmark_max_results: int = Field(default=20, ge=1)

    default_image_path: str | None = None

    def vision_settings(self) -> VisionSettings:
        return VisionSettings(
            custom_model_path=self.custom_model_path,
            label_model_path=self.label_model_path,
            label_confidence_threshold=self.label_confidence_threshold,
            object_confidence_threshold=self.object_confidence_threshold,
            landmark_max_results=self.landmark_max_results,
            cloud_timeout_seconds=self.cloud_timeout_seconds,
            device=self.device,
        )


def load_settings(**overrides) -> AppSettings:
    """Load configuration values from the environment, applying ``overrides`` last."""

    return AppSettings(**overrides)


__all__ = ["AppSettings", "load_settings"]
