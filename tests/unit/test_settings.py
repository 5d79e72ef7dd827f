from __future__ import annotations

import pytest

from vision_overlay.crosscutting.config import load_settings
from vision_overlay.domain.settings import VisionSettings


def test_vision_settings_defaults() -> None:
    settings = VisionSettings(custom_model_path="models/best.pt", label_model_path="yolov8n-cls.pt")

    assert settings.label_confidence_threshold == 0.75
    assert settings.landmark_max_results == 20
    assert settings.device is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"custom_model_path": ""},
        {"label_model_path": ""},
        {"label_confidence_threshold": 0},
        {"object_confidence_threshold": 1.5},
        {"landmark_max_results": 0},
        {"cloud_timeout_seconds": -1},
        {"device": "tpu"},
    ],
)
def test_vision_settings_rejects_invalid_values(overrides: dict) -> None:
    values = {"custom_model_path": "a.pt", "label_model_path": "b.pt", **overrides}

    with pytest.raises(ValueError):
        VisionSettings(**values)


def test_app_settings_read_prefixed_environment(monkeypatch) -> None:
    monkeypatch.setenv("VISION_OVERLAY_LANDMARK_MAX_RESULTS", "5")
    monkeypatch.setenv("VISION_OVERLAY_CLOUD_API_KEY", "secret-key")
    monkeypatch.setenv("VISION_OVERLAY_DEVICE", "cpu")

    settings = load_settings()

    assert settings.landmark_max_results == 5
    assert settings.cloud_api_key.get_secret_value() == "secret-key"
    assert "secret-key" not in repr(settings)
    assert settings.vision_settings().device == "cpu"


def test_overrides_win_over_environment(monkeypatch) -> None:
    monkeypatch.setenv("VISION_OVERLAY_MODELS_DIR", "from-env")

    assert load_settings(models_dir="explicit").models_dir == "explicit"
