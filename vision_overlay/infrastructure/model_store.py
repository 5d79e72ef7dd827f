from __future__ import annotations

from pathlib import Path
from typing import Callable

from ..shared.errors import InfrastructureError
from ..shared.paths import ensure_path_first, list_files_with_extensions
from .yolo_detectors import normalise_label_names

MODEL_EXTENSIONS = (".pt", ".onnx")


class ModelStore:
    """Custom models available under a models directory."""

    def __init__(self, models_dir: Path, model_loader: Callable[[str], object] | None = None) -> None:
        self._models_dir = models_dir
        self._model_loader: Callable[[str], object] = model_loader or self._load_model

    @property
    def models_dir(self) -> Path:
        return self._models_dir

    def list_models(self) -> list[str]:
        files = list_files_with_extensions(self._models_dir, MODEL_EXTENSIONS)
        return [path.as_posix() for path in files]

    def ensure_present(self, path: str) -> list[str]:
        return ensure_path_first(self.list_models(), path)

    def load_labels(self, model_path: str) -> list[str]:
        model = self._model_loader(model_path)
        return normalise_label_names(getattr(model, "names", {}))

    def _load_model(self, model_path: str):
        from ultralytics import YOLO

        try:
            return YOLO(model_path)
        except Exception as exc:
            raise InfrastructureError(f"Unable to load model {model_path}") from exc
