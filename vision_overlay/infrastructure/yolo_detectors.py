from __future__ import annotations

import threading
import time
from typing import Iterable, Sequence

import torch
from ultralytics import YOLO

from ..domain.detector import Detector, DetectorKind
from ..domain.features import LabelFeature, ObjectFeature
from ..domain.geometry import FeatureRect
from ..domain.image import Image
from ..shared.errors import InfrastructureError


def normalise_label_names(names) -> list[str]:
    if isinstance(names, dict):
        return [names[index] for index in sorted(names)]
    if isinstance(names, (list, tuple)):
        return list(names)
    try:
        return [value for _, value in sorted(names.items())]
    except AttributeError:
        return [str(names)]


def resolve_device(device: str | None) -> str:
    if device:
        if device == "cuda" and not torch.cuda.is_available():
            raise InfrastructureError("CUDA was requested but is not available on this machine.")
        return device
    return "cuda" if torch.cuda.is_available() else "cpu"


class _YoloBackedDetector(Detector):
    """Loads an Ultralytics model lazily on first use and keeps it for later calls."""

    def __init__(self, model_path: str, device: str | None, logger) -> None:
        self._model_path = model_path
        self._requested_device = device
        self._device: str | None = None
        self._model = None
        self._labels: list[str] = []
        self._model_lock = threading.Lock()
        self._logger = logger

    @property
    def model_path(self) -> str:
        return self._model_path

    def labels(self) -> Iterable[str]:
        self._ensure_model_loaded()
        return tuple(self._labels)

    def _ensure_model_loaded(self):
        if self._model is not None:
            return self._model
        with self._model_lock:
            if self._model is None:
                device = resolve_device(self._requested_device)
                try:
                    model = YOLO(self._model_path)
                    model.to(device)
                except Exception as exc:
                    raise InfrastructureError(f"Unable to load model {self._model_path}") from exc
                self._labels = normalise_label_names(getattr(model, "names", {}))
                self._device = device
                self._model = model
                self._logger.info("model.loaded", path=self._model_path, device=device, labels=len(self._labels))
        return self._model

    def _predict(self, image: Image, **kwargs):
        model = self._ensure_model_loaded()
        start = time.perf_counter()
        try:
            with torch.inference_mode():
                results = model.predict(image.data, device=self._device, verbose=False, **kwargs)
        except Exception as exc:
            raise InfrastructureError(f"Inference with {self._model_path} failed") from exc
        self._logger.debug("model.predicted", path=self._model_path, duration_ms=(time.perf_counter() - start) * 1000)
        return results

    def _label_for(self, class_id: int, names=None) -> str:
        lookup = normalise_label_names(names) if names else self._labels
        return lookup[class_id] if 0 <= class_id < len(lookup) else str(class_id)


class YoloLabelDetector(_YoloBackedDetector):
    """Whole-image labelling with a classification model; labels carry no frame."""

    kind = DetectorKind.LABEL

    def __init__(self, model_path: str, device: str | None, logger, *, confidence_threshold: float = 0.75, top_k: int = 5) -> None:
        super().__init__(model_path, device, logger)
        self._confidence_threshold = confidence_threshold
        self._top_k = top_k

    def detect(self, image: Image) -> Sequence[LabelFeature]:
        results = self._predict(image)
        features: list[LabelFeature] = []
        for result in results:
            probs = getattr(result, "probs", None)
            if probs is None:
                continue
            scores = [float(value) for value in probs.data.tolist()]
            ranked = sorted(range(len(scores)), key=scores.__getitem__, reverse=True)[: self._top_k]
            names = getattr(result, "names", None)
            for class_id in ranked:
                confidence = float(scores[class_id])
                if confidence < self._confidence_threshold:
                    continue
                label = self._label_for(int(class_id), names)
                features.append(LabelFeature(frame=None, label=label, confidence=confidence, entity_id=str(int(class_id))))
                self._logger.info("label.detected", label=label, entity_id=int(class_id), confidence=confidence)
        return features


class YoloObjectDetector(_YoloBackedDetector):
    """Object detection with a user-supplied custom model."""

    kind = DetectorKind.CUSTOM_MODEL

    def __init__(self, model_path: str, device: str | None, logger, *, confidence_threshold: float = 0.5, max_detections: int = 100) -> None:
        super().__init__(model_path, device, logger)
        self._confidence_threshold = confidence_threshold
        self._max_detections = max(1, max_detections)

    def detect(self, image: Image) -> Sequence[ObjectFeature]:
        results = self._predict(image, conf=self._confidence_threshold, max_det=self._max_detections)
        features: list[ObjectFeature] = []
        for result in results:
            boxes = getattr(result, "boxes", None)
            if boxes is None:
                continue
            names = getattr(result, "names", None)
            for box in boxes:
                confidence = float(box.conf[0])
                if confidence < self._confidence_threshold:
                    continue
                x1, y1, x2, y2 = (float(value) for value in box.xyxy[0].tolist())
                class_id = int(box.cls[0])
                label = self._label_for(class_id, names)
                feature = ObjectFeature(
                    frame=FeatureRect.from_corners(x1, y1, x2, y2),
                    label=label,
                    confidence=confidence,
                    extras={"class_id": class_id},
                )
                features.append(feature)
                self._logger.info("object.detected", label=label, confidence=confidence, frame=feature.frame.as_tuple())
        return features


__all__ = [
    "YoloLabelDetector",
    "YoloObjectDetector",
    "normalise_label_names",
    "resolve_device",
]
