from __future__ import annotations

import threading
from typing import Callable, Dict

import httpx

from ..crosscutting.config import AppSettings
from ..domain.detector import Detector, DetectorKind
from ..shared.errors import DetectorUnavailableError
from .cloud_vision import CloudLabelDetector, CloudLandmarkDetector, CloudTextDetector, CloudVisionClient
from .opencv_detectors import OpenCvFaceDetector, OpenCvQrCodeDetector, OpenCvTextDetector
from .yolo_detectors import YoloLabelDetector, YoloObjectDetector


class DefaultDetectorFactory:
    """Builds and caches one detector per kind from the application settings."""

    def __init__(self, settings: AppSettings, logger, *, cloud_transport: httpx.BaseTransport | None = None) -> None:
        self._settings = settings
        self._vision = settings.vision_settings()
        self._logger = logger
        self._cloud_transport = cloud_transport
        self._custom_model_path = self._vision.custom_model_path
        self._detectors: Dict[DetectorKind, Detector] = {}
        self._lock = threading.RLock()
        self._builders: Dict[DetectorKind, Callable[[], Detector]] = {
            DetectorKind.TEXT: self._text,
            DetectorKind.BARCODE: lambda: OpenCvQrCodeDetector(self._child("barcode")),
            DetectorKind.LABEL: self._label,
            DetectorKind.FACE: lambda: OpenCvFaceDetector(self._child("face")),
            DetectorKind.CLOUD_TEXT: lambda: CloudTextDetector(self._cloud_client(), self._child("cloud_text")),
            DetectorKind.CLOUD_LABEL: lambda: CloudLabelDetector(self._cloud_client(), self._child("cloud_label")),
            DetectorKind.CLOUD_LANDMARK: lambda: CloudLandmarkDetector(
                self._cloud_client(),
                self._child("cloud_landmark"),
                max_results=self._vision.landmark_max_results,
            ),
            DetectorKind.CUSTOM_MODEL: self._custom_model,
        }

    @property
    def custom_model_path(self) -> str:
        return self._custom_model_path

    def create(self, kind: DetectorKind) -> Detector:
        with self._lock:
            detector = self._detectors.get(kind)
            if detector is None:
                builder = self._builders.get(kind)
                if builder is None:
                    raise DetectorUnavailableError(f"No backend configured for {kind.value}")
                detector = builder()
                self._detectors[kind] = detector
            return detector

    def select_custom_model(self, model_path: str) -> None:
        with self._lock:
            if model_path == self._custom_model_path:
                return
            self._custom_model_path = model_path
            self._detectors.pop(DetectorKind.CUSTOM_MODEL, None)
        self._logger.info("custom_model.selected", path=model_path)

    def _child(self, name: str):
        return self._logger.bind(detector=name)

    def _text(self) -> Detector:
        return OpenCvTextDetector(
            self._settings.text_detection_model_path,
            self._settings.text_recognition_model_path,
            self._settings.text_vocabulary_path,
            self._child("text"),
        )

    def _label(self) -> Detector:
        return YoloLabelDetector(
            self._vision.label_model_path,
            self._vision.device,
            self._child("label"),
            confidence_threshold=self._vision.label_confidence_threshold,
        )

    def _custom_model(self) -> Detector:
        return YoloObjectDetector(
            self._custom_model_path,
            self._vision.device,
            self._child("custom_model"),
            confidence_threshold=self._vision.object_confidence_threshold,
        )

    def _cloud_client(self) -> CloudVisionClient:
        api_key = self._settings.cloud_api_key.get_secret_value() if self._settings.cloud_api_key else None
        return CloudVisionClient(
            api_key,
            self._settings.cloud_endpoint,
            timeout=self._vision.cloud_timeout_seconds,
            transport=self._cloud_transport,
            logger=self._child("cloud"),
        )
