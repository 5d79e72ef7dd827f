"""On-device detectors backed by OpenCV: faces, QR codes and text blocks."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Sequence

import cv2
import numpy as np

from ..domain.detector import Detector, DetectorKind
from ..domain.features import (
    BarcodeFeature,
    FaceFeature,
    FaceLandmark,
    TextFeature,
    classify_barcode_value,
)
from ..domain.geometry import FeatureRect
from ..domain.image import Image
from ..shared.errors import InfrastructureError

TEXT_DETECTION_INPUT_SIZE = (736, 736)
TEXT_DETECTION_MEAN = (122.67891434, 116.66876762, 104.00698793)
TEXT_RECOGNITION_INPUT_SIZE = (100, 32)


def _load_cascade(filename: str) -> "cv2.CascadeClassifier":
    cascade = cv2.CascadeClassifier(cv2.data.haarcascades + filename)
    if cascade.empty():
        raise InfrastructureError(f"Unable to load Haar cascade {filename}")
    return cascade


class OpenCvFaceDetector(Detector):
    kind = DetectorKind.FACE

    def __init__(self, logger, *, scale_factor: float = 1.1, min_neighbors: int = 5, min_size: int = 48) -> None:
        self._faces = _load_cascade("haarcascade_frontalface_default.xml")
        self._eyes = _load_cascade("haarcascade_eye.xml")
        self._scale_factor = scale_factor
        self._min_neighbors = min_neighbors
        self._min_size = (min_size, min_size)
        self._logger = logger

    def detect(self, image: Image) -> Sequence[FaceFeature]:
        gray = cv2.cvtColor(image.data, cv2.COLOR_BGR2GRAY)
        rects = self._faces.detectMultiScale(
            gray,
            scaleFactor=self._scale_factor,
            minNeighbors=self._min_neighbors,
            minSize=self._min_size,
        )
        features: list[FaceFeature] = []
        for tracking_id, (x, y, w, h) in enumerate(rects):
            landmarks = self._eye_landmarks(gray, int(x), int(y), int(w), int(h))
            face = FaceFeature(
                frame=FeatureRect(float(x), float(y), float(w), float(h)),
                landmarks=landmarks,
                tracking_id=tracking_id,
            )
            features.append(face)
            self._logger.info(
                "face.detected",
                frame=face.frame.as_tuple(),
                tracking_id=tracking_id,
                landmarks={lm.type: lm.position for lm in landmarks},
            )
        return features

    def _eye_landmarks(self, gray: np.ndarray, x: int, y: int, w: int, h: int) -> tuple[FaceLandmark, ...]:
        upper_half = gray[y : y + h // 2, x : x + w]
        eyes = self._eyes.detectMultiScale(upper_half, scaleFactor=self._scale_factor, minNeighbors=self._min_neighbors)
        centers = sorted(
            (x + ex + ew / 2.0, y + ey + eh / 2.0) for (ex, ey, ew, eh) in list(eyes)[:2]
        )
        if len(centers) == 2:
            # The subject's right eye appears on the left of the picture.
            return (
                FaceLandmark("right_eye", centers[0]),
                FaceLandmark("left_eye", centers[1]),
            )
        return tuple(FaceLandmark("eye", center) for center in centers)


class OpenCvQrCodeDetector(Detector):
    kind = DetectorKind.BARCODE

    def __init__(self, logger) -> None:
        self._detector = cv2.QRCodeDetector()
        self._logger = logger

    def detect(self, image: Image) -> Sequence[BarcodeFeature]:
        try:
            found, decoded, points, _ = self._detector.detectAndDecodeMulti(image.data)
        except cv2.error as exc:
            raise InfrastructureError("QR code detection failed") from exc
        if not found or points is None:
            return []

        features: list[BarcodeFeature] = []
        for raw_value, corners in zip(decoded, points):
            corner_points = tuple((float(px), float(py)) for px, py in corners)
            barcode = BarcodeFeature(
                frame=FeatureRect.from_points(corner_points),
                raw_value=raw_value,
                display_value=raw_value,
                value_type=classify_barcode_value(raw_value),
                corner_points=corner_points,
            )
            features.append(barcode)
            self._logger.info(
                "barcode.detected",
                frame=barcode.frame.as_tuple(),
                corner_points=len(corner_points),
                display_value=barcode.display_value,
                value_type=barcode.value_type,
            )
        return features


class OpenCvTextDetector(Detector):
    """DB text-region detector followed by a CRNN recognizer, both run through ``cv2.dnn``."""

    kind = DetectorKind.TEXT

    def __init__(
        self,
        detection_model_path: str,
        recognition_model_path: str,
        vocabulary_path: str,
        logger,
    ) -> None:
        self._detection_model_path = detection_model_path
        self._recognition_model_path = recognition_model_path
        self._vocabulary_path = vocabulary_path
        self._logger = logger
        self._models = None
        self._lock = threading.Lock()

    def detect(self, image: Image) -> Sequence[TextFeature]:
        detector, recognizer = self._ensure_models_loaded()
        try:
            quads, confidences = detector.detect(image.data)
        except cv2.error as exc:
            raise InfrastructureError("Text region detection failed") from exc

        features: list[TextFeature] = []
        for index, quad in enumerate(quads):
            corner_points = tuple((float(px), float(py)) for px, py in np.asarray(quad).reshape(-1, 2))
            crop = _four_points_transform(image.data, np.asarray(corner_points, dtype=np.float32))
            try:
                text = recognizer.recognize(crop)
            except cv2.error as exc:
                raise InfrastructureError("Text recognition failed") from exc
            confidence = float(confidences[index]) if index < len(confidences) else None
            block = TextFeature(
                frame=FeatureRect.from_points(corner_points),
                text=text,
                corner_points=corner_points,
                lines=(text,),
                confidence=confidence,
            )
            features.append(block)
            self._logger.info(
                "text.detected",
                text=text,
                frame=block.frame.as_tuple(),
                corner_points=len(corner_points),
            )
        return features

    def _ensure_models_loaded(self):
        if self._models is not None:
            return self._models
        with self._lock:
            if self._models is None:
                for path in (self._detection_model_path, self._recognition_model_path, self._vocabulary_path):
                    if not Path(path).is_file():
                        raise InfrastructureError(f"Text model file '{path}' does not exist")
                try:
                    detector = cv2.dnn.TextDetectionModel_DB(self._detection_model_path)
                    detector.setBinaryThreshold(0.3).setPolygonThreshold(0.5)
                    detector.setMaxCandidates(200).setUnclipRatio(2.0)
                    detector.setInputParams(1.0 / 255.0, TEXT_DETECTION_INPUT_SIZE, TEXT_DETECTION_MEAN)

                    recognizer = cv2.dnn.TextRecognitionModel(self._recognition_model_path)
                    recognizer.setDecodeType("CTC-greedy")
                    recognizer.setVocabulary(_read_vocabulary(self._vocabulary_path))
                    recognizer.setInputParams(
                        1.0 / 127.5, TEXT_RECOGNITION_INPUT_SIZE, (127.5, 127.5, 127.5)
                    )
                except cv2.error as exc:
                    raise InfrastructureError("Unable to load text models") from exc
                self._models = (detector, recognizer)
        return self._models


def _read_vocabulary(path: str) -> list[str]:
    with open(path, "r", encoding="utf-8") as handle:
        return [line.rstrip("\n") for line in handle if line.rstrip("\n")]


def _four_points_transform(frame: np.ndarray, vertices: np.ndarray) -> np.ndarray:
    """Warp the quadrilateral ``vertices`` (bottom-left first, clockwise) to the recognizer size."""

    width, height = TEXT_RECOGNITION_INPUT_SIZE
    target = np.array(
        [[0, height - 1], [0, 0], [width - 1, 0], [width - 1, height - 1]],
        dtype=np.float32,
    )
    matrix = cv2.getPerspectiveTransform(vertices, target)
    return cv2.warpPerspective(frame, matrix, (width, height))


__all__ = ["OpenCvFaceDetector", "OpenCvQrCodeDetector", "OpenCvTextDetector"]
