from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np
import pytest
import structlog

from vision_overlay.domain.image import Image
from vision_overlay.infrastructure.opencv_detectors import (
    OpenCvFaceDetector,
    OpenCvQrCodeDetector,
    OpenCvTextDetector,
)
from vision_overlay.shared.errors import InfrastructureError


def _blank(width: int = 320, height: int = 240) -> Image:
    return Image(data=np.full((height, width, 3), 255, dtype=np.uint8))


def test_blank_image_has_no_faces() -> None:
    assert OpenCvFaceDetector(structlog.get_logger("test")).detect(_blank()) == []


def test_blank_image_has_no_qr_codes() -> None:
    assert OpenCvQrCodeDetector(structlog.get_logger("test")).detect(_blank()) == []


def test_generated_qr_code_is_decoded() -> None:
    encoder = cv2.QRCodeEncoder.create()
    code = encoder.encode("https://example.com")
    code = cv2.resize(code, (code.shape[1] * 8, code.shape[0] * 8), interpolation=cv2.INTER_NEAREST)
    code = cv2.copyMakeBorder(code, 40, 40, 40, 40, cv2.BORDER_CONSTANT, value=255)
    image = Image(data=cv2.cvtColor(code, cv2.COLOR_GRAY2BGR))

    features = OpenCvQrCodeDetector(structlog.get_logger("test")).detect(image)

    assert [feature.raw_value for feature in features] == ["https://example.com"]
    barcode = features[0]
    assert barcode.value_type == "url"
    assert len(barcode.corner_points) == 4
    assert 0 <= barcode.frame.x < barcode.frame.x + barcode.frame.width <= image.size.width


def test_text_detector_requires_model_files(tmp_path: Path) -> None:
    detector = OpenCvTextDetector(
        str(tmp_path / "db.onnx"),
        str(tmp_path / "crnn.onnx"),
        str(tmp_path / "alphabet.txt"),
        structlog.get_logger("test"),
    )

    with pytest.raises(InfrastructureError, match="does not exist"):
        detector.detect(_blank())
