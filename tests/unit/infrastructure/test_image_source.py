from __future__ import annotations

import base64
from pathlib import Path

import cv2
import numpy as np
import pytest

from vision_overlay.infrastructure.image_source import (
    encode_base64,
    encode_png,
    load_image_file,
    load_image_payload,
    normalize_image_bytes,
)


def _png_bytes(width: int = 8, height: int = 4) -> bytes:
    frame = np.full((height, width, 3), 127, dtype=np.uint8)
    return encode_png(frame)


def test_load_image_file_reports_size(tmp_path: Path) -> None:
    path = tmp_path / "picture.png"
    path.write_bytes(_png_bytes(8, 4))

    image = load_image_file(path)

    assert image.size.as_tuple() == (8.0, 4.0)
    assert image.source == str(path)


def test_load_image_file_missing(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="does not exist"):
        load_image_file(tmp_path / "missing.png")


def test_load_payload_accepts_data_uri() -> None:
    encoded = base64.b64encode(_png_bytes()).decode("ascii")

    image = load_image_payload(f"data:image/png;base64,{encoded}")

    assert image.data.shape == (4, 8, 3)


def test_normalize_restores_urlsafe_and_padding() -> None:
    raw = bytes(range(250, 256)) + b"\xfb\xff"
    urlsafe = base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    assert normalize_image_bytes(urlsafe) == raw


@pytest.mark.parametrize("payload", ["", "   ", "data:image/png;base64", "***", b""])
def test_normalize_rejects_empty_or_invalid(payload) -> None:
    with pytest.raises(ValueError):
        normalize_image_bytes(payload)


def test_undecodable_bytes_are_rejected() -> None:
    with pytest.raises(ValueError, match="Unable to decode"):
        load_image_payload(b"not an image")


def test_encode_base64_is_decodable() -> None:
    image = load_image_payload(_png_bytes())

    decoded = cv2.imdecode(np.frombuffer(base64.b64decode(encode_base64(image)), dtype=np.uint8), cv2.IMREAD_COLOR)

    assert decoded.shape == image.data.shape
