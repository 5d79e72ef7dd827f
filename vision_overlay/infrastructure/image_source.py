"""Decoding pictures from files, raw bytes and base64 payloads."""

from __future__ import annotations

import base64
from binascii import Error as BinasciiError
from pathlib import Path
from typing import Union

import cv2
import numpy as np

from ..domain.image import Image


def load_image_file(path: Union[str, Path]) -> Image:
    """Read the picture stored at ``path``."""

    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise ValueError(f"Image file '{file_path}' does not exist.")
    return Image(data=decode_image_bytes(file_path.read_bytes()), source=str(file_path))


def load_image_payload(data: Union[bytes, str], source: str = "upload") -> Image:
    """Decode raw bytes or a base64 string (optionally a data URI) into an image."""

    return Image(data=decode_image_bytes(normalize_image_bytes(data)), source=source)


def decode_image_bytes(image_bytes: bytes) -> np.ndarray:
    np_array = np.frombuffer(image_bytes, dtype=np.uint8)
    if np_array.size == 0:
        raise ValueError("The image is empty or corrupted.")

    frame = cv2.imdecode(np_array, cv2.IMREAD_COLOR)
    if frame is None:
        raise ValueError("Unable to decode the provided image. Ensure a valid image format is used.")
    return frame


def encode_png(frame: np.ndarray) -> bytes:
    ok, buffer = cv2.imencode(".png", frame)
    if not ok:
        raise ValueError("Unable to encode the rendered image as PNG.")
    return buffer.tobytes()


def encode_base64(image: Image, extension: str = ".jpg") -> str:
    """Encode ``image`` for transports that expect base64 content, such as the cloud API."""

    ok, buffer = cv2.imencode(extension, image.data)
    if not ok:
        raise ValueError(f"Unable to encode image as {extension}.")
    return base64.b64encode(buffer.tobytes()).decode("ascii")


def normalize_image_bytes(data: Union[bytes, str]) -> bytes:
    """Decode base64 strings and validate payloads before decoding."""

    if isinstance(data, bytes):
        payload = data
    elif isinstance(data, str):
        stripped = data.strip()
        if stripped.lower().startswith("data:"):
            parts = stripped.split(",", 1)
            if len(parts) != 2:
                raise ValueError("The provided image content is not a valid base64 data URI.")
            stripped = parts[1]

        normalized = "".join(stripped.split())
        if not normalized:
            raise ValueError("No image content received for detection.")

        normalized = normalized.replace("-", "+").replace("_", "/")
        padding = len(normalized) % 4
        if padding:
            normalized += "=" * (4 - padding)

        try:
            payload = base64.b64decode(normalized, validate=True)
        except (BinasciiError, ValueError) as exc:
            raise ValueError("The provided image content is not valid base64 data.") from exc
    else:
        raise ValueError(f"Unsupported image payload type: {type(data)!r}.")

    if not payload:
        raise ValueError("No image content received for detection.")
    return payload


__all__ = [
    "decode_image_bytes",
    "encode_base64",
    "encode_png",
    "load_image_file",
    "load_image_payload",
    "normalize_image_bytes",
]
