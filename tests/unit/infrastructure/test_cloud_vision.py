from __future__ import annotations

import json

import httpx
import numpy as np
import pytest
import structlog

from vision_overlay.domain.image import Image
from vision_overlay.infrastructure.cloud_vision import (
    CloudLabelDetector,
    CloudLandmarkDetector,
    CloudTextDetector,
    CloudVisionClient,
    block_text,
    bounding_poly_rect,
)
from vision_overlay.shared.errors import InfrastructureError

ENDPOINT = "https://vision.example.test/v1/images:annotate"


def _image() -> Image:
    return Image(data=np.zeros((20, 30, 3), dtype=np.uint8))


def _client(handler, api_key: str | None = "key-123") -> CloudVisionClient:
    return CloudVisionClient(api_key, ENDPOINT, transport=httpx.MockTransport(handler), logger=structlog.get_logger("test"))


def _symbol(text: str, break_type: str | None = None) -> dict:
    symbol: dict = {"text": text}
    if break_type:
        symbol["property"] = {"detectedBreak": {"type": break_type}}
    return symbol


def test_request_carries_key_feature_and_content() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"responses": [{"labelAnnotations": []}]})

    _client(handler).annotate(_image(), {"type": "LABEL_DETECTION"})

    request = captured[0]
    body = json.loads(request.content)
    assert request.url.params["key"] == "key-123"
    assert body["requests"][0]["features"] == [{"type": "LABEL_DETECTION"}]
    assert body["requests"][0]["image"]["content"]


def test_missing_key_fails_before_any_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not be reached
        raise AssertionError("request sent without a key")

    with pytest.raises(InfrastructureError, match="API key"):
        _client(handler, api_key=None).annotate(_image(), {"type": "LABEL_DETECTION"})


def test_http_error_message_is_surfaced() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"error": {"message": "API key not valid."}})

    with pytest.raises(InfrastructureError, match="API key not valid."):
        _client(handler).annotate(_image(), {"type": "LABEL_DETECTION"})


def test_per_image_error_is_raised() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"responses": [{"error": {"code": 3, "message": "Bad image data."}}]})

    with pytest.raises(InfrastructureError, match="Bad image data."):
        _client(handler).annotate(_image(), {"type": "LABEL_DETECTION"})


def test_landmarks_are_parsed_with_locations() -> None:
    payload = {
        "landmarkAnnotations": [
            {
                "mid": "/m/0c7zy",
                "description": "Eiffel Tower",
                "score": 0.93,
                "boundingPoly": {"vertices": [{"x": 10, "y": 5}, {"x": 40, "y": 5}, {"x": 40, "y": 25}, {"y": 25}]},
                "locations": [{"latLng": {"latitude": 48.858, "longitude": 2.294}}],
            }
        ]
    }

    def handler(request: httpx.Request) -> httpx.Response:
        feature = json.loads(request.content)["requests"][0]["features"][0]
        assert feature == {"type": "LANDMARK_DETECTION", "maxResults": 3, "model": "builtin/latest"}
        return httpx.Response(200, json={"responses": [payload]})

    detector = CloudLandmarkDetector(_client(handler), structlog.get_logger("test"), max_results=3)

    (landmark,) = detector.detect(_image())

    assert landmark.landmark == "Eiffel Tower"
    assert landmark.entity_id == "/m/0c7zy"
    assert landmark.frame.as_tuple() == (0.0, 5.0, 40.0, 20.0)
    assert landmark.locations[0].latitude == pytest.approx(48.858)
    assert landmark.caption == "Eiffel Tower"


def test_labels_have_no_frame() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        labels = [{"description": "Cat", "score": 0.97, "mid": "/m/01yrx"}, {"description": "Whiskers", "score": 0.8}]
        return httpx.Response(200, json={"responses": [{"labelAnnotations": labels}]})

    labels = CloudLabelDetector(_client(handler), structlog.get_logger("test")).detect(_image())

    assert [(label.label, label.confidence, label.frame) for label in labels] == [("Cat", 0.97, None), ("Whiskers", 0.8, None)]


def test_empty_response_yields_no_features() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"responses": [{}]})

    assert CloudTextDetector(_client(handler), structlog.get_logger("test")).detect(_image()) == []


def test_document_text_is_split_into_blocks() -> None:
    block = {
        "boundingBox": {"vertices": [{"x": 1, "y": 2}, {"x": 21, "y": 2}, {"x": 21, "y": 12}, {"x": 1, "y": 12}]},
        "confidence": 0.9,
        "paragraphs": [
            {
                "words": [
                    {"symbols": [_symbol("H"), _symbol("i", "SPACE")]},
                    {"symbols": [_symbol("y"), _symbol("o", "LINE_BREAK")]},
                    {"symbols": [_symbol("b"), _symbol("y", "EOL_SURE_SPACE")]},
                ]
            }
        ],
    }
    document = {"text": "Hi yo\nby\n", "pages": [{"blocks": [block]}]}

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"responses": [{"fullTextAnnotation": document}]})

    (feature,) = CloudTextDetector(_client(handler), structlog.get_logger("test")).detect(_image())

    assert feature.text == "Hi yo\nby"
    assert feature.lines == ("Hi yo", "by")
    assert feature.frame.as_tuple() == (1.0, 2.0, 20.0, 10.0)
    assert feature.confidence == pytest.approx(0.9)


def test_block_text_handles_hyphen_breaks() -> None:
    block = {"paragraphs": [{"words": [{"symbols": [_symbol("a"), _symbol("b", "HYPHEN")]}, {"symbols": [_symbol("c")]}]}]}

    assert block_text(block) == "ab-\nc"


def test_bounding_poly_without_vertices() -> None:
    assert bounding_poly_rect(None) is None
    assert bounding_poly_rect({"vertices": []}) is None
