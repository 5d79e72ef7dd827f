"""Cloud detectors talking to the Google Cloud Vision ``images:annotate`` REST endpoint."""

from __future__ import annotations

from typing import Any, Dict, Sequence

import httpx

from ..domain.detector import Detector, DetectorKind
from ..domain.features import GeoLocation, LabelFeature, LandmarkFeature, TextFeature
from ..domain.geometry import FeatureRect
from ..domain.image import Image
from ..shared.errors import InfrastructureError
from .image_source import encode_base64

_BREAK_SEPARATORS = {
    "SPACE": " ",
    "SURE_SPACE": " ",
    "EOL_SURE_SPACE": "\n",
    "LINE_BREAK": "\n",
    "HYPHEN": "-\n",
}


class CloudVisionClient:
    """Thin synchronous wrapper over a single ``images:annotate`` call."""

    def __init__(
        self,
        api_key: str | None,
        endpoint: str,
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
        logger=None,
    ) -> None:
        self._api_key = api_key
        self._endpoint = endpoint
        self._timeout = timeout
        self._transport = transport
        self._logger = logger

    def annotate(self, image: Image, feature: Dict[str, Any]) -> Dict[str, Any]:
        """Run one feature request and return the first response object."""

        if not self._api_key:
            raise InfrastructureError("Cloud Vision API key is not configured.")
        body = {"requests": [{"image": {"content": encode_base64(image)}, "features": [feature]}]}
        headers = {"Accept": "application/json"}

        with httpx.Client(timeout=self._timeout, transport=self._transport, follow_redirects=True) as client:
            try:
                response = client.post(self._endpoint, params={"key": self._api_key}, json=body, headers=headers)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                raise InfrastructureError(_error_message(exc.response) or f"HTTP request failed: {exc}") from exc
            except httpx.HTTPError as exc:
                raise InfrastructureError(f"HTTP request failed: {exc}") from exc

        payload = response.json()
        responses = payload.get("responses") or [{}]
        first = responses[0]
        error = first.get("error")
        if error:
            raise InfrastructureError(error.get("message") or "Cloud Vision request failed.")
        if self._logger is not None:
            self._logger.debug("cloud.annotated", feature=feature.get("type"), keys=sorted(first))
        return first


class _CloudDetector(Detector):
    def __init__(self, client: CloudVisionClient, logger) -> None:
        self._client = client
        self._logger = logger


class CloudLandmarkDetector(_CloudDetector):
    kind = DetectorKind.CLOUD_LANDMARK

    def __init__(self, client: CloudVisionClient, logger, *, max_results: int = 20) -> None:
        super().__init__(client, logger)
        self._max_results = max_results

    def detect(self, image: Image) -> Sequence[LandmarkFeature]:
        response = self._client.annotate(
            image,
            {"type": "LANDMARK_DETECTION", "maxResults": self._max_results, "model": "builtin/latest"},
        )
        features: list[LandmarkFeature] = []
        for annotation in response.get("landmarkAnnotations", []):
            locations = tuple(
                GeoLocation(
                    latitude=float(location.get("latLng", {}).get("latitude", 0.0)),
                    longitude=float(location.get("latLng", {}).get("longitude", 0.0)),
                )
                for location in annotation.get("locations", [])
            )
            landmark = LandmarkFeature(
                frame=bounding_poly_rect(annotation.get("boundingPoly")),
                landmark=annotation.get("description", ""),
                entity_id=annotation.get("mid"),
                confidence=_optional_float(annotation.get("score")),
                locations=locations,
            )
            features.append(landmark)
            self._logger.info(
                "landmark.detected",
                landmark=landmark.landmark,
                entity_id=landmark.entity_id,
                confidence=landmark.confidence,
                frame=landmark.frame.as_tuple() if landmark.frame else None,
                locations=[(loc.latitude, loc.longitude) for loc in locations],
            )
        return features


class CloudLabelDetector(_CloudDetector):
    kind = DetectorKind.CLOUD_LABEL

    def detect(self, image: Image) -> Sequence[LabelFeature]:
        response = self._client.annotate(image, {"type": "LABEL_DETECTION"})
        features: list[LabelFeature] = []
        for annotation in response.get("labelAnnotations", []):
            label = LabelFeature(
                frame=None,
                label=annotation.get("description", ""),
                confidence=float(annotation.get("score", 0.0)),
                entity_id=annotation.get("mid"),
            )
            features.append(label)
            self._logger.info("label.detected", label=label.label, entity_id=label.entity_id, confidence=label.confidence)
        return features


class CloudTextDetector(_CloudDetector):
    """Dense text recognition; one feature per block of every page."""

    kind = DetectorKind.CLOUD_TEXT

    def detect(self, image: Image) -> Sequence[TextFeature]:
        response = self._client.annotate(image, {"type": "DOCUMENT_TEXT_DETECTION"})
        document = response.get("fullTextAnnotation") or {}
        self._logger.info("text.document", text=document.get("text", ""), pages=len(document.get("pages", [])))

        features: list[TextFeature] = []
        for page in document.get("pages", []):
            for block in page.get("blocks", []):
                text = block_text(block)
                corner_points = _vertices(block.get("boundingBox"))
                feature = TextFeature(
                    frame=FeatureRect.from_points(corner_points) if corner_points else None,
                    text=text,
                    corner_points=corner_points,
                    lines=tuple(line for line in text.split("\n") if line),
                    confidence=_optional_float(block.get("confidence")),
                )
                features.append(feature)
                for symbol in _symbols(block):
                    self._logger.debug(
                        "text.symbol",
                        text=symbol.get("text", ""),
                        confidence=symbol.get("confidence", 0),
                        frame=bounding_poly_rect(symbol.get("boundingBox")),
                    )
        return features


def block_text(block: Dict[str, Any]) -> str:
    """Assemble a block's text from its symbols, honouring detected breaks."""

    pieces: list[str] = []
    for symbol in _symbols(block):
        pieces.append(symbol.get("text", ""))
        detected_break = (symbol.get("property") or {}).get("detectedBreak") or {}
        pieces.append(_BREAK_SEPARATORS.get(detected_break.get("type", ""), ""))
    return "".join(pieces).strip()


def bounding_poly_rect(poly: Dict[str, Any] | None) -> FeatureRect | None:
    points = _vertices(poly)
    return FeatureRect.from_points(points) if points else None


def _symbols(block: Dict[str, Any]):
    for paragraph in block.get("paragraphs", []):
        for word in paragraph.get("words", []):
            yield from word.get("symbols", [])


def _vertices(poly: Dict[str, Any] | None) -> tuple[tuple[float, float], ...]:
    if not poly:
        return ()
    # The API omits zero-valued coordinates.
    return tuple((float(vertex.get("x", 0)), float(vertex.get("y", 0))) for vertex in poly.get("vertices", []))


def _optional_float(value) -> float | None:
    return None if value is None else float(value)


def _error_message(response: httpx.Response) -> str | None:
    try:
        return response.json().get("error", {}).get("message")
    except (ValueError, AttributeError):
        return None


__all__ = [
    "CloudLabelDetector",
    "CloudLandmarkDetector",
    "CloudTextDetector",
    "CloudVisionClient",
    "block_text",
    "bounding_poly_rect",
]
