from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from ..application.detection_session import DetectionReport
from ..domain.detector import DetectorKind
from ..domain.geometry import FeatureRect, ImageSize, MappedRect, ViewRect


class RectModel(BaseModel):
    """Axis-aligned rectangle given by its top-left corner and extent."""

    x: float = Field(..., description="X coordinate of the top-left corner.")
    y: float = Field(..., description="Y coordinate of the top-left corner.")
    width: float = Field(..., ge=0.0, description="Rectangle width.")
    height: float = Field(..., ge=0.0, description="Rectangle height.")

    @classmethod
    def from_rect(cls, rect: FeatureRect | MappedRect | ViewRect) -> "RectModel":
        return cls(x=rect.x, y=rect.y, width=rect.width, height=rect.height)


class ViewRectModel(BaseModel):
    """Frame of the view the picture is displayed in, aspect-fit."""

    x: float = Field(default=0.0, description="View origin X; does not affect the mapping.")
    y: float = Field(default=0.0, description="View origin Y; does not affect the mapping.")
    width: float = Field(..., gt=0.0, description="View width in points.")
    height: float = Field(..., gt=0.0, description="View height in points.")

    def to_domain(self) -> ViewRect:
        return ViewRect(x=self.x, y=self.y, width=self.width, height=self.height)


class ImageSizeModel(BaseModel):
    width: float = Field(..., gt=0.0)
    height: float = Field(..., gt=0.0)

    @classmethod
    def from_size(cls, size: ImageSize) -> "ImageSizeModel":
        return cls(width=size.width, height=size.height)


class DetectionRequestModel(BaseModel):
    """Request payload containing a base64 encoded image and the detector to run."""

    image_base64: str = Field(..., min_length=1, description="Base64 encoded image, optionally as a data URI.")
    detector: DetectorKind = Field(..., description="Detection variant to run.")
    view: Optional[ViewRectModel] = Field(
        default=None,
        description="View the picture is shown in. Defaults to the picture's own size.",
    )
    custom_model: Optional[str] = Field(
        default=None,
        min_length=1,
        description="Custom model file to switch to before running the custom_model detector.",
    )


class FeatureModel(BaseModel):
    kind: str = Field(..., description="Feature type, such as 'face' or 'text'.")
    frame: Optional[RectModel] = Field(default=None, description="Bounding box in image pixels.")
    mapped_frame: Optional[RectModel] = Field(default=None, description="Bounding box in view coordinates.")
    details: dict[str, Any] = Field(default_factory=dict, description="Detector specific metadata.")


class DetectionResponseModel(BaseModel):
    detector: DetectorKind
    succeeded: bool
    message: str = Field(..., description="Results text, or the failure message prefixed with the detector name.")
    image: ImageSizeModel
    view: RectModel
    features: list[FeatureModel] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: DetectionReport, image_size: ImageSize, view: ViewRect) -> "DetectionResponseModel":
        features = [
            FeatureModel(
                kind=_feature_kind(item.feature),
                frame=RectModel.from_rect(item.feature.frame) if item.feature.frame else None,
                mapped_frame=RectModel.from_rect(item.rect) if item.rect else None,
                details=item.feature.details(),
            )
            for item in report.mapped
        ]
        return cls(
            detector=report.kind,
            succeeded=report.succeeded,
            message=report.message,
            image=ImageSizeModel.from_size(image_size),
            view=RectModel.from_rect(view),
            features=features,
        )


class DetectorDescriptionModel(BaseModel):
    kind: DetectorKind
    title: str
    cloud: bool


class HealthReportModel(BaseModel):
    status: str
    app_name: str
    version: str
    detectors: list[DetectorKind]


def _feature_kind(feature) -> str:
    return type(feature).__name__.removesuffix("Feature").lower() or "feature"
