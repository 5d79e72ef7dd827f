from dependency_injector.wiring import Provide, inject
from fastapi import Depends, HTTPException, Query, status

from ...app.container import AppContainer
from ...application.detection_session import DetectionSession
from ...application.list_models import ListModelsUseCase, LoadModelLabelsUseCase
from ...domain.detector import DetectorKind
from ...infrastructure.image_source import load_image_payload
from ...shared.errors import InfrastructureError
from ..models import DetectionRequestModel, DetectionResponseModel, DetectorDescriptionModel
from .controller_base import ControllerBase


class VisionController(ControllerBase):
    """REST endpoints running a detector and mapping its features onto a view."""

    def __init__(self) -> None:
        super().__init__()

        @self.router.get("/detectors", response_model=list[DetectorDescriptionModel])
        async def detectors() -> list[DetectorDescriptionModel]:
            return [DetectorDescriptionModel(kind=kind, title=kind.title, cloud=kind.is_cloud) for kind in DetectorKind]

        @self.router.get("/models", response_model=list[str])
        @inject
        async def models(
            use_case: ListModelsUseCase = Depends(Provide[AppContainer.list_models]),
        ) -> list[str]:
            return use_case.execute()

        @self.router.get("/models/labels", response_model=list[str])
        @inject
        async def model_labels(
            model: str = Query(..., min_length=1, description="Model file whose class names are listed."),
            use_case: LoadModelLabelsUseCase = Depends(Provide[AppContainer.load_model_labels]),
        ) -> list[str]:
            try:
                return use_case.execute(model)
            except InfrastructureError as exc:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=str(exc),
                ) from exc

        @self.router.post(
            "/detect",
            response_model=DetectionResponseModel,
            summary="Detect features in an image and map them onto an aspect-fit view",
        )
        @inject
        async def detect(
            request: DetectionRequestModel,
            session: DetectionSession = Depends(Provide[AppContainer.detection_session]),
        ) -> DetectionResponseModel:
            try:
                image = load_image_payload(request.image_base64)
                session.select_image(image)
                if request.custom_model:
                    session.switch_model(request.custom_model)
                if request.view is not None:
                    session.set_view_rect(request.view.to_domain())
                report = await session.run(request.detector)
            except ValueError as exc:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=str(exc),
                ) from exc

            return DetectionResponseModel.from_report(report, image.size, session.effective_view_rect())
