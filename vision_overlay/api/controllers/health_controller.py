from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from ... import __version__
from ...app.container import AppContainer
from ...crosscutting.config import AppSettings
from ...domain.detector import DetectorKind
from ..models import HealthReportModel
from .controller_base import ControllerBase


class HealthController(ControllerBase):
    def __init__(self):
        super().__init__()

        @self.router.get("", response_model=HealthReportModel)
        @inject
        async def root(settings: AppSettings = Depends(Provide[AppContainer.settings])) -> HealthReportModel:
            return HealthReportModel(
                status="ok",
                app_name=settings.app_name,
                version=__version__,
                detectors=list(DetectorKind),
            )
