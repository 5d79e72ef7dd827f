from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..app.container import AppContainer, create_container
from .controller_loader import ControllerLoader


def create_app(container: AppContainer | None = None) -> FastAPI:
    container = container or create_container()
    settings = container.settings()

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        docs_url="/docs",
        redoc_url=None,
        openapi_url=f"/docs/v{__version__}/openapi.json",
    )
    app.container = container

    ControllerLoader.auto_register_controllers(app, package=f"{__package__}.controllers", container=container)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.openapi = ControllerLoader.custom_openapi(app, settings, __version__)
    container.logger().info("api.ready", routes=len(app.routes))
    return app
