import importlib
import inspect
import pkgutil

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from fastapi.routing import APIRouter

from ..app.container import AppContainer
from ..crosscutting.config import AppSettings
from .controllers.controller_base import ControllerBase


class ControllerLoader:
    @staticmethod
    def custom_openapi(app: FastAPI, settings: AppSettings, version: str):
        def openapi():
            if app.openapi_schema:
                return app.openapi_schema
            app.openapi_schema = get_openapi(
                title=settings.app_name,
                version=version,
                routes=app.routes,
            )
            return app.openapi_schema

        return openapi

    @staticmethod
    def auto_register_controllers(app: FastAPI, package: str, container: AppContainer | None = None) -> list[str]:
        """Instantiate every ``ControllerBase`` subclass found in ``package`` and mount its router."""

        package_module = importlib.import_module(package)
        registered: list[str] = []

        for _, module_name, _ in pkgutil.iter_modules(package_module.__path__):
            module = importlib.import_module(f"{package}.{module_name}")

            for name, cls in inspect.getmembers(module, inspect.isclass):
                if cls.__module__ != module.__name__:
                    continue
                if issubclass(cls, ControllerBase) and cls is not ControllerBase:
                    instance = cls()
                    if isinstance(getattr(instance, "router", None), APIRouter):
                        app.include_router(instance.router)
                        registered.append(name)

            if container is not None:
                container.wire(modules=[module])
        return registered
