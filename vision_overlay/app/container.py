"""Composition root wiring settings, adapters and the detection session."""

from __future__ import annotations

from pathlib import Path

from dependency_injector import containers, providers

from ..application.detection_session import DetectionSession
from ..application.list_models import ListModelsUseCase, LoadModelLabelsUseCase
from ..crosscutting.config import AppSettings, load_settings
from ..crosscutting.logging_setup import get_logger, setup_logging
from ..infrastructure.detector_factory import DefaultDetectorFactory
from ..infrastructure.model_store import ModelStore
from ..infrastructure.overlay_renderer import OverlayRenderer
from ..shared.bus import EventBus


def _models_dir(settings: AppSettings) -> Path:
    return Path(settings.models_dir)


class AppContainer(containers.DeclarativeContainer):
    settings = providers.Singleton(load_settings)
    logger = providers.Singleton(get_logger, "vision_overlay")
    event_bus = providers.Singleton(EventBus)

    #region Infrastructure
    model_store = providers.Singleton(ModelStore, models_dir=providers.Callable(_models_dir, settings))
    detector_factory = providers.Singleton(DefaultDetectorFactory, settings=settings, logger=logger)
    renderer = providers.Factory(OverlayRenderer)
    #endregion

    #region Application
    detection_session = providers.Factory(
        DetectionSession,
        detector_factory=detector_factory,
        renderer=renderer,
        event_bus=event_bus,
        logger=logger,
    )
    list_models = providers.Factory(ListModelsUseCase, store=model_store)
    load_model_labels = providers.Factory(LoadModelLabelsUseCase, store=model_store)
    #endregion


def create_container(settings: AppSettings | None = None, *, configure_logging: bool = True) -> AppContainer:
    container = AppContainer()
    if settings is not None:
        container.settings.override(providers.Object(settings))
    if configure_logging:
        setup_logging(container.settings().log_level)
    return container


__all__ = ["AppContainer", "create_container"]
