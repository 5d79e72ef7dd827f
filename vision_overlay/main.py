from __future__ import annotations

import asyncio
import sys
from typing import TextIO

from .app.container import create_container
from .domain.detector import DetectorKind
from .infrastructure.config_loader import ArgConfigLoader, CliConfig
from .infrastructure.image_source import encode_png, load_image_file
from .shared.errors import InfrastructureError


def run_detect(config: CliConfig, out: TextIO) -> int:
    container = create_container(config.settings)
    logger = container.logger()
    try:
        session = container.detection_session()
        image = load_image_file(config.image_path)
    except ValueError as exc:
        logger.error("detect.rejected", path=str(config.image_path), error=str(exc))
        print(str(exc), file=sys.stderr)
        return 2

    session.select_image(image)
    if config.custom_model_path is not None:
        session.switch_model(str(config.custom_model_path))
    if config.view_rect is not None:
        session.set_view_rect(config.view_rect)
    report = asyncio.run(session.run(config.detector))

    if report.message:
        print(report.message.rstrip("\n"), file=out)
    for item in report.mapped:
        if item.rect is None:
            continue
        x, y, width, height = item.rect.as_tuple()
        caption = item.feature.caption or ""
        print(f"{x:.1f}\t{y:.1f}\t{width:.1f}\t{height:.1f}\t{caption}", file=out)

    if config.output_path is not None:
        try:
            config.output_path.write_bytes(encode_png(session.render()))
        except OSError as exc:
            logger.error("overlay.unwritable", path=str(config.output_path), error=str(exc))
            print(f"Unable to write {config.output_path}: {exc.strerror or exc}", file=sys.stderr)
            return 2
        logger.info("overlay.written", path=str(config.output_path), overlays=len(session.renderer.overlays))
    return 0 if report.succeeded else 1


def run_detectors(out: TextIO) -> int:
    for kind in DetectorKind:
        print(f"{kind.value}\t{kind.title}", file=out)
    return 0


def run_models(config: CliConfig, out: TextIO) -> int:
    container = create_container(config.settings)
    for model in container.list_models().execute(ensure=config.settings.custom_model_path):
        print(model, file=out)
    return 0


def run_labels(config: CliConfig, out: TextIO) -> int:
    container = create_container(config.settings)
    try:
        labels = container.load_model_labels().execute(str(config.custom_model_path))
    except InfrastructureError as exc:
        container.logger().error("labels.unavailable", path=str(config.custom_model_path), error=str(exc))
        print(str(exc), file=sys.stderr)
        return 2
    for index, label in enumerate(labels):
        print(f"{index}\t{label}", file=out)
    return 0


def main(argv: list[str] | None = None, out: TextIO | None = None) -> int:
    out = out or sys.stdout
    config = ArgConfigLoader().parse(argv)
    if config.command == "detect":
        return run_detect(config, out)
    if config.command == "detectors":
        return run_detectors(out)
    if config.command == "labels":
        return run_labels(config, out)
    return run_models(config, out)


if __name__ == "__main__":  # pragma: no cover - manual execution entry point
    raise SystemExit(main(sys.argv[1:]))
