from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from ..crosscutting.config import AppSettings, load_settings
from ..domain.detector import DetectorKind
from ..domain.geometry import ViewRect
from ..shared.paths import resolve_against
from ..shared.validation import ValidationError, ensure_positive_float, parse_view_size


@dataclass(frozen=True)
class CliConfig:
    command: str
    settings: AppSettings
    image_path: Path | None = None
    detector: DetectorKind | None = None
    view_rect: ViewRect | None = None
    output_path: Path | None = None
    custom_model_path: Path | None = None


class ArgConfigLoader:
    def __init__(self, base_dir: Path | None = None) -> None:
        self._base_dir = base_dir or Path.cwd()

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(prog="vision-overlay", description="Run vision detectors and map their features onto a view")
        parser.add_argument("--models-dir", default=None)
        parser.add_argument("--device", choices=("cpu", "cuda"), default=None)
        parser.add_argument("--log-level", default=None)
        commands = parser.add_subparsers(dest="command", required=True)

        detect = commands.add_parser("detect", help="Run one detector over an image")
        detect.add_argument("image", nargs="?", default=None, help="Image file; defaults to the configured default image")
        detect.add_argument(
            "--detector",
            "-d",
            choices=[kind.value for kind in DetectorKind],
            default=DetectorKind.FACE.value,
        )
        detect.add_argument("--view", default=None, help="View size as WIDTHxHEIGHT; defaults to the image size")
        detect.add_argument("--view-width", default=None)
        detect.add_argument("--view-height", default=None)
        detect.add_argument("--custom-model", default=None, help="Custom model used by the custom_model detector")
        detect.add_argument("--output", "-o", default=None, help="Write the rendered overlay to this PNG file")

        commands.add_parser("detectors", help="List the available detectors")
        commands.add_parser("models", help="List custom models in the models directory")
        labels = commands.add_parser("labels", help="List the class names a model was trained on")
        labels.add_argument("model", help="Model file, such as models/best.pt")
        return parser

    def parse(self, argv: Sequence[str] | None = None) -> CliConfig:
        parser = self.build_parser()
        args = parser.parse_args(argv)

        overrides = {}
        if args.models_dir:
            overrides["models_dir"] = str(resolve_against(self._base_dir, args.models_dir))
        if args.device:
            overrides["device"] = args.device
        if args.log_level:
            overrides["log_level"] = args.log_level
        settings = load_settings(**overrides)

        if args.command == "labels":
            return CliConfig(command="labels", settings=settings, custom_model_path=resolve_against(self._base_dir, args.model))
        if args.command != "detect":
            return CliConfig(command=args.command, settings=settings)

        image = args.image or settings.default_image_path
        if not image:
            parser.error("an image path is required when no default image is configured")
        try:
            view_rect = self._view_rect(args)
        except ValidationError as exc:
            parser.error(str(exc))
        return CliConfig(
            command="detect",
            settings=settings,
            image_path=resolve_against(self._base_dir, image),
            detector=DetectorKind(args.detector),
            view_rect=view_rect,
            output_path=resolve_against(self._base_dir, args.output) if args.output else None,
            custom_model_path=resolve_against(self._base_dir, args.custom_model) if args.custom_model else None,
        )

    @staticmethod
    def _view_rect(args: argparse.Namespace) -> ViewRect | None:
        if args.view:
            width, height = parse_view_size(args.view)
            return ViewRect(0.0, 0.0, width, height)
        if args.view_width is None and args.view_height is None:
            return None
        if args.view_width is None or args.view_height is None:
            raise ValidationError("--view-width and --view-height must be given together")
        return ViewRect(
            0.0,
            0.0,
            ensure_positive_float(args.view_width, "View width"),
            ensure_positive_float(args.view_height, "View height"),
        )
