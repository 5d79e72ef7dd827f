"""Filesystem helpers shared across layers."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable


def resolve_against(root: Path, candidate: str | Path) -> Path:
    """Resolve ``candidate`` relative to ``root`` unless it is already absolute."""

    path = Path(candidate).expanduser()
    if not path.is_absolute():
        path = root / path
    return path.resolve()


def list_files_with_extensions(root: Path, extensions: Iterable[str]) -> list[Path]:
    """List files under ``root`` matching any extension in ``extensions``, sorted."""

    if not root.is_dir():
        return []
    wanted = {ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions}
    return [path for path in sorted(root.rglob("*")) if path.is_file() and path.suffix.lower() in wanted]


def ensure_path_first(paths: list[str], candidate: str | None) -> list[str]:
    """Move or insert ``candidate`` at the front of ``paths``."""

    if not candidate:
        return list(paths)
    return [candidate] + [path for path in paths if path != candidate]
