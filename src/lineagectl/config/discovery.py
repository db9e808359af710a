"""Locate and read ``lineagectl.toml``.

Lookup order: the ``LINEAGECTL_CONFIG`` env var, then a walk up from the
starting directory. Each directory may hold ``lineagectl.toml`` or the
hidden ``.lineagectl.toml``; the visible name wins when both exist.
The ``--config`` flag bypasses discovery entirely (see settings).
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import click

from lineagectl.config.models import LineageConfig

CONFIG_FILENAME = "lineagectl.toml"
CONFIG_FILENAMES = (CONFIG_FILENAME, ".lineagectl.toml")
CONFIG_ENV_VAR = "LINEAGECTL_CONFIG"


def _candidates(start: Path) -> Iterator[Path]:
    for directory in (start, *start.parents):
        for name in CONFIG_FILENAMES:
            yield directory / name


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file in effect for *start* (default: cwd), if any.

    A ``LINEAGECTL_CONFIG`` naming a missing file disables discovery and
    yields None rather than silently picking up another file.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        pinned = Path(env_path)
        return pinned if pinned.is_file() else None

    return next(
        (c for c in _candidates((start or Path.cwd()).resolve()) if c.is_file()),
        None,
    )


def read_toml(path: Path) -> dict[str, Any]:
    """Parse *path*; malformed TOML is reported as a ClickException."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise click.ClickException(f"Invalid TOML in {path}: {exc}") from exc


def load_config(path: Path | None = None, cwd: Path | None = None) -> LineageConfig:
    """Layout, search and view sections from *path*, or from discovery.

    Sections and keys missing from the file keep their code defaults.
    """
    path = path or find_config(cwd)
    if path is None:
        return LineageConfig()
    return LineageConfig.model_validate(read_toml(path))
