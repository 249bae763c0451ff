"""Locate and read the dragctl config file.

Lookup order: the ``DRAGCTL_CONFIG`` env var, then a walk up from the
working directory. In each directory ``dragctl.toml`` wins over
``.dragctl.toml``, which wins over a ``pyproject.toml`` carrying a
``[tool.dragctl]`` table.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from dragctl.config.models import DragConfig

CONFIG_FILENAME = "dragctl.toml"
HIDDEN_CONFIG_FILENAME = ".dragctl.toml"
PYPROJECT_FILENAME = "pyproject.toml"
CONFIG_ENV_VAR = "DRAGCTL_CONFIG"


class ConfigError(ValueError):
    """A config file exists but cannot be used."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Invalid config {path}: {reason}")
        self.path = path


def _candidate(directory: Path) -> Path | None:
    for name in (CONFIG_FILENAME, HIDDEN_CONFIG_FILENAME):
        path = directory / name
        if path.is_file():
            return path
    pyproject = directory / PYPROJECT_FILENAME
    if pyproject.is_file() and _has_tool_table(pyproject):
        return pyproject
    return None


def _has_tool_table(pyproject: Path) -> bool:
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError:
        return False
    return isinstance(data.get("tool", {}).get("dragctl"), dict)


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file in effect for *start* (default: cwd), or None.

    A ``DRAGCTL_CONFIG`` pointing at a missing file disables discovery.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        found = _candidate(directory)
        if found is not None:
            return found
    return None


def read_config(path: Path) -> dict[str, Any]:
    """Raw config table from *path*.

    For ``pyproject.toml`` this is the ``[tool.dragctl]`` table.
    Raises ConfigError on malformed TOML.
    """
    try:
        data: dict[str, Any] = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(path, str(exc)) from exc
    if path.name == PYPROJECT_FILENAME:
        return dict(data.get("tool", {}).get("dragctl", {}))
    return data


def validate_config(path: Path, data: dict[str, Any]) -> DragConfig:
    """Check the section tables of *data* (read from *path*).

    Raises ConfigError naming the file when a section is malformed.
    """
    try:
        return DragConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(path, str(exc)) from exc
