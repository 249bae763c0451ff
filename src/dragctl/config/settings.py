"""DragSettings: CLI flags, ``DRAGCTL_*`` env vars and the config file.

Precedence, highest first: CLI flags, env vars (``__`` separates nested
keys, e.g. ``DRAGCTL_RULES__PARITY=false``), the config file, code
defaults from :mod:`dragctl.config.models`.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from dragctl.config.discovery import ConfigError, find_config, read_config, validate_config
from dragctl.config.models import BoardsConfig, PluginsConfig, RulesConfig, SelectionConfig

# The config file for the DragSettings being built right now. pydantic
# constructs sources inside __init__, so the path cannot be an argument.
_active_config: ContextVar[Path | None] = ContextVar("dragctl_active_config", default=None)


@contextmanager
def _reading(path: Path | None) -> Iterator[None]:
    token = _active_config.set(path)
    try:
        yield
    finally:
        _active_config.reset(token)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Values from the config file, checked against the section models."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path is None or not toml_path.is_file():
            return
        try:
            self._data = read_config(toml_path)
            validate_config(toml_path, self._data)
        except ConfigError as exc:
            raise click.ClickException(str(exc)) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


class DragSettings(BaseSettings):
    """Everything a dragctl run is configured by, frozen.

    ``project_root`` is the directory of the config file in effect (the
    working directory when there is none); relative paths such as the
    local plugin directory resolve against it.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "DRAGCTL_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    no_plugins: bool = False

    boards: BoardsConfig = Field(default_factory=BoardsConfig)
    rules: RulesConfig = Field(default_factory=RulesConfig)
    selection: SelectionConfig = Field(default_factory=SelectionConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml = TomlSettingsSource(settings_cls, _active_config.get())
        return init_settings, env_settings, toml

    @property
    def plugin_dir(self) -> Path:
        local = Path(self.plugins.local_dir)
        return local if local.is_absolute() else self.project_root / local

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> DragSettings:
        """Settings for one invocation.

        An explicit *config_path* must exist; otherwise the config file is
        discovered from *project_root* (or the working directory).
        """
        if config_path:
            toml_path: Path | None = Path(config_path)
            if not toml_path.is_file():
                raise click.ClickException(f"Config file not found: {config_path}")
        else:
            toml_path = find_config(project_root)

        if project_root is None:
            project_root = toml_path.parent if toml_path else Path.cwd()

        with _reading(toml_path):
            return cls(project_root=project_root, config_path=toml_path, **cli_flags)
