"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, dragctl.toml only contains
overrides. An empty file reproduces the stock three-board demo.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from dragctl.domain.seed import DEFAULT_BOARD_NAMES, DEFAULT_ITEMS_PER_BOARD
from dragctl.domain.selection import SeedMode


class BoardsConfig(BaseModel):
    """[boards] section — seed boards built when no board file is given."""

    model_config = {"frozen": True}

    names: list[str] = Field(default_factory=lambda: list(DEFAULT_BOARD_NAMES))
    items_per_board: int = Field(default=DEFAULT_ITEMS_PER_BOARD, ge=0)


class RulesConfig(BaseModel):
    """[rules] section."""

    model_config = {"frozen": True}

    forbidden_pairs: list[tuple[str, str]] = Field(default_factory=lambda: [("A", "C")])
    parity: bool = True


class SelectionConfig(BaseModel):
    """[selection] section."""

    model_config = {"frozen": True}

    clear_on_escape: bool = True
    seed_mode: SeedMode = SeedMode.IF_EMPTY


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str = ".dragctl/plugins"


class DragConfig(BaseModel):
    """Root configuration composing all dragctl.toml sections."""

    model_config = {"frozen": True}

    boards: BoardsConfig = Field(default_factory=BoardsConfig)
    rules: RulesConfig = Field(default_factory=RulesConfig)
    selection: SelectionConfig = Field(default_factory=SelectionConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
