"""Configuration management for ttywho."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from ttywho.association import DEFAULT_CONTAINER_PREFIXES
from ttywho.processes import DEFAULT_PROC_ROOT
from ttywho.terminals import DEFAULT_DEV_ROOT, DEFAULT_TTY_PATTERNS

CONFIG_ENV_VAR = "TTYWHO_CONFIG"
CONFIG_FILE = Path.home() / ".config" / "ttywho" / "config.yaml"


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or validated."""


class TtywhoConfig(BaseModel):
    """Root configuration model."""

    proc_root: str = DEFAULT_PROC_ROOT
    dev_root: str = DEFAULT_DEV_ROOT
    tty_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_TTY_PATTERNS))
    container_prefixes: list[str] = Field(default_factory=lambda: list(DEFAULT_CONTAINER_PREFIXES))
    extra_container_prefixes: list[str] = Field(default_factory=list)  # appended, e.g. "-fish"
    palette: list[str] = Field(default_factory=lambda: ["green", "yellow", "magenta", "cyan"], min_length=1)
    fallback_width: int = Field(default=80, gt=0)

    @property
    def all_container_prefixes(self) -> tuple[str, ...]:
        """Configured container prefixes followed by the extra ones."""
        return tuple(self.container_prefixes) + tuple(self.extra_container_prefixes)


def config_path() -> Path:
    """Path of the config file, honouring the TTYWHO_CONFIG override."""
    override = os.environ.get(CONFIG_ENV_VAR)
    return Path(override).expanduser() if override else CONFIG_FILE


def load_config(path: Path | None = None) -> TtywhoConfig:
    """
    Load configuration from YAML, falling back to defaults for a missing file.

    Raises:
        ConfigError: the file is unreadable, not YAML, or fails validation.
    """
    path = path or config_path()
    if not path.exists():
        return TtywhoConfig()

    try:
        with open(path) as f:
            raw: Any = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")

    try:
        return TtywhoConfig(**raw)
    except ValidationError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
