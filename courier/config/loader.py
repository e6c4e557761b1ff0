"""TOML layers behind `Settings`.

Two layers are read, lowest precedence first:

    config/default.toml         required
    config/{COURIER_ENV}.toml   optional

Environment variables and constructor arguments are applied on top by
pydantic-settings, not here.
"""

import os
import tomllib
from dataclasses import dataclass
from functools import reduce
from pathlib import Path
from typing import Any

CONFIG_DIR_VAR = "COURIER_CONFIG_DIR"
ENVIRONMENT_VAR = "COURIER_ENV"
DEFAULT_ENVIRONMENT = "development"

# How many parent directories are searched for a config/ directory.
SEARCH_DEPTH = 5


def get_config_dir() -> Path:
    """Directory holding the TOML layers.

    COURIER_CONFIG_DIR wins and must exist. Otherwise the nearest `config/`
    in the working directory or its parents is used.
    """
    explicit = os.environ.get(CONFIG_DIR_VAR)
    if explicit:
        path = Path(explicit)
        if not path.exists():
            raise FileNotFoundError(f"Config directory not found: {explicit}")
        return path

    cwd = Path.cwd()
    for candidate in [cwd, *cwd.parents][:SEARCH_DEPTH]:
        if (candidate / "config").exists():
            return candidate / "config"
    return Path("config")


def get_environment() -> str:
    return os.environ.get(ENVIRONMENT_VAR, DEFAULT_ENVIRONMENT)


def load_toml(file_path: Path) -> dict[str, Any]:
    """Parse one TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")
    return tomllib.loads(file_path.read_text(encoding="utf-8"))


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge `override` into a copy of `base`; tables merge, values replace."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


@dataclass(frozen=True)
class ConfigLayers:
    """The TOML files that make up one environment's configuration."""

    directory: Path
    environment: str

    @classmethod
    def discover(cls) -> "ConfigLayers":
        return cls(directory=get_config_dir(), environment=get_environment())

    @property
    def default_file(self) -> Path:
        return self.directory / "default.toml"

    @property
    def environment_file(self) -> Path:
        return self.directory / f"{self.environment}.toml"

    def files(self) -> list[Path]:
        """Existing layer files in merge order."""
        if not self.default_file.exists():
            raise FileNotFoundError(
                f"Default configuration file not found: {self.default_file}. "
                f"Create config/default.toml or set {CONFIG_DIR_VAR}."
            )
        layers = [self.default_file]
        if self.environment_file.exists() and self.environment_file != self.default_file:
            layers.append(self.environment_file)
        return layers

    def load(self) -> dict[str, Any]:
        return reduce(deep_merge, (load_toml(path) for path in self.files()), {})


def load_config(layers: ConfigLayers | None = None) -> dict[str, Any]:
    """Merged configuration of the discovered (or given) layers."""
    return (layers or ConfigLayers.discover()).load()
