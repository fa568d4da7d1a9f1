"""Configuration system for azcfg.

Manages project configuration via .azcfg/config.toml with typed dataclasses
and sensible defaults for all values.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

import tomli_w

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from azcfg.exceptions import ConfigError

if TYPE_CHECKING:
    from pathlib import Path

_T = TypeVar("_T")

__all__ = [
    "AzcfgConfig",
    "DefaultsConfig",
    "GenerationConfig",
    "ProjectConfig",
    "default_config",
    "load_config",
    "save_config",
]

logger = logging.getLogger(__name__)


@dataclass
class ProjectConfig:
    """[project] section."""

    name: str = ""
    pack_root: str = ""


@dataclass
class GenerationConfig:
    """[generation] section."""

    backend: str = "script"
    python: str = "python3"
    script: str = "azrtos_pg.py"
    timeout_s: float = 600.0


@dataclass
class DefaultsConfig:
    """[defaults] section — values pre-filled into generation requests."""

    series: str = ""
    board: str = ""
    toolchain: str = "STM32CubeIDE"
    output_directory: str = "./output"
    xcube_firmware_directory: str = ""


@dataclass
class AzcfgConfig:
    """Root configuration combining all sections."""

    project: ProjectConfig = field(default_factory=ProjectConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)


_SECTIONS: dict[str, type] = {
    "project": ProjectConfig,
    "generation": GenerationConfig,
    "defaults": DefaultsConfig,
}


def default_config() -> AzcfgConfig:
    """Return a config with all default values."""
    return AzcfgConfig()


def _config_to_dict(config: AzcfgConfig) -> dict[str, object]:
    """Convert AzcfgConfig to a nested dict suitable for TOML serialization."""
    return {name: dict(vars(getattr(config, name))) for name in _SECTIONS}


def save_config(config: AzcfgConfig, path: Path) -> None:
    """Save configuration to a TOML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = _config_to_dict(config)
    try:
        with path.open("wb") as f:
            tomli_w.dump(data, f)
        logger.info("Saved config to %s", path)
    except OSError as e:
        logger.error("Failed to save config to %s: %s", path, e)
        raise ConfigError(f"Failed to save config to {path}: {e}") from e


def _load_section(cls: type[_T], data: dict[str, object]) -> _T:
    """Load a dataclass section from a dict, ignoring unknown keys."""
    known_fields = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
    filtered = {k: v for k, v in data.items() if k in known_fields}
    return cls(**filtered)


def load_config(path: Path) -> AzcfgConfig:
    """Load configuration from a TOML file.

    Missing sections or keys get default values.
    """
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        raw = path.read_bytes()
        data = tomllib.loads(raw.decode("utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        logger.error("Failed to load config from %s: %s", path, e)
        raise ConfigError(f"Failed to load config from {path}: {e}") from e

    config = AzcfgConfig()
    for name, cls in _SECTIONS.items():
        section = data.get(name)
        if isinstance(section, dict):
            setattr(config, name, _load_section(cls, section))

    if config.generation.timeout_s <= 0:
        raise ConfigError(
            f"generation.timeout_s must be > 0, got {config.generation.timeout_s}"
        )

    logger.info("Loaded config from %s", path)
    return config
