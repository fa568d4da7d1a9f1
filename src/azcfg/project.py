"""Project manager for azcfg.

Handles project initialization, status reporting, and project root discovery.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from azcfg.config import AzcfgConfig, default_config, load_config, save_config
from azcfg.manifest import Manifest, compute_hash, load_manifest, save_manifest

__all__ = [
    "AZCFG_DIR",
    "CONFIG_FILE",
    "MANIFEST_FILE",
    "ProjectManager",
    "ProjectStatus",
]

logger = logging.getLogger(__name__)

AZCFG_DIR = ".azcfg"
CONFIG_FILE = "config.toml"
MANIFEST_FILE = "manifest.json"

# Marks a directory as a PACK_AZRTOS_AutoGen checkout.
_GENERATOR_SCRIPT = "azrtos_pg.py"


@dataclass
class ProjectStatus:
    """Summary of the current project state."""

    initialized: bool
    root: Path
    file_count: int
    modified_section_count: int
    config: AzcfgConfig | None
    drifted: list[str] = field(default_factory=list)


class ProjectManager:
    """Manages azcfg project lifecycle."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root or Path.cwd()

    @property
    def azcfg_dir(self) -> Path:
        return self.root / AZCFG_DIR

    @property
    def config_path(self) -> Path:
        return self.azcfg_dir / CONFIG_FILE

    @property
    def manifest_path(self) -> Path:
        return self.azcfg_dir / MANIFEST_FILE

    @property
    def is_initialized(self) -> bool:
        return (
            self.azcfg_dir.is_dir() and self.config_path.exists() and self.manifest_path.exists()
        )

    def init(
        self,
        pack_root: str = "",
        series: str = "",
        board: str = "",
        name: str = "",
    ) -> Path:
        """Initialize a new azcfg project.

        Creates the .azcfg/ directory, default config, and empty manifest.
        Safe to call on an already-initialized project (idempotent).

        Returns the .azcfg/ directory path.
        """
        self.azcfg_dir.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            config = load_config(self.config_path)
            logger.info("Existing config found at %s", self.config_path)
        else:
            config = default_config()

        if pack_root:
            config.project.pack_root = pack_root
        elif not config.project.pack_root and (self.root / _GENERATOR_SCRIPT).is_file():
            config.project.pack_root = "."
            logger.info("Detected %s, using project root as pack root", _GENERATOR_SCRIPT)
        if series:
            config.defaults.series = series
        if board:
            config.defaults.board = board
        if name:
            config.project.name = name
        elif not config.project.name:
            config.project.name = self.root.name

        save_config(config, self.config_path)

        if not self.manifest_path.exists():
            save_manifest(Manifest(), self.manifest_path)

        logger.info("Initialized azcfg project at %s", self.azcfg_dir)
        return self.azcfg_dir

    def resolve_pack_root(self, config: AzcfgConfig) -> Path:
        """Absolute path of the AutoGen tree named by ``[project] pack_root``."""
        pack_root = Path(config.project.pack_root or ".")
        return pack_root if pack_root.is_absolute() else (self.root / pack_root).resolve()

    def status(self) -> ProjectStatus:
        """Get current project status."""
        if not self.is_initialized:
            return ProjectStatus(
                initialized=False,
                root=self.root,
                file_count=0,
                modified_section_count=0,
                config=None,
            )

        config = load_config(self.config_path)
        manifest = load_manifest(self.manifest_path)

        drifted: list[str] = []
        for entry in manifest.files:
            path = Path(entry.path)
            if path.is_file() and manifest.has_drifted(entry.id, compute_hash(path)):
                drifted.append(entry.path)

        return ProjectStatus(
            initialized=True,
            root=self.root,
            file_count=len(manifest.files),
            modified_section_count=sum(len(f.modified_sections) for f in manifest.files),
            config=config,
            drifted=drifted,
        )

    @staticmethod
    def find_project_root(start: Path | None = None) -> Path | None:
        """Walk up from start directory to find a .azcfg/ directory.

        Returns the project root (parent of .azcfg/) or None if not found.
        """
        current = (start or Path.cwd()).resolve()
        while True:
            if (current / AZCFG_DIR).is_dir():
                return current
            parent = current.parent
            if parent == current:
                return None
            current = parent
