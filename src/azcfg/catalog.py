"""Catalog of a PACK_AZRTOS_AutoGen project tree.

Answers the lookups a configurator needs before generating anything:
which series, boards, middleware and applications exist, and which
``.j2`` templates belong to an application. Data comes from the JSON
descriptions under ``apps/json``::

    apps/json/h7.json          {"serie": [{"boards": ["NUCLEO-H723ZG", ...]}]}
    apps/json/NUCLEO-H723ZG.json
                               {"board": [{"apps": ["Tx_Thread_Creation", ...],
                                           "apps_details": [{"name": ..., ...}]}]}

Middleware is inferred from application name prefixes (``Tx_`` → ThreadX).
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from azcfg.exceptions import CatalogError

if TYPE_CHECKING:
    from pathlib import Path

__all__ = [
    "MIDDLEWARE_PREFIXES",
    "REQUIRED_PATHS",
    "ApplicationDetails",
    "CatalogSummary",
    "ProjectCatalog",
    "middleware_for_app",
]

logger = logging.getLogger(__name__)

REQUIRED_PATHS = (
    "apps/FileX",
    "apps/NetXDuo",
    "apps/ThreadX",
    "apps/USBX",
    "apps/json",
    "apps/templates",
    "pack",
    "azrtos_pg.py",
)

MIDDLEWARE_PREFIXES: dict[str, str] = {
    "ThreadX": "Tx_",
    "FileX": "Fx_",
    "NetXDuo": "Nx_",
    "USBX": "Ux_",
}

# Series files are lowercase letters plus digits (f4.json, h7.json); h7rs.json and
# every other JSON file describes a board
_SERIES_FILE_RE = re.compile(r"^([a-z]+\d*)\.json$")

_NON_MIDDLEWARE_DIRS = frozenset({"json", "templates"})


@dataclass(frozen=True)
class ApplicationDetails:
    """Description of one board application."""

    name: str
    description: str
    features: tuple[str, ...] = ()
    requirements: tuple[str, ...] = ()


@dataclass(frozen=True)
class CatalogSummary:
    """Everything the catalog knows, sorted for display."""

    series: tuple[str, ...] = ()
    boards: tuple[str, ...] = ()
    middleware: tuple[str, ...] = ()
    applications: tuple[str, ...] = ()
    missing_paths: tuple[str, ...] = ()


def middleware_for_app(app: str) -> str:
    """Middleware owning ``app`` by name prefix, or ``""`` if none."""
    for middleware, prefix in MIDDLEWARE_PREFIXES.items():
        if app.startswith(prefix):
            return middleware
    return ""


class ProjectCatalog:
    """Read-only view over an AutoGen project directory.

    JSON files are parsed lazily and cached; create a new catalog to see
    changes on disk.
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self._json_cache: dict[str, Any] = {}

    @property
    def json_dir(self) -> Path:
        return self.root / "apps" / "json"

    def missing_paths(self) -> list[str]:
        """Required entries absent from the tree (empty when valid)."""
        return [p for p in REQUIRED_PATHS if not (self.root / p).exists()]

    def validate(self) -> None:
        """Raise CatalogError if the tree is not a complete AutoGen project."""
        missing = self.missing_paths()
        if missing:
            raise CatalogError(
                f"{self.root} is not an AutoGen project, missing: {', '.join(missing)}"
            )

    def series(self) -> list[str]:
        return sorted(
            m.group(1) for p in self._json_files() if (m := _SERIES_FILE_RE.match(p.name))
        )

    def board_names(self) -> list[str]:
        return sorted(p.stem for p in self._json_files() if not _SERIES_FILE_RE.match(p.name))

    def boards_for_series(self, series: str) -> list[str]:
        """Boards listed by ``<series>.json``, else every known board."""
        data = self._load_json(f"{series}.json")
        if data is not None:
            boards = _first(data, "serie").get("boards")
            if isinstance(boards, list):
                return [str(b) for b in boards]
        return self.board_names()

    def applications_for_board(self, board: str) -> list[str]:
        data = self._load_json(f"{board}.json")
        if data is None:
            return []
        apps = _first(data, "board").get("apps", [])
        return [str(a) for a in apps] if isinstance(apps, list) else []

    def middleware_for_board(self, board: str) -> list[str]:
        found = {middleware_for_app(app) for app in self.applications_for_board(board)}
        found.discard("")
        return sorted(found)

    def applications_for_middleware(self, board: str, middleware: str) -> list[str]:
        prefix = MIDDLEWARE_PREFIXES.get(middleware)
        if prefix is None:
            return []
        return sorted(a for a in self.applications_for_board(board) if a.startswith(prefix))

    def application_details(self, board: str, application: str) -> ApplicationDetails:
        """Details from ``apps_details``, with generic fallbacks."""
        data = self._load_json(f"{board}.json")
        if data is not None:
            details = _first(data, "board").get("apps_details", [])
            for entry in details if isinstance(details, list) else []:
                if isinstance(entry, dict) and entry.get("name") == application:
                    return ApplicationDetails(
                        name=application,
                        description=entry.get("description")
                        or f"{application} application for {board}",
                        features=tuple(entry.get("features") or ()),
                        requirements=tuple(entry.get("requirements") or ()),
                    )
        return ApplicationDetails(
            name=application,
            description=f"{application} application for {board}",
            requirements=(board,),
        )

    def template_files(self, middleware: str, application: str) -> list[Path]:
        """``.j2`` templates under ``apps/<middleware>`` for one application."""
        base = self.root / "apps" / middleware
        if not base.is_dir():
            return []
        return sorted(
            p
            for p in base.rglob("*.j2")
            if p.is_file() and application in p.relative_to(self.root).as_posix()
        )

    def summary(self) -> CatalogSummary:
        middleware: set[str] = set()
        applications: set[str] = set()
        boards = self.board_names()
        for board in boards:
            for app in self.applications_for_board(board):
                applications.add(app)
                if mw := middleware_for_app(app):
                    middleware.add(mw)

        apps_dir = self.root / "apps"
        if apps_dir.is_dir():
            for child in apps_dir.iterdir():
                if child.name in _NON_MIDDLEWARE_DIRS or not child.is_dir():
                    continue
                if any(child.iterdir()):
                    middleware.add(child.name)

        return CatalogSummary(
            series=tuple(self.series()),
            boards=tuple(boards),
            middleware=tuple(sorted(middleware)),
            applications=tuple(sorted(applications)),
            missing_paths=tuple(self.missing_paths()),
        )

    def _json_files(self) -> list[Path]:
        if not self.json_dir.is_dir():
            return []
        return [p for p in self.json_dir.iterdir() if p.is_file() and p.suffix == ".json"]

    def _load_json(self, name: str) -> Any:
        """Parsed ``apps/json/<name>``, or None if the file does not exist.

        Raises:
            CatalogError: If the file exists but is not valid JSON.
        """
        if name in self._json_cache:
            return self._json_cache[name]
        path = self.json_dir / name
        if not path.is_file():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error("Failed to read %s: %s", path, e)
            raise CatalogError(f"Failed to read {path}: {e}") from e
        self._json_cache[name] = data
        return data


def _first(data: Any, key: str) -> dict[str, Any]:
    """``data[key][0]`` when it is a dict, else an empty dict."""
    if isinstance(data, dict):
        items = data.get(key)
        if isinstance(items, list) and items and isinstance(items[0], dict):
            return items[0]
    return {}
