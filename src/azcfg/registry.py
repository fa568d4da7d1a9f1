"""Generation backend registry.

Maps the ``[generation] backend`` config string to a factory building the
backend, e.g. ``default_registry.create("script", config)`` → ``ScriptBackend``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from azcfg.exceptions import PluginError

if TYPE_CHECKING:
    from collections.abc import Callable

    from azcfg.backend.base import GenerationBackend
    from azcfg.config import AzcfgConfig

    BackendFactory = Callable[[AzcfgConfig], GenerationBackend]

__all__ = ["BackendInfo", "BackendRegistry", "default_registry"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackendInfo:
    """A registered backend name and its one-line description."""

    name: str
    description: str = ""


class BackendRegistry:
    """Named factories for generation backends.

    With ``auto_discover=True`` the first lookup imports ``azcfg.backend``,
    which registers the built-in backends.

    Usage::

        registry = BackendRegistry()
        registry.register("script", ScriptBackend, "Run azrtos_pg.py")
        backend = registry.create("script", config)
    """

    def __init__(self, *, auto_discover: bool = False) -> None:
        self._factories: dict[str, BackendFactory] = {}
        self._descriptions: dict[str, str] = {}
        self._auto_discover = auto_discover
        self._discovered = False

    def register(self, name: str, factory: BackendFactory, description: str = "") -> None:
        """Register a backend factory under ``name``.

        Args:
            name: Value accepted by ``[generation] backend`` and ``--backend``.
            factory: Callable taking ``AzcfgConfig`` and returning a backend.
            description: Shown by ``azcfg backends``.

        Raises:
            PluginError: If ``name`` is already taken.
        """
        if name in self._factories:
            raise PluginError(f"Backend '{name}' is already registered")
        self._factories[name] = factory
        self._descriptions[name] = description
        logger.debug("Registered backend %s", name)

    def _ensure_discovered(self) -> None:
        if self._discovered or not self._auto_discover:
            return
        self._discovered = True
        import azcfg.backend  # noqa: F401 — registers the built-in backends

    def create(self, name: str, config: AzcfgConfig) -> GenerationBackend:
        """Build the backend registered as ``name``.

        Raises:
            PluginError: If no backend has that name.
        """
        self._ensure_discovered()
        factory = self._factories.get(name)
        if factory is None:
            raise PluginError(
                f"Unknown backend '{name}'. Available: {', '.join(self.names()) or 'none'}"
            )
        logger.info("Creating %s backend", name)
        return factory(config)

    def names(self) -> list[str]:
        self._ensure_discovered()
        return sorted(self._factories)

    def describe(self) -> list[BackendInfo]:
        """Registered backends with their descriptions, sorted by name."""
        return [BackendInfo(name, self._descriptions[name]) for name in self.names()]

    def __contains__(self, name: object) -> bool:
        self._ensure_discovered()
        return name in self._factories


default_registry = BackendRegistry(auto_discover=True)
