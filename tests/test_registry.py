"""Tests for azcfg.registry module — generation backend registry."""

from __future__ import annotations

import pytest

from azcfg.config import AzcfgConfig
from azcfg.exceptions import PluginError
from azcfg.registry import BackendInfo, BackendRegistry


class TestBackendRegistry:
    def test_register_and_create(self):
        registry = BackendRegistry()
        registry.register("mock", lambda cfg: "mock_backend")
        assert registry.create("mock", AzcfgConfig()) == "mock_backend"

    def test_create_unknown_raises(self):
        registry = BackendRegistry()
        registry.register("script", lambda cfg: "script")
        with pytest.raises(PluginError, match="Unknown backend 'cloud'. Available: script"):
            registry.create("cloud", AzcfgConfig())

    def test_empty_registry_lists_none(self):
        with pytest.raises(PluginError, match="Available: none"):
            BackendRegistry().create("script", AzcfgConfig())

    def test_duplicate_register_raises(self):
        registry = BackendRegistry()
        registry.register("script", lambda cfg: "first")
        with pytest.raises(PluginError, match="already registered"):
            registry.register("script", lambda cfg: "second")

    def test_names_sorted(self):
        registry = BackendRegistry()
        registry.register("script", lambda cfg: "script")
        registry.register("dry-run", lambda cfg: "dry-run")
        assert registry.names() == ["dry-run", "script"]

    def test_contains(self):
        registry = BackendRegistry()
        registry.register("script", lambda cfg: "script")
        assert "script" in registry
        assert "dry-run" not in registry

    def test_describe(self):
        registry = BackendRegistry()
        registry.register("script", lambda cfg: "script", "Run the generator")
        registry.register("dry-run", lambda cfg: "dry-run")
        assert registry.describe() == [
            BackendInfo("dry-run", ""),
            BackendInfo("script", "Run the generator"),
        ]

    def test_factory_receives_config(self):
        registry = BackendRegistry()
        received: list[AzcfgConfig] = []

        def factory(cfg: AzcfgConfig) -> str:
            received.append(cfg)
            return "created"

        registry.register("custom", factory)  # type: ignore[arg-type]
        config = AzcfgConfig()
        registry.create("custom", config)
        assert len(received) == 1
        assert received[0] is config


class TestLazyAutoDiscovery:
    """Registry auto-discovers built-in backends on first lookup."""

    def test_default_registry_has_builtin_backends(self):
        from azcfg.registry import default_registry

        assert "script" in default_registry
        assert "dry-run" in default_registry

    def test_create_triggers_auto_discovery(self):
        from azcfg.backend import DryRunBackend, ScriptBackend
        from azcfg.registry import default_registry

        assert isinstance(default_registry.create("dry-run", AzcfgConfig()), DryRunBackend)
        assert isinstance(default_registry.create("script", AzcfgConfig()), ScriptBackend)

    def test_auto_discover_false_does_not_import(self):
        registry = BackendRegistry(auto_discover=False)
        assert registry.names() == []
