"""Tests for the config plugin registry."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest

from ecsconf.compiler.plugins import DEFAULT_PLUGIN_NAMES, default_registry
from ecsconf.compiler.plugins.registry import PluginRegistry
from ecsconf.kernel.config.models import ConfigPlugin
from ecsconf.kernel.exceptions import PluginSetupError


class DummyPlugin:
    def __init__(self, declaration: ConfigPlugin) -> None:
        self.declaration = declaration

    def setup(self, context: Any, config: Any) -> None:
        pass


class OtherPlugin(DummyPlugin):
    pass


@pytest.fixture
def registry() -> PluginRegistry:
    return PluginRegistry(discover_entry_points=False)


class TestRegistration:
    def test_register_and_create(self, registry: PluginRegistry) -> None:
        registry.register("dummy", DummyPlugin)
        declaration = ConfigPlugin(name="dummy", config={"k": "v"})
        plugin = registry.create(declaration)
        assert isinstance(plugin, DummyPlugin)
        assert plugin.declaration is declaration

    def test_duplicate(self, registry: PluginRegistry) -> None:
        registry.register("dummy", DummyPlugin)
        with pytest.raises(ValueError):
            registry.register("DUMMY", OtherPlugin)

    def test_replace(self, registry: PluginRegistry) -> None:
        registry.register("dummy", DummyPlugin)
        registry.register("dummy", OtherPlugin, replace=True)
        assert isinstance(registry.create(ConfigPlugin(name="dummy")), OtherPlugin)

    def test_case_insensitive(self, registry: PluginRegistry) -> None:
        registry.register("TFState", DummyPlugin)
        assert registry.names() == ["tfstate"]
        assert isinstance(registry.create(ConfigPlugin(name="tfstate")), DummyPlugin)

    def test_unregister(self, registry: PluginRegistry) -> None:
        registry.register("dummy", DummyPlugin)
        registry.unregister("Dummy")
        registry.unregister("never-registered")
        assert registry.names() == []

    def test_unknown(self, registry: PluginRegistry) -> None:
        with pytest.raises(PluginSetupError) as exc_info:
            registry.create(ConfigPlugin(name="tfstate"))
        assert exc_info.value.plugin == "tfstate"

    def test_copy_is_independent(self, registry: PluginRegistry) -> None:
        registry.register("dummy", DummyPlugin)
        clone = registry.copy()
        clone.register("other", OtherPlugin)
        assert registry.names() == ["dummy"]
        assert clone.names() == ["dummy", "other"]


class TestEntryPoints:
    def _entry_point(self, name: str, target: Any) -> SimpleNamespace:
        def load() -> Any:
            if isinstance(target, Exception):
                raise target
            return target

        return SimpleNamespace(name=name, value=f"pkg:{name}", load=load)

    def test_discovered_lazily(self, monkeypatch: pytest.MonkeyPatch) -> None:
        groups: list[str] = []

        def fake_entry_points(group: str) -> list[SimpleNamespace]:
            groups.append(group)
            return [self._entry_point("tfstate", DummyPlugin)]

        monkeypatch.setattr("ecsconf.compiler.plugins.registry.entry_points", fake_entry_points)
        registry = PluginRegistry()
        registry.register("ssm", OtherPlugin)

        registry.create(ConfigPlugin(name="ssm"))
        assert groups == []

        plugin = registry.create(ConfigPlugin(name="tfstate"))
        assert isinstance(plugin, DummyPlugin)
        assert groups == ["ecsconf.plugins"]

        registry.create(ConfigPlugin(name="tfstate"))
        assert groups == ["ecsconf.plugins"]

    def test_registered_names_win(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            "ecsconf.compiler.plugins.registry.entry_points",
            lambda group: [
                self._entry_point("ssm", DummyPlugin),
                self._entry_point("extra", DummyPlugin),
            ],
        )
        registry = PluginRegistry()
        registry.register("ssm", OtherPlugin)
        registry.create(ConfigPlugin(name="extra"))
        assert isinstance(registry.create(ConfigPlugin(name="ssm")), OtherPlugin)

    def test_broken_entry_point(
        self, monkeypatch: pytest.MonkeyPatch, log_capture: list[dict[str, Any]]
    ) -> None:
        monkeypatch.setattr(
            "ecsconf.compiler.plugins.registry.entry_points",
            lambda group: [self._entry_point("tfstate", ImportError("no module named tfstate"))],
        )
        registry = PluginRegistry()
        with pytest.raises(PluginSetupError):
            registry.create(ConfigPlugin(name="tfstate"))
        assert any(r["level"] == "WARNING" and "tfstate" in r["message"] for r in log_capture)


class TestDefaultRegistry:
    def test_builtins(self) -> None:
        registry = default_registry()
        assert set(DEFAULT_PLUGIN_NAMES) <= set(registry.names())
        assert "cloudformation" in registry.names()

    def test_fresh_instances(self) -> None:
        first = default_registry()
        first.unregister("ssm")
        assert "ssm" in default_registry().names()
