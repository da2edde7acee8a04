from __future__ import annotations

from pathlib import Path

import pytest

from report_toolkit.adapters import PluginLoader, PluginLoadError
from report_toolkit.registry import Registry

PLUGIN_SOURCE = '''
from report_toolkit.inspection import RuleDefinition


class HostInspector:
    def __init__(self, config=None):
        self.expected = (config or {}).get("expected", "build-01")

    def next(self, context):
        host = context["header"].get("host")
        if host != self.expected:
            return {"message": f"unexpected host {host}", "severity": "warning"}
        return None

    def complete(self):
        return None


class stack_depth:
    id = "stack-depth"
    input_types = ("report",)
    output_type = "object"
    meta = {"docs": {"description": "Count stack frames"}}

    @staticmethod
    def transform(options):
        def stage(upstream):
            for report in upstream:
                yield {"depth": len(report["javascriptStack"]["stack"])}
        return stage


rules = [RuleDefinition(id="host-check", inspect=HostInspector)]
transformers = [stack_depth]
configs = {"host-plugin:strict": {"rules": {"host-check": {"expected": "prod-01"}}}}
'''


def write_plugin(tmp_path: Path) -> Path:
    path = tmp_path / "host_plugin.py"
    path.write_text(PLUGIN_SOURCE, encoding="utf-8")
    return path


def snapshot(registry: Registry) -> tuple:
    return (
        [rule.id for rule in registry.rules],
        [transformer.id for transformer in registry.transformers],
        sorted(registry.presets),
        [(plugin.id, plugin.rules, plugin.transformers, plugin.presets) for plugin in registry.plugins],
    )


def test_use_registers_plugin_exports(tmp_path: Path) -> None:
    registry = Registry()
    plugin_path = str(write_plugin(tmp_path))

    plugin = PluginLoader(registry).use(plugin_path)

    assert plugin.rules == ["host-check"]
    assert plugin.transformers == ["stack-depth"]
    assert plugin.presets == ["host-plugin:strict"]
    assert registry.transformer("stack-depth").description == "Count stack frames"
    assert registry.is_plugin_registered(plugin_path)


def test_use_twice_is_idempotent(tmp_path: Path) -> None:
    registry = Registry()
    loader = PluginLoader(registry)
    plugin_path = str(write_plugin(tmp_path))

    loader.use(plugin_path)
    once = snapshot(registry)
    loader.use(plugin_path)

    assert snapshot(registry) == once


def test_deregister_plugin_removes_exports(tmp_path: Path) -> None:
    registry = Registry()
    plugin_path = str(write_plugin(tmp_path))
    PluginLoader(registry).use(plugin_path)

    registry.deregister_plugins([plugin_path])

    assert registry.rules == []
    assert registry.transformers == []
    assert registry.presets == {}


def test_unknown_module_raises() -> None:
    with pytest.raises(PluginLoadError):
        PluginLoader(Registry()).use("report_toolkit_no_such_plugin")


def test_missing_plugin_file_raises(tmp_path: Path) -> None:
    with pytest.raises(PluginLoadError):
        PluginLoader(Registry()).use(str(tmp_path / "absent.py"))


def test_plugin_with_invalid_rule_raises(tmp_path: Path) -> None:
    path = tmp_path / "bad_plugin.py"
    path.write_text("rules = [object()]\n", encoding="utf-8")

    with pytest.raises(PluginLoadError):
        PluginLoader(Registry()).use(str(path))
