"""Load plugin modules and register the rules, transformers and presets they export."""

from __future__ import annotations

import hashlib
import importlib
import importlib.util
from pathlib import Path
from types import ModuleType
from typing import Any, Mapping

import structlog

from ..errors import PluginLoadError, ReportToolkitError
from ..inspection.rule import RuleDefinition
from ..registry import Plugin, Registry
from ..transformers.base import Transformer

logger = structlog.get_logger(__name__)


class PluginLoader:
    """Resolve a plugin id to a module and register its exports.

    A plugin id is either an importable dotted module name or a path to a
    ``.py`` file. The module may define ``rules`` and ``transformers``
    (iterables of definitions or objects implementing the contracts) and
    ``configs`` (a mapping of preset name to raw config).
    """

    def __init__(self, registry: Registry) -> None:
        self.registry = registry

    def use(self, plugin_id: str) -> Plugin:
        module = self._import(plugin_id)

        try:
            rules = [RuleDefinition.from_object(obj) for obj in _as_list(module, "rules")]
            transformers = [
                Transformer.from_object(obj) for obj in _as_list(module, "transformers")
            ]
        except ReportToolkitError as exc:
            raise PluginLoadError(f"Plugin {plugin_id!r} is invalid: {exc}") from exc

        configs = getattr(module, "configs", None) or {}
        if not isinstance(configs, Mapping):
            raise PluginLoadError(f"Plugin {plugin_id!r} must export `configs` as a mapping")

        if self.registry.is_plugin_registered(plugin_id):
            self.registry.deregister_plugins([plugin_id])

        plugin = Plugin(id=plugin_id)
        for rule in rules:
            self.registry.register_rule(rule)
            plugin.rules.append(rule.id)
        for transformer in transformers:
            self.registry.register_transformer(transformer)
            plugin.transformers.append(transformer.id)
        for name, raw_config in configs.items():
            self.registry.register_preset(str(name), raw_config)
            plugin.presets.append(str(name))

        self.registry.add_plugin(plugin)
        return plugin

    # ------------------------------------------------------------------
    def _import(self, plugin_id: str) -> ModuleType:
        path = Path(plugin_id)
        if path.suffix == ".py" or path.exists():
            return self._import_path(path)

        try:
            return importlib.import_module(plugin_id)
        except Exception as exc:
            raise PluginLoadError(f"Could not import plugin {plugin_id!r}: {exc}") from exc

    def _import_path(self, path: Path) -> ModuleType:
        resolved = path.resolve()
        if not resolved.is_file():
            raise PluginLoadError(f"Plugin file not found: {path}")

        digest = hashlib.sha1(str(resolved).encode("utf-8")).hexdigest()[:12]
        module_name = f"report_toolkit_plugin_{resolved.stem}_{digest}"
        spec = importlib.util.spec_from_file_location(module_name, resolved)
        if spec is None or spec.loader is None:
            raise PluginLoadError(f"Could not load plugin from {path}")

        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            raise PluginLoadError(f"Plugin {path} failed to load: {exc}") from exc

        logger.debug("plugin_module_loaded", path=str(resolved), module=module_name)
        return module


def _as_list(module: ModuleType, attribute: str) -> list[Any]:
    value = getattr(module, attribute, None)
    if value is None:
        return []
    if isinstance(value, Mapping):
        return list(value.values())
    return list(value)


__all__ = ["PluginLoader", "PluginLoadError"]
