"""Registry of rules, transformers and config presets.

A registry is created at process start (see :func:`create_default_registry`),
populated by plugins and passed by reference into the engines. It is mutated
only through ``register``/``deregister``; do that before running pipelines.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

import structlog

from .errors import ConfigValidationError
from .inspection.rule import RuleDefinition
from .transformers.base import Transformer

logger = structlog.get_logger(__name__)

BUILTIN_PLUGIN_ID = "report-toolkit"


@dataclass(slots=True)
class Plugin:
    """Bookkeeping for what a plugin registered."""

    id: str
    rules: List[str] = field(default_factory=list)
    transformers: List[str] = field(default_factory=list)
    presets: List[str] = field(default_factory=list)


class Registry:
    """Process-wide mapping of ids to rule definitions and transformers."""

    def __init__(self) -> None:
        self._rules: Dict[str, RuleDefinition] = {}
        self._transformers: Dict[str, Transformer] = {}
        self._presets: Dict[str, Any] = {}
        self._default_transformers: Dict[str, str] = {}
        self._plugins: Dict[str, Plugin] = {}

    # ------------------------------------------------------------------
    def register(self, identifier: str, definition: RuleDefinition | Transformer) -> None:
        """Register ``definition`` under ``identifier``; the last write wins."""

        if isinstance(definition, Transformer):
            self._transformers[identifier] = definition
            kind = "transformer"
        elif isinstance(definition, RuleDefinition):
            self._rules[identifier] = definition
            kind = "rule"
        else:
            raise TypeError(f"Cannot register {definition!r}; expected a rule or transformer")
        logger.debug("definition_registered", id=identifier, kind=kind)

    def register_rule(self, definition: RuleDefinition) -> None:
        self.register(definition.id, definition)

    def register_transformer(self, transformer: Transformer) -> None:
        self.register(transformer.id, transformer)

    def register_preset(self, name: str, raw_config: Any) -> None:
        self._presets[name] = raw_config

    def set_default_transformer(self, end_type: str, transformer_id: str) -> None:
        self._default_transformers[end_type] = transformer_id

    def deregister(self, identifiers: Iterable[str]) -> None:
        """Remove rules, transformers and presets with the given ids."""

        for identifier in identifiers:
            self._rules.pop(identifier, None)
            self._transformers.pop(identifier, None)
            self._presets.pop(identifier, None)
            logger.debug("definition_deregistered", id=identifier)

    # ------------------------------------------------------------------
    @property
    def rules(self) -> List[RuleDefinition]:
        """Registered rules in registration order."""

        return list(self._rules.values())

    @property
    def transformers(self) -> List[Transformer]:
        return list(self._transformers.values())

    @property
    def presets(self) -> Mapping[str, Any]:
        return dict(self._presets)

    def has_rule(self, identifier: str) -> bool:
        return identifier in self._rules

    def has_transformer(self, identifier: str) -> bool:
        return identifier in self._transformers

    def rule(self, identifier: str) -> RuleDefinition:
        try:
            return self._rules[identifier]
        except KeyError:
            raise ConfigValidationError(f"Unknown rule: {identifier!r}") from None

    def transformer(self, identifier: str) -> Transformer:
        try:
            return self._transformers[identifier]
        except KeyError:
            known = ", ".join(sorted(self._transformers)) or "none"
            raise ConfigValidationError(
                f"Unknown transformer: {identifier!r} (known: {known})"
            ) from None

    def preset(self, name: str) -> Any:
        try:
            return self._presets[name]
        except KeyError:
            raise ConfigValidationError(f"Unknown config preset: {name!r}") from None

    def default_transformer(self, end_type: str) -> Optional[str]:
        return self._default_transformers.get(end_type)

    # Plugins ----------------------------------------------------------
    def add_plugin(self, plugin: Plugin) -> None:
        """Register everything ``plugin`` carries bookkeeping for.

        Re-adding a plugin replaces its previous registrations.
        """

        self._plugins[plugin.id] = plugin
        logger.info(
            "plugin_registered",
            plugin=plugin.id,
            rules=len(plugin.rules),
            transformers=len(plugin.transformers),
            presets=len(plugin.presets),
        )

    def is_plugin_registered(self, plugin_id: str) -> bool:
        return plugin_id in self._plugins

    @property
    def plugins(self) -> List[Plugin]:
        return list(self._plugins.values())

    def deregister_plugins(self, plugin_ids: Iterable[str] | None = None) -> None:
        """Remove everything registered by the given plugins (all plugins if ``None``)."""

        targets = list(self._plugins) if plugin_ids is None else list(plugin_ids)
        for plugin_id in targets:
            plugin = self._plugins.pop(plugin_id, None)
            if plugin is None:
                continue
            self.deregister([*plugin.rules, *plugin.transformers, *plugin.presets])
            logger.info("plugin_deregistered", plugin=plugin_id)


def create_default_registry() -> Registry:
    """Return a registry holding the built-in rules, transformers and presets."""

    from .config.presets import load_packaged_presets
    from .rules import BUILTIN_RULES
    from .transformers import BUILTIN_TRANSFORMERS, DEFAULT_TRANSFORMERS

    registry = Registry()
    plugin = Plugin(id=BUILTIN_PLUGIN_ID)
    for rule in BUILTIN_RULES:
        registry.register_rule(rule)
        plugin.rules.append(rule.id)
    for transformer in BUILTIN_TRANSFORMERS:
        registry.register_transformer(transformer)
        plugin.transformers.append(transformer.id)
    for name, raw_config in load_packaged_presets().items():
        registry.register_preset(name, raw_config)
        plugin.presets.append(name)
    for end_type, transformer_id in DEFAULT_TRANSFORMERS.items():
        registry.set_default_transformer(end_type, transformer_id)
    registry.add_plugin(plugin)
    return registry


__all__ = ["BUILTIN_PLUGIN_ID", "Plugin", "Registry", "create_default_registry"]
