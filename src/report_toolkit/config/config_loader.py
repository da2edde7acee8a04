"""Utilities for loading and merging report-toolkit configuration sources."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Mapping, MutableMapping, Optional, Set

import structlog
import yaml

from ..errors import ConfigValidationError
from ..models import Config

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from ..adapters.plugin_loader import PluginLoader
    from ..registry import Registry

logger = structlog.get_logger(__name__)

CONFIG_SUFFIXES = {".yaml", ".yml", ".json"}
_ENABLED = {True, "on", "enabled"}
_DISABLED = {False, "off", "disabled"}


class ConfigLoader:
    """Merge an ordered list of config sources into a :class:`Config`.

    A source is a preset name, a mapping, a path to a YAML or JSON file, or a
    list of those. For every rule and transformer id, later sources override
    earlier ones key by key.
    """

    def __init__(
        self,
        registry: "Registry",
        *,
        plugin_loader: Optional["PluginLoader"] = None,
    ) -> None:
        self.registry = registry
        self.plugin_loader = plugin_loader

    def load(self, raw: Any) -> Config:
        rules: Optional[Dict[str, Dict[str, Any]]] = None
        transformers: Dict[str, Dict[str, Any]] = {}
        plugins: List[str] = []
        referenced_rules: Set[str] = set()

        for source in self._expand(raw, seen=()):
            for plugin_id in source.get("plugins") or []:
                if plugin_id in plugins:
                    continue
                plugins.append(plugin_id)
                if self.plugin_loader is not None:
                    self.plugin_loader.use(plugin_id)

            rule_configs = source.get("rules")
            if rule_configs is not None:
                if not isinstance(rule_configs, Mapping):
                    raise ConfigValidationError("`rules` must be a mapping of rule id to options")
                rules = {} if rules is None else rules
                for rule_id, value in rule_configs.items():
                    referenced_rules.add(rule_id)
                    self._merge_rule(rules, rule_id, value)

            transformer_configs = source.get("transformers") or {}
            if not isinstance(transformer_configs, Mapping):
                raise ConfigValidationError(
                    "`transformers` must be a mapping of transformer id to options"
                )
            for transformer_id, value in transformer_configs.items():
                if not isinstance(value, Mapping):
                    raise ConfigValidationError(
                        f"Options for transformer {transformer_id!r} must be a mapping"
                    )
                transformers.setdefault(transformer_id, {}).update(value)

        for rule_id in sorted(referenced_rules):
            if not self.registry.has_rule(rule_id):
                raise ConfigValidationError(f"Unknown rule in config: {rule_id!r}")
        for transformer_id in transformers:
            if not self.registry.has_transformer(transformer_id):
                raise ConfigValidationError(f"Unknown transformer in config: {transformer_id!r}")

        config = Config(rules=rules, transformers=transformers, plugins=plugins)
        logger.debug(
            "config_loaded",
            rules=None if rules is None else list(rules),
            transformers=list(transformers),
            plugins=plugins,
        )
        return config

    # ------------------------------------------------------------------
    def _merge_rule(
        self,
        rules: MutableMapping[str, Dict[str, Any]],
        rule_id: str,
        value: Any,
    ) -> None:
        if _is_flag(value, _DISABLED):
            rules.pop(rule_id, None)
        elif value is None or _is_flag(value, _ENABLED):
            rules.setdefault(rule_id, {})
        elif isinstance(value, Mapping):
            rules.setdefault(rule_id, {}).update(value)
        else:
            raise ConfigValidationError(
                f"Options for rule {rule_id!r} must be a mapping or a boolean, got {value!r}"
            )

    def _expand(self, raw: Any, seen: tuple[str, ...]) -> Iterator[Mapping[str, Any]]:
        if raw is None:
            return
        if isinstance(raw, Config):
            yield raw.to_dict()
        elif isinstance(raw, Mapping):
            yield raw
        elif isinstance(raw, (str, Path)):
            name = str(raw)
            if name in seen:
                raise ConfigValidationError(f"Config preset {name!r} includes itself")
            if isinstance(raw, str) and name in self.registry.presets:
                yield from self._expand(self.registry.preset(name), (*seen, name))
            elif Path(name).suffix in CONFIG_SUFFIXES or Path(name).is_file():
                yield from self._expand(read_config_file(Path(name)), (*seen, name))
            else:
                raise ConfigValidationError(f"Unknown config preset: {name!r}")
        elif isinstance(raw, (list, tuple)):
            for item in raw:
                yield from self._expand(item, seen)
        else:
            raise ConfigValidationError(f"Unsupported config source: {raw!r}")


def _is_flag(value: Any, flags: Set[Any]) -> bool:
    if isinstance(value, bool):
        return value in flags
    return isinstance(value, str) and value.strip().lower() in flags


def read_config_file(path: Path) -> Any:
    """Parse a YAML or JSON config file."""

    if not path.exists():
        raise ConfigValidationError(f"Config file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:  # pragma: no cover - filesystem errors surfaced to caller
        raise ConfigValidationError(f"Failed to read config file {path}") from exc

    return parse_config_text(content, source=str(path), as_json=path.suffix == ".json")


def parse_config_text(content: str, *, source: str, as_json: bool = False) -> Any:
    if as_json:
        try:
            return json.loads(content or "{}")
        except json.JSONDecodeError as exc:
            raise ConfigValidationError(f"Invalid JSON in config file {source}") from exc

    try:
        return yaml.safe_load(content) or {}
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Invalid YAML in config file {source}") from exc


__all__ = ["ConfigLoader", "parse_config_text", "read_config_file"]
