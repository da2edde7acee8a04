"""Normalized configuration consumed by the engines."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


@dataclass(slots=True)
class Config:
    """Rule and transformer options after merging every config source.

    ``rules`` is ``None`` when no source mentioned rules, which enables every
    registered rule. Otherwise only the listed rules run.
    """

    rules: Optional[Dict[str, Dict[str, Any]]] = None
    transformers: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    plugins: List[str] = field(default_factory=list)

    def rule_enabled(self, rule_id: str) -> bool:
        return self.rules is None or rule_id in self.rules

    def rule_options(self, rule_id: str) -> Mapping[str, Any]:
        return (self.rules or {}).get(rule_id, {})

    def transformer_options(self, transformer_id: str) -> Mapping[str, Any]:
        return self.transformers.get(transformer_id, {})

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "transformers": {key: dict(value) for key, value in self.transformers.items()},
            "plugins": list(self.plugins),
        }
        if self.rules is not None:
            payload["rules"] = {key: dict(value) for key, value in self.rules.items()}
        return payload
