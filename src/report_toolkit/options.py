"""Helpers for building rule and transformer option mappings."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


def schema_defaults(schema: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Return the ``default`` of every top-level property declared in ``schema``."""

    if not schema:
        return {}
    properties = schema.get("properties") or {}
    return {
        name: spec["default"]
        for name, spec in properties.items()
        if isinstance(spec, Mapping) and "default" in spec
    }


def merge_options(*layers: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Shallow-merge option mappings; later layers win key by key."""

    merged: Dict[str, Any] = {}
    for layer in layers:
        if layer:
            merged.update(layer)
    return merged
