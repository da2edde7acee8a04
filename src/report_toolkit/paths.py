"""Dotted-path helpers for nested report data."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Sequence

SEPARATOR = "."


def join_path(parent: str, key: object) -> str:
    return f"{parent}{SEPARATOR}{key}" if parent else str(key)


def is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def matches_prefix(path: str, prefixes: Iterable[str]) -> bool:
    """Return ``True`` if ``path`` equals one of ``prefixes`` or lies beneath it."""

    for prefix in prefixes:
        if path == prefix or path.startswith(prefix + SEPARATOR):
            return True
    return False


def flatten(value: Any, parent: str = "") -> Dict[str, Any]:
    """Flatten nested mappings and sequences into ``{dotted.path: leaf}``."""

    flat: Dict[str, Any] = {}
    if isinstance(value, Mapping):
        items: Iterable[tuple[object, Any]] = value.items()
    elif is_sequence(value):
        items = enumerate(value)
    else:
        return {parent: value}

    for key, item in items:
        path = join_path(parent, key)
        if (isinstance(item, Mapping) or is_sequence(item)) and len(item):
            flat.update(flatten(item, path))
        else:
            flat[path] = item
    return flat
