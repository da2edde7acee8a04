"""Config presets shipped with the package."""

from __future__ import annotations

from importlib import resources
from typing import Any, Dict

from ..config_loader import parse_config_text

PRESET_PREFIX = "report-toolkit:"


def load_packaged_presets() -> Dict[str, Any]:
    """Return ``{"report-toolkit:<name>": raw_config}`` for every packaged YAML preset."""

    presets: Dict[str, Any] = {}
    for entry in sorted(resources.files(__name__).iterdir(), key=lambda item: item.name):
        if not entry.name.endswith(".yaml"):
            continue
        name = PRESET_PREFIX + entry.name[: -len(".yaml")]
        presets[name] = parse_config_text(entry.read_text(encoding="utf-8"), source=entry.name)
    return presets
