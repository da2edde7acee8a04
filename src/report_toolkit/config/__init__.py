"""Config resolution: presets, config files and inline overrides."""

from .config_loader import ConfigLoader, parse_config_text, read_config_file

__all__ = ["ConfigLoader", "parse_config_text", "read_config_file"]
