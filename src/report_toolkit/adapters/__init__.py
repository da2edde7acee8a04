"""Adapter layer for reading report files and loading plugins."""

from .plugin_loader import PluginLoader, PluginLoadError
from .report_loader import ReportLoader, ReportLoadError

__all__ = [
    "PluginLoader",
    "PluginLoadError",
    "ReportLoader",
    "ReportLoadError",
]
