"""Structural diff of report trees."""

from .engine import DiffEngine, PropertyFilter

__all__ = ["DiffEngine", "PropertyFilter"]
