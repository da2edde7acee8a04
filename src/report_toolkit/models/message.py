"""Message models emitted by rules during inspection."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .report import freeze, thaw


class Severity(str, Enum):
    """Severity levels, ordered from least to most severe."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def parse(cls, level: object) -> "Severity":
        """Coerce a severity name (or alias) into a :class:`Severity`."""

        if isinstance(level, Severity):
            return level

        if isinstance(level, str):
            normalized = level.strip().lower()
            if normalized in _SEVERITY_ALIASES:
                return _SEVERITY_ALIASES[normalized]

        raise ValueError(f"Unknown severity: {level!r}")


_SEVERITY_RANK = {
    Severity.INFO: 0,
    Severity.WARNING: 1,
    Severity.ERROR: 2,
}

_SEVERITY_ALIASES = {
    "info": Severity.INFO,
    "information": Severity.INFO,
    "informational": Severity.INFO,
    "warn": Severity.WARNING,
    "warning": Severity.WARNING,
    "error": Severity.ERROR,
    "err": Severity.ERROR,
}


@dataclass(frozen=True, slots=True)
class Message:
    """A finding produced by a rule for a single report."""

    message: str
    severity: Severity = Severity.ERROR
    rule_id: str = ""
    filename: Optional[str] = None
    data: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        object.__setattr__(self, "severity", Severity.parse(self.severity))
        object.__setattr__(self, "data", freeze(self.data or {}))

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "severity": self.severity.value,
            "message": self.message,
            "filename": self.filename,
            "data": thaw(self.data),
        }
