"""Diff result models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .report import thaw


class DiffOp(str, Enum):
    """Kind of structural difference between two reports."""

    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"


@dataclass(frozen=True, slots=True)
class DiffResult:
    """One difference found while walking two report trees."""

    op: DiffOp
    path: str
    old_value: Any = None
    new_value: Any = None

    def mirrored(self) -> "DiffResult":
        """Return the result as seen when the two reports are swapped."""

        op = {DiffOp.ADD: DiffOp.REMOVE, DiffOp.REMOVE: DiffOp.ADD}.get(self.op, self.op)
        return DiffResult(op=op, path=self.path, old_value=self.new_value, new_value=self.old_value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "op": self.op.value,
            "path": self.path,
            "oldValue": thaw(self.old_value),
            "newValue": thaw(self.new_value),
        }
