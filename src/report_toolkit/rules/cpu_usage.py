"""Assert that CPU usage stays within a configured range."""

from __future__ import annotations

import math
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..errors import MissingPropertyError
from ..inspection.rule import RuleDefinition, RuleMeta
from ..models import Report, Severity

MODE_ALL = "all"
MODE_MEAN = "mean"
MODE_MIN = "min"
MODE_MAX = "max"

MODE_DESCRIPTIONS = {
    MODE_ALL: "Report",
    MODE_MAX: "Maximum",
    MODE_MEAN: "Mean",
    MODE_MIN: "Minimum",
}

COMPUTATIONS: Dict[str, Callable[[List[float]], float]] = {
    MODE_MAX: lambda usages: max([0.0, *usages]),
    MODE_MEAN: lambda usages: round(math.fsum(usages) / len(usages), 2),
    MODE_MIN: lambda usages: min(usages),
}


def within_range(minimum: float, maximum: float, usage: float) -> bool:
    return minimum <= usage <= maximum


def _result(minimum: float, maximum: float, mode: str, usage: float) -> Dict[str, Any]:
    data = {"max": maximum, "min": minimum, "mode": mode, "usage": usage}
    description = MODE_DESCRIPTIONS[mode]
    if within_range(minimum, maximum, usage):
        return {
            "message": (
                f"{description} CPU consumption percent ({usage:g}%) is within the "
                f"allowed range of {minimum}-{maximum}%"
            ),
            "severity": Severity.INFO,
            "data": data,
        }
    return {
        "message": (
            f"{description} CPU consumption percent ({usage:g}%) is outside the "
            f"allowed range of {minimum}-{maximum}%"
        ),
        "data": data,
    }


class CpuUsageInspector:
    """Collects per-report CPU usage; aggregates on ``complete`` unless mode is ``all``."""

    def __init__(self, config: Optional[Mapping[str, Any]] = None) -> None:
        config = config or {}
        self.min = config.get("min", 0)
        self.max = config.get("max", 50)
        self.mode = config.get("mode", MODE_MEAN)
        if self.mode not in MODE_DESCRIPTIONS:
            raise ValueError(f"Unknown cpu-usage mode: {self.mode!r}")
        self.usages: List[float] = []

    def next(self, context: Report) -> Optional[Dict[str, Any]]:
        filepath = context.filepath
        cpus = context.header.get("cpus")
        if not cpus:
            raise MissingPropertyError("header.cpus", filepath, "cannot compute CPU usage.")
        percent = context.resource_usage.get("cpuConsumptionPercent")
        if percent is None:
            raise MissingPropertyError(
                "resourceUsage.cpuConsumptionPercent", filepath, "cannot compute CPU usage."
            )

        usage = round(float(percent) / len(cpus), 2)
        if self.mode == MODE_ALL:
            return _result(self.min, self.max, self.mode, usage)
        self.usages.append(usage)
        return None

    def complete(self) -> Optional[Dict[str, Any]]:
        if self.mode == MODE_ALL or not self.usages:
            return None
        usage = COMPUTATIONS[self.mode](self.usages)
        return _result(self.min, self.max, self.mode, usage)


cpu_usage = RuleDefinition(
    id="cpu-usage",
    inspect=CpuUsageInspector,
    meta=RuleMeta(
        docs={
            "category": "resource",
            "description": "Assert CPU usage % is within a range",
        },
        constants={
            "MODE_ALL": MODE_ALL,
            "MODE_MAX": MODE_MAX,
            "MODE_MEAN": MODE_MEAN,
            "MODE_MIN": MODE_MIN,
        },
        schema={
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "max": {"type": "integer", "minimum": 0, "default": 50},
                "min": {"type": "integer", "minimum": 0, "default": 0},
                "mode": {
                    "type": "string",
                    "enum": [MODE_MEAN, MODE_MIN, MODE_MAX, MODE_ALL],
                    "default": MODE_MEAN,
                },
            },
        },
    ),
)
