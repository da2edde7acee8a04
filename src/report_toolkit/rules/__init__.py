"""Built-in inspection rules."""

from .cpu_usage import CpuUsageInspector, cpu_usage
from .library_mismatch import LibraryMismatchInspector, library_mismatch

BUILTIN_RULES = (cpu_usage, library_mismatch)

__all__ = [
    "BUILTIN_RULES",
    "CpuUsageInspector",
    "LibraryMismatchInspector",
    "cpu_usage",
    "library_mismatch",
]
