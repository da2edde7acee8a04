"""Exception hierarchy shared by the diff, inspection and transform engines."""

from __future__ import annotations

from typing import Any


class ReportToolkitError(RuntimeError):
    """Base class for all errors raised by the toolkit."""


class ConfigValidationError(ReportToolkitError):
    """Raised when configuration references unknown ids or is otherwise invalid."""


class ChainTypeMismatchError(ConfigValidationError):
    """Raised when adjacent transformers in a chain have incompatible types."""

    def __init__(
        self,
        upstream_id: str,
        output_type: str,
        downstream_id: str,
        input_types: tuple[str, ...],
    ) -> None:
        expected = "|".join(input_types)
        super().__init__(
            f"Transformer {upstream_id!r} outputs {output_type!r}, but transformer "
            f"{downstream_id!r} expects {expected!r}"
        )
        self.upstream_id = upstream_id
        self.output_type = output_type
        self.downstream_id = downstream_id
        self.input_types = input_types


class MissingPropertyError(ReportToolkitError):
    """Raised by rules when a report lacks a property they depend on."""

    def __init__(self, path: str, filepath: str | None = None, reason: str = "") -> None:
        location = filepath or "(unknown)"
        message = f'Property "{path}" missing in report at {location}'
        if reason:
            message = f"{message}; {reason}"
        super().__init__(message)
        self.path = path
        self.filepath = filepath


class RuleInspectionError(ReportToolkitError):
    """Raised when a rule fails and the error policy asks for propagation."""

    def __init__(self, rule_id: str, filepath: str | None, cause: BaseException) -> None:
        super().__init__(f"Rule {rule_id!r} failed on {filepath or '(unknown)'}: {cause}")
        self.rule_id = rule_id
        self.filepath = filepath


class PluginLoadError(ReportToolkitError):
    """Raised when a plugin cannot be imported or registered."""


class DiffComparisonError(ReportToolkitError):
    """Raised when two report trees cannot be compared."""


class ReportLoadError(ReportToolkitError):
    """Raised when a report file cannot be read or parsed."""


class MalformedReportError(ReportToolkitError):
    """Raised when raw input cannot be turned into a report."""

    def __init__(self, message: str, *, value: Any = None) -> None:
        super().__init__(message)
        self.value = value


__all__ = [
    "ChainTypeMismatchError",
    "ConfigValidationError",
    "DiffComparisonError",
    "MalformedReportError",
    "MissingPropertyError",
    "PluginLoadError",
    "ReportLoadError",
    "ReportToolkitError",
    "RuleInspectionError",
]
