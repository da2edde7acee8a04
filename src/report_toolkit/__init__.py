"""Diff, inspect and transform diagnostic reports.

Example::

    from report_toolkit import ReportToolkit

    toolkit = ReportToolkit()
    messages = toolkit.inspect(report, severity="warning")
    results = toolkit.diff(report1, report2, filter_properties=["header"])
    rows = toolkit.transform(["filter", "csv"], report, {"transformers": {"filter": {"include": "header"}}})
"""

from .errors import (
    ChainTypeMismatchError,
    ConfigValidationError,
    DiffComparisonError,
    MalformedReportError,
    MissingPropertyError,
    PluginLoadError,
    ReportLoadError,
    ReportToolkitError,
    RuleInspectionError,
)
from .inspection import ErrorPolicy, RuleDefinition, RuleMeta
from .models import Config, DiffOp, DiffResult, Message, Report, Severity
from .registry import Registry, create_default_registry
from .service import ReportToolkit
from .transformers import Transformer, TransformOptions

__all__ = [
    "ChainTypeMismatchError",
    "Config",
    "ConfigValidationError",
    "DiffComparisonError",
    "DiffOp",
    "DiffResult",
    "ErrorPolicy",
    "MalformedReportError",
    "Message",
    "MissingPropertyError",
    "PluginLoadError",
    "Registry",
    "Report",
    "ReportLoadError",
    "ReportToolkit",
    "ReportToolkitError",
    "RuleDefinition",
    "RuleInspectionError",
    "RuleMeta",
    "Severity",
    "TransformOptions",
    "Transformer",
    "create_default_registry",
]
