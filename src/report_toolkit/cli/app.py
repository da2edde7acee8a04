"""Command-line interface implementation for report-toolkit."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Sequence

from ..adapters import ReportLoader
from ..errors import ReportToolkitError
from ..inspection import ErrorPolicy
from ..logging_config import LOG_FORMATS, setup_logging
from ..models import Config, DiffResult, Message, Severity
from ..normalization import ReportNormalizer
from ..service import ReportToolkit
from ..transformers import TransformOptions
from ..transformers.formats import render_table


@dataclass(slots=True)
class InspectionReport:
    """Collection of messages plus contextual metadata."""

    messages: Sequence[Message]
    metadata: Mapping[str, Any]

    @property
    def highest_severity(self) -> Severity | None:
        if not self.messages:
            return None
        return max(self.messages, key=lambda message: message.severity.rank).severity

    def counts_by_severity(self) -> dict[str, int]:
        counts: MutableMapping[Severity, int] = {severity: 0 for severity in Severity}
        for message in self.messages:
            counts[message.severity] += 1
        return {severity.value: count for severity, count in counts.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "metadata": dict(self.metadata),
            "summary": {
                "total_messages": len(self.messages),
                "highest_severity": self.highest_severity.value if self.highest_severity else None,
                "counts": self.counts_by_severity(),
            },
            "messages": [message.to_dict() for message in self.messages],
        }


def render_messages(report: InspectionReport) -> str:
    """Render messages as a simple text table for terminal output."""

    if not report.messages:
        return "No problems found."

    rows = [("Severity", "Rule ID", "File", "Message")]
    for message in report.messages:
        rows.append(
            (message.severity.value, message.rule_id, message.filename or "-", message.message)
        )
    return render_table(rows)


def render_diff(results: Sequence[DiffResult]) -> str:
    if not results:
        return "No differences found."

    rows = [("Op", "Path", "Old", "New")]
    for result in results:
        payload = result.to_dict()
        rows.append(
            (
                result.op.value,
                result.path,
                _display(payload["oldValue"], result.old_value is None),
                _display(payload["newValue"], result.new_value is None),
            )
        )
    return render_table(rows)


def _display(value: Any, missing: bool) -> str:
    if missing:
        return "-"
    return json.dumps(value) if isinstance(value, (dict, list)) else str(value)


def _add_common_arguments(
    parser: argparse.ArgumentParser, *, config: bool = True, secrets: bool = True
) -> None:
    if config:
        parser.add_argument(
            "--config",
            dest="configs",
            action="append",
            default=None,
            help="Config preset name or path to a YAML/JSON config file. May be repeated.",
        )
    parser.add_argument(
        "--plugin",
        dest="plugins",
        action="append",
        default=None,
        help="Plugin module name or path to a plugin .py file. May be repeated.",
    )
    if secrets:
        parser.add_argument(
            "--show-secrets-unsafe",
            action="store_true",
            help="Do not redact secrets from reports.",
        )
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
        help="Minimum level of log events written to stderr.",
    )
    parser.add_argument(
        "--log-format",
        default="console",
        choices=list(LOG_FORMATS),
        help="Log renderer.",
    )


def build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser."""

    parser = argparse.ArgumentParser(
        prog="report-toolkit", description="Diff, inspect and transform diagnostic reports"
    )
    subparsers = parser.add_subparsers(dest="command")

    diff_parser = subparsers.add_parser("diff", help="Show differences between two reports.")
    diff_parser.add_argument("report1", type=Path, help="First report file.")
    diff_parser.add_argument("report2", type=Path, help="Second report file.")
    diff_parser.add_argument(
        "--filter-property",
        dest="filter_properties",
        action="append",
        default=None,
        help="Dotted property path (or key name) to leave out of the diff. May be repeated.",
    )
    diff_parser.add_argument("--format", choices=["table", "json"], default="table")
    _add_common_arguments(diff_parser, config=False)

    inspect_parser = subparsers.add_parser("inspect", help="Run rules against reports.")
    inspect_parser.add_argument("reports", type=Path, nargs="+", help="Report files.")
    severities = [severity.value for severity in Severity]
    inspect_parser.add_argument(
        "--severity",
        choices=severities,
        default=Severity.INFO.value,
        help="Minimum severity of messages to show.",
    )
    inspect_parser.add_argument(
        "--fail-on",
        choices=severities,
        default=Severity.ERROR.value,
        help="Exit with status 1 when messages at or above this severity are present.",
    )
    inspect_parser.add_argument("--sort", action="store_true", help="Sort messages.")
    inspect_parser.add_argument("--sort-field", default="filename")
    inspect_parser.add_argument("--sort-direction", choices=["asc", "desc"], default="asc")
    inspect_parser.add_argument(
        "--error-policy",
        choices=[policy.value for policy in ErrorPolicy],
        default=ErrorPolicy.MESSAGE.value,
        help="How rule failures are handled.",
    )
    inspect_parser.add_argument("--format", choices=["table", "json"], default="table")
    _add_common_arguments(inspect_parser)

    transform_parser = subparsers.add_parser(
        "transform", help="Run reports through a chain of transformers."
    )
    transform_parser.add_argument("reports", type=Path, nargs="+", help="Report files.")
    transform_parser.add_argument(
        "-t",
        "--transform",
        dest="transformers",
        action="append",
        default=None,
        help="Transformer id, in chain order. May be repeated.",
    )
    transform_parser.add_argument(
        "--end-type",
        default="string",
        help="Type the chain must produce; a default transformer is appended if needed.",
    )
    _add_common_arguments(transform_parser)

    rules_parser = subparsers.add_parser(
        "list-rules", help="List registered rules and whether the config enables them."
    )
    _add_common_arguments(rules_parser, secrets=False)

    transformers_parser = subparsers.add_parser(
        "list-transformers", help="List registered transformers."
    )
    _add_common_arguments(transformers_parser, config=False, secrets=False)

    return parser


def create_toolkit(plugins: Sequence[str] | None = None) -> ReportToolkit:
    """Create a toolkit with the built-in registry plus any requested plugins."""

    toolkit = ReportToolkit()
    for plugin_id in plugins or []:
        toolkit.use(plugin_id)
    return toolkit


def _load_config(toolkit: ReportToolkit, configs: Sequence[str] | None) -> Config:
    return toolkit.load_config(list(configs)) if configs else Config()


def _loader(args: argparse.Namespace) -> ReportLoader:
    normalizer = ReportNormalizer(show_secrets_unsafe=args.show_secrets_unsafe)
    return ReportLoader(normalizer=normalizer)


def _handle_diff(toolkit: ReportToolkit, args: argparse.Namespace) -> int:
    loader = _loader(args)
    results = toolkit.diff(
        loader.load_report(args.report1),
        loader.load_report(args.report2),
        filter_properties=args.filter_properties or (),
        show_secrets_unsafe=args.show_secrets_unsafe,
    )
    if args.format == "json":
        print(json.dumps([result.to_dict() for result in results], indent=2))
    else:
        print(render_diff(results))
    return 0


def _handle_inspect(toolkit: ReportToolkit, args: argparse.Namespace) -> int:
    config = _load_config(toolkit, args.configs)
    messages = toolkit.inspect(
        _loader(args).iter_reports(args.reports),
        severity=args.severity,
        sort=args.sort,
        sort_field=args.sort_field,
        sort_direction=args.sort_direction,
        show_secrets_unsafe=args.show_secrets_unsafe,
        config=config,
        error_policy=args.error_policy,
    )
    report = InspectionReport(
        messages=messages,
        metadata={"report_count": len(args.reports)},
    )

    if args.format == "json":
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(render_messages(report))

    highest = report.highest_severity
    fail_on = Severity(args.fail_on)
    return 1 if highest is not None and highest.rank >= fail_on.rank else 0


def _handle_transform(toolkit: ReportToolkit, args: argparse.Namespace) -> int:
    config = _load_config(toolkit, args.configs)
    options = TransformOptions(end_type=args.end_type or None)
    items = toolkit.transform(
        args.transformers or [],
        _loader(args).iter_reports(args.reports),
        config,
        options,
        show_secrets_unsafe=args.show_secrets_unsafe,
    )
    for item in items:
        text = item if isinstance(item, str) else json.dumps(item)
        sys.stdout.write(text if text.endswith("\n") else text + "\n")
    return 0


def _handle_list(toolkit: ReportToolkit, args: argparse.Namespace) -> int:
    if args.command == "list-rules":
        config = _load_config(toolkit, args.configs)
        rows = [("Rule ID", "Enabled", "Description")]
        rows.extend(
            (rule.id, "yes" if config.rule_enabled(rule.id) else "no", rule.description)
            for rule in toolkit.registry.rules
        )
    else:
        rows = [("Transformer ID", "Input", "Output", "Description")]
        rows.extend(
            (
                transformer.id,
                "|".join(transformer.input_types),
                transformer.output_type,
                transformer.description,
            )
            for transformer in toolkit.registry.transformers
        )
    print(render_table(rows))
    return 0


_HANDLERS = {
    "diff": _handle_diff,
    "inspect": _handle_inspect,
    "transform": _handle_transform,
    "list-rules": _handle_list,
    "list-transformers": _handle_list,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point used by tests and the ``python -m`` invocation."""

    parser = build_parser()
    args = parser.parse_args(argv)

    handler = _HANDLERS.get(args.command)
    if handler is None:
        parser.print_help()
        return 0

    setup_logging(args.log_level, args.log_format)
    try:
        toolkit = create_toolkit(plugins=args.plugins)
        return handler(toolkit, args)
    except ReportToolkitError as exc:
        print(f"Error: {exc}")
        return 2


def run() -> None:  # pragma: no cover - thin wrapper for module execution
    """Execute the CLI and exit with the produced status code."""

    raise SystemExit(main())


if __name__ == "__main__":  # pragma: no cover - module execution guard
    run()
