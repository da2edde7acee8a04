"""Streaming evaluation of rules against reports."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, List, Mapping, Sequence, Tuple

import structlog

from ..errors import ConfigValidationError, RuleInspectionError
from ..models import Config, Message, Severity
from ..options import merge_options, schema_defaults
from ..streams import Stream, filter_items, flat_map, from_any
from .rule import RuleDefinition, RuleResult

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from ..registry import Registry

logger = structlog.get_logger(__name__)

SORT_ASC = "asc"
SORT_DESC = "desc"

_FIELD_ALIASES = {"ruleId": "rule_id", "id": "rule_id", "filepath": "filename"}
_MISSING = object()


class ErrorPolicy(str, Enum):
    """What to do when a rule raises while inspecting a report."""

    MESSAGE = "message"
    ABORT = "abort"
    RAISE = "raise"


@dataclass(slots=True)
class InspectOptions:
    """Options controlling a single inspection call."""

    severity: Severity = Severity.INFO
    sort: bool = False
    sort_field: str = "filename"
    sort_direction: str = SORT_ASC
    rule_config: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    error_policy: ErrorPolicy = ErrorPolicy.MESSAGE

    def __post_init__(self) -> None:
        self.severity = Severity.parse(self.severity)
        self.error_policy = ErrorPolicy(self.error_policy)
        if self.sort_direction not in {SORT_ASC, SORT_DESC}:
            raise ConfigValidationError(
                f"sort_direction must be {SORT_ASC!r} or {SORT_DESC!r}, got {self.sort_direction!r}"
            )


class InspectionEngine:
    """Drive registered rules over a stream of reports.

    For every report, each enabled rule gets a fresh rule instance. The
    report's contexts are fed to ``next`` and ``complete`` is called once at
    the end, so messages for a (report, rule) pair always appear together and
    in call order.
    """

    def __init__(self, registry: "Registry") -> None:
        self.registry = registry

    def inspect(
        self,
        reports: Any,
        config: Config | None = None,
        options: InspectOptions | None = None,
    ) -> Stream[Message]:
        """Return a lazy stream of messages.

        Unknown rule ids fail here, before any report is read.
        """

        options = options or InspectOptions()
        rules = self.enabled_rules(config or Config(), options.rule_config)
        logger.debug("inspection_started", rules=[rule.id for rule, _ in rules])

        def inspect_report(report: Any) -> Iterator[Message]:
            for rule, rule_config in rules:
                yield from self._run_rule(rule, rule_config, report, options.error_policy)

        return from_any(reports).pipe(
            flat_map(inspect_report),
            filter_items(lambda message: message.severity.rank >= options.severity.rank),
        )

    def enabled_rules(
        self,
        config: Config,
        rule_config: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> List[Tuple[RuleDefinition, Dict[str, Any]]]:
        """Return enabled rules with their effective options, in registration order."""

        overrides = dict(rule_config or {})
        configured = config.rules
        for rule_id in [*(configured or {}), *overrides]:
            if not self.registry.has_rule(rule_id):
                raise ConfigValidationError(f"Unknown rule: {rule_id!r}")

        enabled: List[Tuple[RuleDefinition, Dict[str, Any]]] = []
        for rule in self.registry.rules:
            if not config.rule_enabled(rule.id) and rule.id not in overrides:
                continue
            options = merge_options(
                schema_defaults(rule.meta.schema),
                config.rule_options(rule.id),
                overrides.get(rule.id),
            )
            enabled.append((rule, options))
        return enabled

    # ------------------------------------------------------------------
    def _run_rule(
        self,
        rule: RuleDefinition,
        rule_config: Mapping[str, Any],
        report: Any,
        policy: ErrorPolicy,
    ) -> Iterator[Message]:
        filename = getattr(report, "filepath", None)
        try:
            instance = rule.inspect(dict(rule_config))
            for context in self._contexts(report):
                yield from _to_messages(instance.next(context), rule.id, filename)
            yield from _to_messages(instance.complete(), rule.id, filename)
        except Exception as exc:
            logger.warning(
                "rule_failed",
                rule=rule.id,
                filename=filename,
                error=str(exc),
                policy=policy.value,
            )
            if policy is ErrorPolicy.RAISE:
                raise RuleInspectionError(rule.id, filename, exc) from exc
            if policy is ErrorPolicy.MESSAGE:
                yield Message(
                    message=str(exc) or type(exc).__name__,
                    severity=Severity.ERROR,
                    rule_id=rule.id,
                    filename=filename,
                    data={"error": type(exc).__name__},
                )

    def _contexts(self, report: Any) -> Iterable[Any]:
        yield report


def _to_messages(result: RuleResult, rule_id: str, filename: str | None) -> Iterator[Message]:
    if result is None:
        return
    if isinstance(result, (str, Mapping, Message)):
        yield to_message(result, rule_id, filename)
        return
    for payload in result:
        if payload is not None:
            yield to_message(payload, rule_id, filename)


def to_message(payload: Any, rule_id: str, filename: str | None = None) -> Message:
    """Coerce a rule's return value into a :class:`Message`."""

    if isinstance(payload, Message):
        return replace(
            payload,
            rule_id=payload.rule_id or rule_id,
            filename=payload.filename or filename,
        )
    if isinstance(payload, str):
        return Message(message=payload, rule_id=rule_id, filename=filename)
    if isinstance(payload, Mapping):
        return Message(
            message=str(payload.get("message", "")),
            severity=payload.get("severity") or Severity.ERROR,
            rule_id=rule_id,
            filename=filename,
            data=payload.get("data") or {},
        )
    raise TypeError(f"Rule {rule_id!r} returned an unsupported message payload: {payload!r}")


def sort_messages(
    messages: Sequence[Message],
    sort_field: str,
    direction: str = SORT_ASC,
) -> List[Message]:
    """Stable sort on a dotted field path; messages without the field go last."""

    present: List[Tuple[Tuple[int, Any], Message]] = []
    missing: List[Message] = []
    for message in messages:
        value = _field_value(message, sort_field)
        if value is _MISSING or value is None:
            missing.append(message)
        else:
            present.append((_sort_key(value), message))

    present.sort(key=lambda pair: pair[0], reverse=direction == SORT_DESC)
    return [message for _, message in present] + missing


def _field_value(message: Message, field_path: str) -> Any:
    parts = field_path.split(".")
    head = _FIELD_ALIASES.get(parts[0], parts[0])
    if head in Message.__dataclass_fields__:
        value: Any = getattr(message, head)
        rest = parts[1:]
    else:
        value = message.data
        rest = parts

    for part in rest:
        if isinstance(value, Mapping) and part in value:
            value = value[part]
        else:
            return _MISSING
    return value


def _sort_key(value: Any) -> Tuple[int, Any]:
    if isinstance(value, Severity):
        return (0, value.rank)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value)
    return (1, str(value))


__all__ = [
    "ErrorPolicy",
    "InspectOptions",
    "InspectionEngine",
    "sort_messages",
    "to_message",
]
