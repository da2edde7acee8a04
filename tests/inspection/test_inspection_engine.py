from __future__ import annotations

from pathlib import Path
from typing import Any, List

import pytest

from report_toolkit.adapters import ReportLoader
from report_toolkit.errors import ConfigValidationError, RuleInspectionError
from report_toolkit.inspection import (
    ErrorPolicy,
    InspectionEngine,
    InspectOptions,
    RuleDefinition,
    sort_messages,
    to_message,
)
from report_toolkit.models import Config, Message, Report, Severity
from report_toolkit.registry import Registry, create_default_registry

FIXTURES = Path(__file__).resolve().parent.parent / "fixtures"


class RecordingRule:
    """Emits one message per call so call order is visible in the output."""

    calls: List[str] = []

    def __init__(self, config: Any = None) -> None:
        self.label = (config or {}).get("label", "rec")

    def next(self, context: Any) -> Any:
        RecordingRule.calls.append(f"{self.label}:next")
        return {"message": f"{self.label} next", "severity": "info"}

    def complete(self) -> Any:
        RecordingRule.calls.append(f"{self.label}:complete")
        return [f"{self.label} complete", None]


class ExplodingRule:
    def __init__(self, config: Any = None) -> None:
        pass

    def next(self, context: Any) -> Any:
        raise ValueError("boom")

    def complete(self) -> Any:
        return "unreachable"


def make_registry(*definitions: RuleDefinition) -> Registry:
    registry = Registry()
    for definition in definitions:
        registry.register_rule(definition)
    return registry


def fixture_reports() -> list[Report]:
    loader = ReportLoader()
    return loader.load_reports([FIXTURES / "report-1.json", FIXTURES / "report-2.json"])


@pytest.fixture(autouse=True)
def reset_calls() -> None:
    RecordingRule.calls.clear()


def test_messages_grouped_per_report_and_rule() -> None:
    registry = make_registry(
        RuleDefinition(id="first", inspect=RecordingRule),
        RuleDefinition(id="second", inspect=RecordingRule),
    )
    config = Config(rules={"first": {"label": "a"}, "second": {"label": "b"}})
    reports = [Report({"header": {}}, filepath="one.json"), Report({}, filepath="two.json")]

    messages = InspectionEngine(registry).inspect(reports, config).to_list()

    assert [(m.filename, m.rule_id, m.message) for m in messages] == [
        ("one.json", "first", "a next"),
        ("one.json", "first", "a complete"),
        ("one.json", "second", "b next"),
        ("one.json", "second", "b complete"),
        ("two.json", "first", "a next"),
        ("two.json", "first", "a complete"),
        ("two.json", "second", "b next"),
        ("two.json", "second", "b complete"),
    ]
    assert RecordingRule.calls[:2] == ["a:next", "a:complete"]


def test_string_payload_defaults_to_error_severity() -> None:
    registry = make_registry(RuleDefinition(id="rec", inspect=RecordingRule))

    messages = InspectionEngine(registry).inspect([Report({})]).to_list()

    assert [m.severity for m in messages] == [Severity.INFO, Severity.ERROR]


def test_inspect_is_lazy() -> None:
    registry = make_registry(RuleDefinition(id="rec", inspect=RecordingRule))
    stream = InspectionEngine(registry).inspect([Report({}), Report({})])

    assert RecordingRule.calls == []
    next(stream)
    assert RecordingRule.calls == ["rec:next"]
    stream.close()


def test_severity_threshold_filters_messages() -> None:
    registry = create_default_registry()
    options = InspectOptions(severity="warning")

    messages = InspectionEngine(registry).inspect(fixture_reports(), options=options).to_list()

    assert [(m.rule_id, m.severity) for m in messages] == [
        ("library-mismatch", Severity.WARNING),
        ("cpu-usage", Severity.ERROR),
    ]


def test_unknown_rule_rejected_before_reading_reports() -> None:
    def reports():
        raise AssertionError("reports should not be read")
        yield  # pragma: no cover

    engine = InspectionEngine(create_default_registry())

    with pytest.raises(ConfigValidationError):
        engine.inspect(reports(), Config(rules={"no-such-rule": {}}))


def test_rule_config_overrides_and_enables_rules() -> None:
    engine = InspectionEngine(create_default_registry())
    config = Config(rules={"library-mismatch": {}})

    enabled = engine.enabled_rules(config, {"cpu-usage": {"max": 90}})

    assert [(rule.id, options) for rule, options in enabled] == [
        ("cpu-usage", {"max": 90, "min": 0, "mode": "mean"}),
        ("library-mismatch", {}),
    ]


def test_error_policy_message_reports_failure_and_continues() -> None:
    registry = make_registry(
        RuleDefinition(id="explode", inspect=ExplodingRule),
        RuleDefinition(id="rec", inspect=RecordingRule),
    )

    messages = InspectionEngine(registry).inspect([Report({}, filepath="r.json")]).to_list()

    assert messages[0].rule_id == "explode"
    assert messages[0].severity is Severity.ERROR
    assert messages[0].message == "boom"
    assert messages[0].data == {"error": "ValueError"}
    assert [m.rule_id for m in messages[1:]] == ["rec", "rec"]


def test_error_policy_abort_skips_failed_rule() -> None:
    registry = make_registry(
        RuleDefinition(id="explode", inspect=ExplodingRule),
        RuleDefinition(id="rec", inspect=RecordingRule),
    )
    options = InspectOptions(error_policy=ErrorPolicy.ABORT)

    messages = InspectionEngine(registry).inspect([Report({})], options=options).to_list()

    assert [m.rule_id for m in messages] == ["rec", "rec"]


def test_error_policy_raise_propagates() -> None:
    registry = make_registry(RuleDefinition(id="explode", inspect=ExplodingRule))
    options = InspectOptions(error_policy="raise")
    stream = InspectionEngine(registry).inspect([Report({}, filepath="r.json")], options=options)

    with pytest.raises(RuleInspectionError) as excinfo:
        stream.to_list()

    assert excinfo.value.rule_id == "explode"
    assert stream.closed


def test_invalid_sort_direction() -> None:
    with pytest.raises(ConfigValidationError):
        InspectOptions(sort_direction="sideways")


def test_to_message_keeps_explicit_fields() -> None:
    explicit = Message("hi", severity="warning", rule_id="other", filename="x.json")

    message = to_message(explicit, "rule", "y.json")

    assert (message.rule_id, message.filename) == ("other", "x.json")


def test_to_message_rejects_unknown_payload() -> None:
    with pytest.raises(TypeError):
        to_message(42, "rule")


def test_sort_messages_by_field_with_missing_last() -> None:
    messages = [
        Message("b", filename="b.json"),
        Message("none"),
        Message("a", filename="a.json"),
    ]

    assert [m.message for m in sort_messages(messages, "filepath")] == ["a", "b", "none"]
    assert [m.message for m in sort_messages(messages, "filename", "desc")] == ["b", "a", "none"]


def test_sort_messages_by_severity_and_data() -> None:
    messages = [
        Message("err", severity="error", data={"usage": 3}),
        Message("info", severity="info", data={"usage": 10}),
        Message("warn", severity="warning"),
    ]

    assert [m.message for m in sort_messages(messages, "severity")] == ["info", "warn", "err"]
    assert [m.message for m in sort_messages(messages, "usage")] == ["err", "info", "warn"]
