from __future__ import annotations

from pathlib import Path

import pytest

from report_toolkit.adapters import ReportLoader
from report_toolkit.diff import DiffEngine, PropertyFilter
from report_toolkit.errors import DiffComparisonError
from report_toolkit.models import DiffOp, DiffResult

FIXTURES = Path(__file__).resolve().parent.parent / "fixtures"


@pytest.fixture(scope="module")
def reports():
    loader = ReportLoader()
    return loader.load_report(FIXTURES / "report-1.json"), loader.load_report(
        FIXTURES / "report-2.json"
    )


def diff(old, new, filter_properties=()) -> list[DiffResult]:
    return DiffEngine().diff(old, new, filter_properties).to_list()


def test_identical_reports_have_no_differences(reports) -> None:
    first, _ = reports

    assert diff(first, first) == []


def test_fixture_diff_in_walk_order(reports) -> None:
    first, second = reports

    results = diff(first, second)

    assert [(result.op, result.path) for result in results] == [
        (DiffOp.REPLACE, "header.filename"),
        (DiffOp.REPLACE, "header.dumpEventTime"),
        (DiffOp.REPLACE, "header.dumpEventTimestamp"),
        (DiffOp.REPLACE, "header.processId"),
        (DiffOp.ADD, "header.commandLine.2"),
        (DiffOp.REPLACE, "javascriptStack.message"),
        (DiffOp.REPLACE, "javascriptStack.stack.0"),
        (DiffOp.ADD, "javascriptStack.stack.1"),
        (DiffOp.REPLACE, "resourceUsage.userCpuSeconds"),
        (DiffOp.REPLACE, "resourceUsage.kernelCpuSeconds"),
        (DiffOp.REPLACE, "resourceUsage.cpuConsumptionPercent"),
        (DiffOp.REPLACE, "sharedObjects.1"),
        (DiffOp.REMOVE, "sharedObjects.2"),
    ]
    assert results[3] == DiffResult(DiffOp.REPLACE, "header.processId", 74417, 74420)
    assert results[4].new_value == "--inspect"
    assert results[-1].old_value == "/usr/lib/libz.1.2.11.dylib"


def test_redacted_secrets_do_not_show_as_differences(reports) -> None:
    first, second = reports

    assert not [r for r in diff(first, second) if r.path.startswith("environmentVariables")]


def test_swapping_arguments_mirrors_results() -> None:
    old = {"a": 1, "b": {"c": [1, 2]}, "gone": True}
    new = {"a": 2, "b": {"c": [1]}, "added": None}

    forward = {result.path: result for result in diff(old, new)}
    backward = {result.path: result for result in diff(new, old)}

    assert forward.keys() == backward.keys()
    for path, result in forward.items():
        assert backward[path] == result.mirrored()


def test_filter_properties_by_prefix_and_name(reports) -> None:
    first, second = reports

    paths = [r.path for r in diff(first, second, ["header", "stack"])]

    assert paths == [
        "javascriptStack.message",
        "resourceUsage.userCpuSeconds",
        "resourceUsage.kernelCpuSeconds",
        "resourceUsage.cpuConsumptionPercent",
        "sharedObjects.1",
        "sharedObjects.2",
    ]


def test_filter_dotted_path_only_matches_prefix() -> None:
    prop_filter = PropertyFilter(["header.processId"])

    assert prop_filter.excludes("header.processId", "processId")
    assert not prop_filter.excludes("other.processId", "processId")


def test_booleans_are_not_equal_to_numbers() -> None:
    assert diff({"flag": True}, {"flag": 1}) == [
        DiffResult(DiffOp.REPLACE, "flag", old_value=True, new_value=1)
    ]


def test_nan_leaves_compare_equal_to_themselves() -> None:
    report = {"resourceUsage": {"cpuConsumptionPercent": float("nan")}}

    assert diff(report, report) == []
    changed = diff(report, {"resourceUsage": {"cpuConsumptionPercent": 1.0}})
    assert [(result.op, result.path) for result in changed] == [
        (DiffOp.REPLACE, "resourceUsage.cpuConsumptionPercent")
    ]


def test_mapping_replaced_by_scalar() -> None:
    assert diff({"a": {"b": 1}}, {"a": "x"}) == [
        DiffResult(DiffOp.REPLACE, "a", old_value={"b": 1}, new_value="x")
    ]


def test_cyclic_input_raises() -> None:
    cyclic: dict = {"a": 1}
    cyclic["self"] = cyclic

    with pytest.raises(DiffComparisonError):
        diff(cyclic, {"a": 1, "self": {"a": 1, "self": {}}})


def test_non_mapping_input_raises() -> None:
    with pytest.raises(DiffComparisonError):
        DiffEngine().diff(["a"], {"a": 1})


def test_diff_is_lazy() -> None:
    stream = DiffEngine().diff({"a": 1, "b": 2}, {"a": 2, "b": 3})

    assert next(stream).path == "a"
    stream.close()
    assert list(stream) == []


def test_filter_single_dotted_path(reports) -> None:
    first, second = reports

    paths = [r.path for r in diff(first, second, ["header.dumpEventTimestamp"])]

    assert "header.dumpEventTimestamp" not in paths
    assert "header.dumpEventTime" in paths
