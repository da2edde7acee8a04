from __future__ import annotations

import pytest

from report_toolkit.errors import MissingPropertyError
from report_toolkit.models import Report, Severity
from report_toolkit.rules import CpuUsageInspector, cpu_usage


def make_report(percent: float, cpus: int = 2, filepath: str = "report.json") -> Report:
    return Report(
        {
            "header": {"cpus": [{"model": "cpu"}] * cpus},
            "resourceUsage": {"cpuConsumptionPercent": percent},
        },
        filepath=filepath,
    )


def test_mean_mode_reports_once_on_complete() -> None:
    inspector = CpuUsageInspector({"mode": "mean", "min": 0, "max": 50})

    assert inspector.next(make_report(25)) is None
    assert inspector.next(make_report(0)) is None
    result = inspector.complete()

    assert result["severity"] is Severity.INFO
    assert result["data"] == {"max": 50, "min": 0, "mode": "mean", "usage": 6.25}
    assert result["message"] == (
        "Mean CPU consumption percent (6.25%) is within the allowed range of 0-50%"
    )


def test_usage_is_divided_across_cpus() -> None:
    inspector = CpuUsageInspector({"mode": "all"})

    result = inspector.next(make_report(25))

    assert result["data"]["usage"] == 12.5
    assert result["message"].startswith("Report CPU consumption percent (12.5%)")


def test_out_of_range_usage_has_no_explicit_severity() -> None:
    inspector = CpuUsageInspector({"mode": "all", "max": 50})

    result = inspector.next(make_report(150))

    assert "severity" not in result
    assert "outside the allowed range of 0-50%" in result["message"]


def test_zero_max_is_kept() -> None:
    inspector = CpuUsageInspector({"mode": "all", "max": 0})

    result = inspector.next(make_report(25))

    assert result["data"]["max"] == 0
    assert "outside the allowed range of 0-0%" in result["message"]


def test_null_resource_usage_raises_missing_property() -> None:
    report = Report({"header": {"cpus": [{"model": "cpu"}]}, "resourceUsage": None})

    with pytest.raises(MissingPropertyError):
        CpuUsageInspector().next(report)


@pytest.mark.parametrize(("mode", "expected"), [("min", 5.0), ("max", 40.0)])
def test_min_and_max_modes(mode: str, expected: float) -> None:
    inspector = CpuUsageInspector({"mode": mode})
    inspector.next(make_report(10))
    inspector.next(make_report(80))

    assert inspector.complete()["data"]["usage"] == expected


def test_missing_cpus_raises_with_filepath() -> None:
    inspector = CpuUsageInspector()
    report = Report({"header": {}, "resourceUsage": {"cpuConsumptionPercent": 1}}, filepath="x.json")

    with pytest.raises(MissingPropertyError) as excinfo:
        inspector.next(report)

    assert str(excinfo.value).startswith('Property "header.cpus" missing in report at x.json')


def test_unknown_mode_rejected() -> None:
    with pytest.raises(ValueError):
        CpuUsageInspector({"mode": "median"})


def test_definition_metadata() -> None:
    assert cpu_usage.id == "cpu-usage"
    assert cpu_usage.description == "Assert CPU usage % is within a range"
    assert cpu_usage.meta.constants["MODE_ALL"] == "all"
