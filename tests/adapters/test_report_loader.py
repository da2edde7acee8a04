from __future__ import annotations

from pathlib import Path

import pytest

from report_toolkit.adapters import ReportLoader, ReportLoadError

FIXTURES = Path(__file__).resolve().parent.parent / "fixtures"


def test_load_report_from_json_file() -> None:
    report = ReportLoader().load_report(FIXTURES / "report-1.json")

    assert report.filepath == str(FIXTURES / "report-1.json")
    assert report.header["nodejsVersion"] == "v12.11.0"


def test_iter_reports_reads_files_on_demand(tmp_path: Path) -> None:
    missing = tmp_path / "missing.json"
    reports = ReportLoader().iter_reports([FIXTURES / "report-1.json", missing])

    first = next(reports)
    assert first.header["filename"] == "report-1.json"

    with pytest.raises(ReportLoadError):
        next(reports)


def test_invalid_json_raises(tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")

    with pytest.raises(ReportLoadError):
        ReportLoader().load_report(broken)
