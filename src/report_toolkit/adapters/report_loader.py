from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Iterable, Iterator, List

import structlog

from ..errors import ReportLoadError
from ..models import Report
from ..normalization import ReportNormalizer

logger = structlog.get_logger(__name__)


class ReportLoader:
    """Load diagnostic reports from JSON files on disk.

    Files are only opened when the corresponding report is pulled from
    :meth:`iter_reports`, so abandoning the iteration stops further reads.
    """

    def __init__(self, *, normalizer: ReportNormalizer | None = None) -> None:
        self.normalizer = normalizer or ReportNormalizer()

    def iter_reports(self, paths: Iterable[str | os.PathLike[str]]) -> Iterator[Report]:
        """Yield one report per path, reading each file on demand."""

        for path in paths:
            yield self.load_report(path)

    def load_reports(self, paths: Iterable[str | os.PathLike[str]]) -> List[Report]:
        return list(self.iter_reports(paths))

    def load_report(self, path: str | os.PathLike[str]) -> Report:
        resolved = Path(path)
        raw = self._load_json_artifact(resolved)
        logger.debug("report_loaded", filepath=str(resolved))
        return self.normalizer.normalize(raw, filepath=str(resolved))

    # Artifact ingestion helpers -------------------------------------------------
    def _load_json_artifact(self, path: Path) -> object:
        if not path.exists():
            raise ReportLoadError(f"Report file not found: {path}")

        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except json.JSONDecodeError as exc:
            raise ReportLoadError(f"Invalid JSON in report file: {path}") from exc
        except OSError as exc:  # pragma: no cover - filesystem errors surfaced to caller
            raise ReportLoadError(f"Failed to read report file {path}") from exc


__all__ = ["ReportLoader", "ReportLoadError"]
