"""Conversion helpers that turn raw diagnostic report JSON into :class:`Report` objects."""

from __future__ import annotations

import json
import re
from typing import Any, Mapping, Optional

from ..errors import MalformedReportError
from ..models import Report

REDACTED = "[REDACTED]"

_SECRET_KEY = re.compile(
    r"(?:^|[_\-.])(?:api[_-]?key|auth|credentials?|key|pass(?:word|wd)?|pwd|secret|token)s?$",
    re.IGNORECASE,
)


class ReportNormalizer:
    """Normalize raw report payloads into :class:`Report` instances."""

    def __init__(self, *, show_secrets_unsafe: bool = False) -> None:
        self.show_secrets_unsafe = show_secrets_unsafe

    def normalize(self, raw: Any, *, filepath: Optional[str] = None) -> Report:
        """Return a report for ``raw`` (a mapping, a JSON string or an existing report)."""

        if isinstance(raw, Report):
            if raw.redacted or self.show_secrets_unsafe:
                return raw
            return Report(redact(raw), filepath=raw.filepath, redacted=True)

        data = self._parse(raw)
        if not isinstance(data, Mapping):
            raise MalformedReportError(
                f"Report at {filepath or '(unknown)'} must be a JSON object", value=raw
            )

        if self.show_secrets_unsafe:
            return Report(data, filepath=filepath, redacted=False)
        return Report(redact(data), filepath=filepath, redacted=True)

    # ------------------------------------------------------------------
    def _parse(self, raw: Any) -> Any:
        if isinstance(raw, (str, bytes)):
            try:
                return json.loads(raw)
            except json.JSONDecodeError as exc:
                raise MalformedReportError("Report is not valid JSON", value=raw) from exc
        return raw


def is_secret_key(key: str) -> bool:
    return bool(_SECRET_KEY.search(key))


def redact(value: Any, _seen: frozenset[int] = frozenset()) -> Any:
    """Return a copy of ``value`` with secret-looking keys replaced by ``[REDACTED]``."""

    if isinstance(value, (Mapping, list, tuple)):
        if id(value) in _seen:
            raise MalformedReportError("Report contains a cyclic reference", value=value)
        _seen = _seen | {id(value)}

    if isinstance(value, Mapping):
        return {
            key: REDACTED if is_secret_key(str(key)) and item is not None else redact(item, _seen)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact(item, _seen) for item in value]
    return value
