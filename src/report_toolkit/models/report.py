"""Immutable report tree used by every engine."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional

from ..errors import MalformedReportError

_EMPTY: Mapping[str, Any] = MappingProxyType({})


def freeze(value: Any, _seen: frozenset[int] = frozenset()) -> Any:
    """Return a read-only deep copy of ``value``.

    Mappings become :class:`types.MappingProxyType` and lists become tuples.
    Cyclic input raises :class:`MalformedReportError`.
    """

    if isinstance(value, (str, bytes, int, float, bool)) or value is None:
        return value

    if id(value) in _seen:
        raise MalformedReportError("Report contains a cyclic reference", value=value)

    if isinstance(value, Mapping):
        seen = _seen | {id(value)}
        return MappingProxyType({str(key): freeze(item, seen) for key, item in value.items()})

    if isinstance(value, (list, tuple)):
        seen = _seen | {id(value)}
        return tuple(freeze(item, seen) for item in value)

    return value


def thaw(value: Any) -> Any:
    """Inverse of :func:`freeze`; returns plain dicts and lists for serialization."""

    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [thaw(item) for item in value]
    return value


class Report(Mapping[str, Any]):
    """Read-only diagnostic report.

    Instances behave like a nested mapping. Use
    :class:`report_toolkit.normalization.ReportNormalizer` to build one from raw
    JSON so that secrets are redacted.
    """

    __slots__ = ("_data", "filepath", "redacted")

    def __init__(
        self,
        data: Mapping[str, Any],
        *,
        filepath: Optional[str] = None,
        redacted: bool = False,
    ) -> None:
        if not isinstance(data, Mapping):
            raise MalformedReportError(
                f"Report must be a mapping, got {type(data).__name__}", value=data
            )
        object.__setattr__(self, "_data", freeze(data))
        object.__setattr__(self, "filepath", filepath)
        object.__setattr__(self, "redacted", redacted)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Report(filepath={self.filepath!r}, keys={list(self._data)!r})"

    # ------------------------------------------------------------------
    @property
    def header(self) -> Mapping[str, Any]:
        return self._data.get("header") or _EMPTY

    @property
    def resource_usage(self) -> Mapping[str, Any]:
        return self._data.get("resourceUsage") or _EMPTY

    @property
    def shared_objects(self) -> tuple[str, ...]:
        return tuple(self._data.get("sharedObjects") or ())

    @property
    def javascript_stack(self) -> Mapping[str, Any]:
        return self._data.get("javascriptStack") or _EMPTY

    def to_dict(self) -> dict[str, Any]:
        return thaw(self._data)
