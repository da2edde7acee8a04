"""Structural comparison of two report trees."""

from __future__ import annotations

import math
from typing import Any, Iterable, Iterator, List, Mapping, Sequence

import structlog

from ..errors import DiffComparisonError
from ..models import DiffOp, DiffResult
from ..paths import SEPARATOR, is_sequence, join_path, matches_prefix
from ..streams import Stream

logger = structlog.get_logger(__name__)


class PropertyFilter:
    """Decides which paths the diff walk skips.

    An entry excludes the path it names and everything beneath it. Entries
    without a separator also exclude any key of that name at any depth.
    """

    def __init__(self, properties: Iterable[str] = ()) -> None:
        self.prefixes: List[str] = [prop for prop in properties if prop]
        self.names = {prop for prop in self.prefixes if SEPARATOR not in prop}

    def excludes(self, path: str, key: object) -> bool:
        return str(key) in self.names or matches_prefix(path, self.prefixes)


class DiffEngine:
    """Walk two trees depth first and yield one :class:`DiffResult` per difference.

    Keys are visited in the second tree's order, followed by keys only present
    in the first tree. Sequences are compared index by index; extra indices
    are additions or removals. Nothing is sorted afterwards.
    """

    def diff(
        self,
        report1: Mapping[str, Any],
        report2: Mapping[str, Any],
        filter_properties: Iterable[str] = (),
    ) -> Stream[DiffResult]:
        if not isinstance(report1, Mapping) or not isinstance(report2, Mapping):
            raise DiffComparisonError("Both reports must be mappings to be compared")

        prop_filter = PropertyFilter(filter_properties)
        logger.debug(
            "diff_started",
            report1=getattr(report1, "filepath", None),
            report2=getattr(report2, "filepath", None),
            filter_properties=prop_filter.prefixes,
        )
        return Stream(self._compare(report1, report2, "", prop_filter, frozenset(), frozenset()))

    # ------------------------------------------------------------------
    def _compare(
        self,
        old: Any,
        new: Any,
        path: str,
        prop_filter: PropertyFilter,
        old_seen: frozenset[int],
        new_seen: frozenset[int],
    ) -> Iterator[DiffResult]:
        both_mappings = isinstance(old, Mapping) and isinstance(new, Mapping)
        both_sequences = is_sequence(old) and is_sequence(new)
        if not (both_mappings or both_sequences):
            if not _leaf_equal(old, new):
                yield DiffResult(DiffOp.REPLACE, path, old_value=old, new_value=new)
            return

        if id(old) in old_seen or id(new) in new_seen:
            raise DiffComparisonError(f"Cyclic structure detected at {path or '<root>'}")
        old_seen = old_seen | {id(old)}
        new_seen = new_seen | {id(new)}

        if both_mappings:
            children = self._mapping_children(old, new)
        else:
            children = self._sequence_children(old, new)

        for key, in_old, in_new in children:
            child = join_path(path, key)
            if prop_filter.excludes(child, key):
                continue
            if not in_old:
                yield DiffResult(DiffOp.ADD, child, new_value=new[key])
            elif not in_new:
                yield DiffResult(DiffOp.REMOVE, child, old_value=old[key])
            else:
                yield from self._compare(
                    old[key], new[key], child, prop_filter, old_seen, new_seen
                )

    def _mapping_children(
        self, old: Mapping[str, Any], new: Mapping[str, Any]
    ) -> Iterator[tuple[Any, bool, bool]]:
        for key in new:
            yield key, key in old, True
        for key in old:
            if key not in new:
                yield key, True, False

    def _sequence_children(
        self, old: Sequence[Any], new: Sequence[Any]
    ) -> Iterator[tuple[int, bool, bool]]:
        for index in range(max(len(old), len(new))):
            yield index, index < len(old), index < len(new)


def _leaf_equal(old: Any, new: Any) -> bool:
    if isinstance(old, float) and isinstance(new, float) and math.isnan(old) and math.isnan(new):
        return True
    if isinstance(old, bool) or isinstance(new, bool):
        return type(old) is type(new) and old == new
    return bool(old == new)


__all__ = ["DiffEngine", "PropertyFilter"]
