"""Transformers that render objects as text."""

from __future__ import annotations

import csv
import io
import json
from typing import Any, Iterator, List, Mapping, Optional, Sequence

from ..models import thaw
from ..paths import flatten
from .base import OBJECT, REPORT, STRING, Stage, Transformer


def _cell(value: Any) -> str:
    value = thaw(value)
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _row_values(item: Any, flat: bool) -> Mapping[str, Any]:
    if not isinstance(item, Mapping):
        return {"value": item}
    return flatten(item) if flat else item


# json -----------------------------------------------------------------------
def _json(options: Mapping[str, Any]) -> Stage:
    indent = 2 if options.get("pretty") else None

    def stage(upstream: Iterator[Any]) -> Iterator[str]:
        for item in upstream:
            yield json.dumps(thaw(item), indent=indent)

    return stage


json_ = Transformer(
    id="json",
    input_types=(OBJECT, REPORT),
    output_type=STRING,
    transform=_json,
    docs={"description": "Serialize each item as JSON"},
    schema={"type": "object", "properties": {"pretty": {"type": "boolean", "default": False}}},
)


# csv ------------------------------------------------------------------------
def _csv_line(values: Sequence[str], delimiter: str) -> str:
    buffer = io.StringIO()
    csv.writer(buffer, delimiter=delimiter, lineterminator="").writerow(values)
    return buffer.getvalue()


def _csv(options: Mapping[str, Any]) -> Stage:
    flat = bool(options.get("flatten", True))
    delimiter = str(options.get("delimiter") or ",")
    fields = list(options.get("fields") or [])

    def stage(upstream: Iterator[Any]) -> Iterator[str]:
        columns: Optional[List[str]] = fields or None
        if columns:
            yield _csv_line(columns, delimiter)
        for item in upstream:
            row = _row_values(item, flat)
            if columns is None:
                columns = list(row)
                yield _csv_line(columns, delimiter)
            yield _csv_line([_cell(row.get(column)) for column in columns], delimiter)

    return stage


csv_ = Transformer(
    id="csv",
    input_types=(OBJECT, REPORT),
    output_type=STRING,
    transform=_csv,
    docs={
        "description": (
            "Render objects as CSV. Without `fields` the first item decides the columns "
            "and keys that only appear in later items are dropped"
        )
    },
    schema={
        "type": "object",
        "properties": {
            "flatten": {"type": "boolean", "default": True},
            "delimiter": {"type": "string", "default": ","},
            "fields": {
                "type": "array",
                "default": [],
                "description": "Column names; defaults to the keys of the first item",
            },
        },
    },
)


# newline --------------------------------------------------------------------
def _newline(options: Mapping[str, Any]) -> Stage:
    newline = str(options.get("newline", "\n"))

    def stage(upstream: Iterator[Any]) -> Iterator[str]:
        for item in upstream:
            yield f"{item}{newline}"

    return stage


newline = Transformer(
    id="newline",
    input_types=(STRING,),
    output_type=STRING,
    transform=_newline,
    docs={"description": "Terminate each string with a newline"},
    schema={"type": "object", "properties": {"newline": {"type": "string", "default": "\n"}}},
)


# table ----------------------------------------------------------------------
def render_table(rows: Sequence[Sequence[str]]) -> str:
    """Render ``rows`` (the first being the headers) as a simple text table."""

    headers = rows[0]
    widths = [max(len(row[idx]) for row in rows) for idx in range(len(headers))]

    def format_row(values: Sequence[str]) -> str:
        return "  ".join(value.ljust(width) for value, width in zip(values, widths)).rstrip()

    lines = [format_row(headers)]
    lines.append("  ".join("=" * width for width in widths))
    for row in rows[1:]:
        lines.append(format_row(row))
    return "\n".join(lines)


def _table(options: Mapping[str, Any]) -> Stage:
    fields = list(options.get("fields") or [])

    def stage(upstream: Iterator[Any]) -> Iterator[str]:
        items = [_row_values(item, True) for item in upstream]
        if not items:
            return

        if len(items) == 1 and not fields:
            rows = [("Field", "Value")]
            rows.extend((str(key), _cell(value)) for key, value in items[0].items())
            yield render_table(rows)
            return

        columns = list(fields)
        if not columns:
            for item in items:
                columns.extend(key for key in item if key not in columns)
        rows = [tuple(columns)]
        rows.extend(tuple(_cell(item.get(column)) for column in columns) for item in items)
        yield render_table(rows)

    return stage


table = Transformer(
    id="table",
    input_types=(OBJECT, REPORT),
    output_type=STRING,
    transform=_table,
    docs={"description": "Render all items as one text table"},
    schema={"type": "object", "properties": {"fields": {"type": "array", "default": []}}},
)
