"""Transformers that consume reports: redaction, filtering and stack hashing."""

from __future__ import annotations

import hashlib
from typing import Any, Iterator, List, Mapping

from ..models import Report, thaw
from ..normalization import ReportNormalizer
from ..paths import SEPARATOR, flatten, is_sequence, join_path, matches_prefix
from .base import OBJECT, REPORT, Stage, Transformer


def _as_paths(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(path) for path in value]


# redact ---------------------------------------------------------------------
def _redact(options: Mapping[str, Any]) -> Stage:
    normalizer = ReportNormalizer(show_secrets_unsafe=False)

    def stage(upstream: Iterator[Any]) -> Iterator[Any]:
        for report in upstream:
            yield normalizer.normalize(report, filepath=getattr(report, "filepath", None))

    return stage


redact = Transformer(
    id="redact",
    input_types=(REPORT,),
    output_type=REPORT,
    transform=_redact,
    docs={"description": "Redact secrets from reports"},
)


# filter ---------------------------------------------------------------------
def filter_object(value: Any, include: List[str], exclude: List[str], path: str = "") -> Any:
    """Return a plain copy of ``value`` keeping ``include`` paths and dropping ``exclude`` paths."""

    if isinstance(value, Mapping):
        items = list(value.items())
    elif is_sequence(value):
        items = list(enumerate(value))
    else:
        return thaw(value)

    kept = []
    for key, item in items:
        child = join_path(path, key)
        if matches_prefix(child, exclude):
            continue
        if include and not (
            matches_prefix(child, include)
            or any(prefix.startswith(child + SEPARATOR) for prefix in include)
        ):
            continue
        kept.append((key, filter_object(item, include, exclude, child)))

    if isinstance(value, Mapping):
        return dict(kept)
    return [item for _, item in kept]


def _filter(options: Mapping[str, Any]) -> Stage:
    include = _as_paths(options.get("include"))
    exclude = _as_paths(options.get("exclude"))

    def stage(upstream: Iterator[Any]) -> Iterator[Any]:
        for item in upstream:
            yield filter_object(item, include, exclude)

    return stage


filter_ = Transformer(
    id="filter",
    input_types=(REPORT, OBJECT),
    output_type=OBJECT,
    transform=_filter,
    docs={"description": "Keep or drop properties by dotted path"},
    schema={
        "type": "object",
        "properties": {
            "include": {"type": ["string", "array"], "default": []},
            "exclude": {"type": ["string", "array"], "default": []},
        },
    },
)


# numeric --------------------------------------------------------------------
def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def numeric_object(value: Any) -> Any:
    """Return a plain copy of ``value`` keeping numeric leaves; ``None`` if nothing is left."""

    if isinstance(value, Mapping):
        kept = {key: numeric_object(item) for key, item in value.items()}
        return {key: item for key, item in kept.items() if item is not None} or None
    if is_sequence(value):
        items = [numeric_object(item) for item in value]
        return [item for item in items if item is not None] or None
    return value if is_number(value) else None


def _numeric(options: Mapping[str, Any]) -> Stage:
    flat = bool(options.get("flatten", True))

    def stage(upstream: Iterator[Any]) -> Iterator[Any]:
        for item in upstream:
            if flat:
                yield {path: value for path, value in flatten(item).items() if is_number(value)}
            else:
                yield numeric_object(item) or {}

    return stage


numeric = Transformer(
    id="numeric",
    input_types=(REPORT, OBJECT),
    output_type=OBJECT,
    transform=_numeric,
    docs={"description": "Keep only numeric values"},
    schema={
        "type": "object",
        "properties": {
            "flatten": {
                "type": "boolean",
                "default": True,
                "description": "Emit {dotted.path: number} instead of the pruned tree",
            },
        },
    },
)


# stack-hash -----------------------------------------------------------------
def stack_hash_of(report: Report) -> dict[str, Any]:
    stack = report.javascript_stack
    message = stack.get("message")
    frames = [str(frame).strip() for frame in stack.get("stack") or ()]
    digest = hashlib.sha1("\n".join([str(message or ""), *frames]).encode("utf-8"))
    return {
        "dumpEventTime": report.header.get("dumpEventTime"),
        "filepath": report.filepath,
        "message": message,
        "sha1": digest.hexdigest(),
        "stack": frames,
    }


def _stack_hash(options: Mapping[str, Any]) -> Stage:
    def stage(upstream: Iterator[Any]) -> Iterator[Any]:
        for report in upstream:
            yield stack_hash_of(report)

    return stage


stack_hash = Transformer(
    id="stack-hash",
    input_types=(REPORT,),
    output_type=OBJECT,
    transform=_stack_hash,
    docs={"description": "Compute a hash of the JavaScript stack for grouping reports"},
)
