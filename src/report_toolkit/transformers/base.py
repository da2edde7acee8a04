"""Contract implemented by transformers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional

from ..errors import PluginLoadError

REPORT = "report"
OBJECT = "object"
STRING = "string"

Stage = Callable[[Iterator[Any]], Iterable[Any]]


@dataclass(frozen=True, slots=True)
class Transformer:
    """A typed converter stage.

    ``transform(options)`` returns a fresh stage for each chain execution; any
    state the stage keeps lives only as long as that execution.
    """

    id: str
    input_types: tuple[str, ...]
    output_type: str
    transform: Callable[[Mapping[str, Any]], Stage]
    docs: Mapping[str, Any] = field(default_factory=dict)
    schema: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.input_types, str):
            object.__setattr__(self, "input_types", (self.input_types,))
        else:
            object.__setattr__(self, "input_types", tuple(self.input_types))

    def accepts(self, item_type: str) -> bool:
        return item_type in self.input_types

    @property
    def description(self) -> str:
        return str(self.docs.get("description", ""))

    @classmethod
    def from_object(cls, obj: Any, *, transformer_id: Optional[str] = None) -> "Transformer":
        """Build a transformer from an object exposing the transformer attributes."""

        if isinstance(obj, Transformer):
            return obj

        identifier = transformer_id or getattr(obj, "id", None)
        transform = getattr(obj, "transform", None)
        input_types = getattr(obj, "input_types", None) or getattr(obj, "input_type", None)
        output_type = getattr(obj, "output_type", None)
        if not identifier or not callable(transform) or not input_types or not output_type:
            raise PluginLoadError(f"Object {obj!r} does not implement the transformer contract")

        meta = getattr(obj, "meta", None) or {}
        return cls(
            id=str(identifier),
            input_types=input_types,
            output_type=str(output_type),
            transform=transform,
            docs=dict(meta.get("docs") or {}),
            schema=dict(meta.get("schema") or {}),
        )


__all__ = ["OBJECT", "REPORT", "STRING", "Stage", "Transformer"]
