"""Contract implemented by inspection rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol, Union, runtime_checkable

from ..errors import PluginLoadError
from ..models import Message

MessagePayload = Union[str, Mapping[str, Any], Message]
RuleResult = Union[None, MessagePayload, Iterable[MessagePayload]]


@runtime_checkable
class RuleInstance(Protocol):
    """Stateful evaluation of one rule over the contexts of one report.

    ``next`` is called once per context and ``complete`` exactly once after
    the last context. Either may return nothing, one message payload, or a
    sequence of payloads.
    """

    def next(self, context: Any) -> RuleResult: ...

    def complete(self) -> RuleResult: ...


@dataclass(frozen=True, slots=True)
class RuleMeta:
    docs: Mapping[str, Any] = field(default_factory=dict)
    schema: Mapping[str, Any] = field(default_factory=dict)
    constants: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class RuleDefinition:
    """A registered rule: an id, metadata and a factory for rule instances."""

    id: str
    inspect: Callable[[Mapping[str, Any]], RuleInstance]
    meta: RuleMeta = field(default_factory=RuleMeta)

    @property
    def description(self) -> str:
        return str(self.meta.docs.get("description", ""))

    @classmethod
    def from_object(cls, obj: Any, *, rule_id: Optional[str] = None) -> "RuleDefinition":
        """Build a definition from any object exposing ``id``, ``meta`` and ``inspect``.

        This lets plugins export plain modules or namespaces as rules.
        """

        if isinstance(obj, RuleDefinition):
            return obj

        identifier = rule_id or getattr(obj, "id", None)
        inspect = getattr(obj, "inspect", None)
        if not identifier or not callable(inspect):
            raise PluginLoadError(f"Object {obj!r} does not implement the rule contract")

        meta = getattr(obj, "meta", None) or {}
        if not isinstance(meta, RuleMeta):
            meta = RuleMeta(
                docs=dict(meta.get("docs") or {}),
                schema=dict(meta.get("schema") or {}),
                constants=dict(meta.get("constants") or {}),
            )
        return cls(id=str(identifier), inspect=inspect, meta=meta)


__all__ = ["MessagePayload", "RuleDefinition", "RuleInstance", "RuleMeta", "RuleResult"]
