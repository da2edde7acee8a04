"""Inspection engine and the rule contract."""

from .engine import ErrorPolicy, InspectionEngine, InspectOptions, sort_messages, to_message
from .rule import MessagePayload, RuleDefinition, RuleInstance, RuleMeta, RuleResult

__all__ = [
    "ErrorPolicy",
    "InspectOptions",
    "InspectionEngine",
    "MessagePayload",
    "RuleDefinition",
    "RuleInstance",
    "RuleMeta",
    "RuleResult",
    "sort_messages",
    "to_message",
]
