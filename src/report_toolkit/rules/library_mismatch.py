"""Identify shared libraries whose version conflicts with a bundled component."""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional

from ..inspection.rule import RuleDefinition, RuleMeta
from ..models import Report, Severity

VERSION_REGEXP = re.compile(r"(\d+(?:\.\d+)+[a-z]?)")


class LibraryMismatchInspector:
    def __init__(self, config: Optional[Mapping[str, Any]] = None) -> None:
        config = config or {}
        self.ignored = set(config.get("ignore") or ())

    def next(self, context: Report) -> List[dict[str, Any]]:
        component_versions: Mapping[str, str] = context.header.get("componentVersions") or {}
        shared_objects = context.shared_objects

        messages: List[dict[str, Any]] = []
        for component, version in component_versions.items():
            if component in self.ignored:
                continue
            for filepath in shared_objects:
                match = VERSION_REGEXP.search(filepath)
                if component in filepath and match and match.group(1) != version:
                    messages.append(
                        {
                            "message": (
                                f"Custom shared library at {filepath} in use conflicting "
                                f"with {component}@{version}"
                            ),
                            "severity": Severity.WARNING,
                            "data": {
                                "component": component,
                                "version": version,
                                "sharedObject": filepath,
                                "sharedObjectVersion": match.group(1),
                            },
                        }
                    )
        return messages

    def complete(self) -> None:
        return None


library_mismatch = RuleDefinition(
    id="library-mismatch",
    inspect=LibraryMismatchInspector,
    meta=RuleMeta(
        docs={
            "category": "runtime",
            "description": "Identify potential library version mismatches",
        },
        schema={
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "ignore": {"type": "array", "items": {"type": "string"}, "minItems": 1},
            },
        },
    ),
)
