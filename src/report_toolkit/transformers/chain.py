"""Resolution, validation and execution of transformer chains."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Sequence

import structlog

from ..errors import ChainTypeMismatchError, ConfigValidationError
from ..models import Config
from ..options import merge_options, schema_defaults
from ..streams import Stream, from_any
from .base import REPORT, STRING, Transformer

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from ..registry import Registry

logger = structlog.get_logger(__name__)

SOURCE_ID = "<source>"


@dataclass(slots=True)
class TransformOptions:
    """Constraints on a chain.

    ``begin_with`` is the type of the source items; ``end_type`` is the type
    the chain must produce, enforced by appending ``default_transformer`` (or
    the registry default for ``end_type``). ``overrides`` holds per-transformer
    options that win over the config.
    """

    begin_with: Optional[str] = REPORT
    end_type: Optional[str] = STRING
    default_transformer: Optional[str] = None
    overrides: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ChainStep:
    transformer: Transformer
    options: Mapping[str, Any] = field(default_factory=dict)


class TransformerChain:
    """An ordered, type-checked sequence of transformers.

    The chain is validated on construction. Each :meth:`execute` builds new
    stages, so no state carries over between executions.
    """

    def __init__(
        self,
        steps: Sequence[ChainStep],
        *,
        begin_with: Optional[str] = None,
        appended_default: bool = False,
    ) -> None:
        self.steps: tuple[ChainStep, ...] = tuple(steps)
        self.begin_with = begin_with
        self.appended_default = appended_default
        validate_steps(self.steps, begin_with=begin_with)

    @classmethod
    def resolve(
        cls,
        registry: "Registry",
        transformer_ids: str | Sequence[str],
        config: Config | None = None,
        options: TransformOptions | None = None,
    ) -> "TransformerChain":
        """Look up, configure and validate the transformers named by ``transformer_ids``."""

        config = config or Config()
        options = options or TransformOptions()
        ids = [transformer_ids] if isinstance(transformer_ids, str) else list(transformer_ids)

        steps = [_configure(registry.transformer(tid), config, options) for tid in ids]
        validate_steps(steps, begin_with=options.begin_with)

        appended_default = False
        current_type = steps[-1].transformer.output_type if steps else options.begin_with
        if options.end_type is not None and current_type != options.end_type:
            default_id = options.default_transformer or registry.default_transformer(
                options.end_type
            )
            if default_id is None:
                raise ConfigValidationError(
                    f"No default transformer registered for end type {options.end_type!r}"
                )
            default = registry.transformer(default_id)
            if current_type is not None and not default.accepts(current_type):
                raise ConfigValidationError(
                    f"Default transformer {default.id!r} cannot accept {current_type!r} "
                    f"to produce end type {options.end_type!r}"
                )
            if default.output_type != options.end_type:
                raise ConfigValidationError(
                    f"Default transformer {default.id!r} outputs {default.output_type!r}, "
                    f"not end type {options.end_type!r}"
                )
            steps.append(_configure(default, config, options))
            appended_default = True

        chain = cls(steps, begin_with=options.begin_with, appended_default=appended_default)
        logger.debug(
            "chain_resolved",
            transformers=chain.ids,
            appended_default=appended_default,
        )
        return chain

    # ------------------------------------------------------------------
    @property
    def ids(self) -> List[str]:
        return [step.transformer.id for step in self.steps]

    @property
    def output_type(self) -> Optional[str]:
        return self.steps[-1].transformer.output_type if self.steps else self.begin_with

    def execute(self, source: Any) -> Stream[Any]:
        """Run ``source`` through every stage; returns a lazy, single-pass stream."""

        stages = [step.transformer.transform(dict(step.options)) for step in self.steps]
        return from_any(source).pipe(*stages)

    def __len__(self) -> int:
        return len(self.steps)

    def __repr__(self) -> str:
        return f"TransformerChain({' -> '.join(self.ids) or '<empty>'})"


def validate_steps(steps: Sequence[ChainStep], *, begin_with: Optional[str] = None) -> None:
    """Raise :class:`ChainTypeMismatchError` unless every adjacent pair is compatible."""

    if steps and begin_with is not None and not steps[0].transformer.accepts(begin_with):
        first = steps[0].transformer
        raise ChainTypeMismatchError(SOURCE_ID, begin_with, first.id, first.input_types)

    for upstream, downstream in zip(steps, steps[1:]):
        if not downstream.transformer.accepts(upstream.transformer.output_type):
            raise ChainTypeMismatchError(
                upstream.transformer.id,
                upstream.transformer.output_type,
                downstream.transformer.id,
                downstream.transformer.input_types,
            )


def _configure(transformer: Transformer, config: Config, options: TransformOptions) -> ChainStep:
    return ChainStep(
        transformer=transformer,
        options=merge_options(
            schema_defaults(transformer.schema),
            config.transformer_options(transformer.id),
            options.overrides.get(transformer.id),
        ),
    )


__all__ = ["ChainStep", "TransformOptions", "TransformerChain", "validate_steps"]
