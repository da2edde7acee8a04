"""Transformer contract, chain and built-in transformers."""

from .base import OBJECT, REPORT, STRING, Stage, Transformer
from .chain import ChainStep, TransformerChain, TransformOptions, validate_steps
from .formats import csv_, json_, newline, table
from .report_stages import filter_, numeric, redact, stack_hash

BUILTIN_TRANSFORMERS = (csv_, filter_, json_, newline, numeric, redact, stack_hash, table)

DEFAULT_TRANSFORMERS = {STRING: json_.id}

__all__ = [
    "BUILTIN_TRANSFORMERS",
    "ChainStep",
    "DEFAULT_TRANSFORMERS",
    "OBJECT",
    "REPORT",
    "STRING",
    "Stage",
    "TransformOptions",
    "Transformer",
    "TransformerChain",
    "validate_steps",
]
