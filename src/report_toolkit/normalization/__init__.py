"""Normalization of raw report payloads."""

from .report_normalizer import REDACTED, ReportNormalizer, is_secret_key, redact

__all__ = ["REDACTED", "ReportNormalizer", "is_secret_key", "redact"]
