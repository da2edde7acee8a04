"""Data models for reports, inspection messages, diff results and config."""

from .config import Config
from .diff_result import DiffOp, DiffResult
from .message import Message, Severity
from .report import Report, freeze, thaw

__all__ = [
    "Config",
    "DiffOp",
    "DiffResult",
    "Message",
    "Report",
    "Severity",
    "freeze",
    "thaw",
]
