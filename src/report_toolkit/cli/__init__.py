"""Command-line interface package for report-toolkit."""

from .app import (
    InspectionReport,
    build_parser,
    create_toolkit,
    main,
    render_diff,
    render_messages,
    run,
)

__all__ = [
    "InspectionReport",
    "build_parser",
    "create_toolkit",
    "main",
    "render_diff",
    "render_messages",
    "run",
]
