"""Presentation layer: console rendering of reports and loop results."""

from quality_gates.presentation.console import (
    ConsoleDashboard,
    format_loop_summary,
    format_summary,
)

__all__ = [
    "ConsoleDashboard",
    "format_loop_summary",
    "format_summary",
]
