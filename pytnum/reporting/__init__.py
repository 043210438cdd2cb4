"""Reporting module for pytnum."""

from pytnum.reporting.formatters import (
    Formatter,
    JSONFormatter,
    TextFormatter,
    format_report,
)

__all__ = [
    "Formatter",
    "TextFormatter",
    "JSONFormatter",
    "format_report",
]
