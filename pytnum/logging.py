"""Console logger for the pytnum drivers.
The comparator, the refuter and the CLI report through one global
``TnumLogger``. Entries carry a category and keyword context fields, are kept
in memory for inspection, and are written to the stream when their level is
enabled. Arithmetic trace events reach the logger through
``install_trace_hook``.
"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Iterator, TextIO

from pytnum.core.trace import TraceHook, set_trace_hook


class LogLevel(IntEnum):
    """Log levels for pytnum."""

    QUIET = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3
    TRACE = 4


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    GRAY = "\033[90m"


# Marker and color printed in front of each level; QUIET entries have none.
_LEVEL_MARKS: dict[LogLevel, tuple[str, str]] = {
    LogLevel.NORMAL: ("•", Colors.RESET),
    LogLevel.VERBOSE: ("→", Colors.BLUE),
    LogLevel.DEBUG: ("⚙", Colors.MAGENTA),
    LogLevel.TRACE: ("⋯", Colors.GRAY),
}


def supports_color(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def paint(text: str, color: str, enabled: bool) -> str:
    if not enabled:
        return text
    return f"{color}{text}{Colors.RESET}"


@dataclass
class LogEntry:
    """One logged event."""

    level: LogLevel
    message: str
    category: str = "general"
    timestamp: float = field(default_factory=time.time)
    context: dict[str, Any] = field(default_factory=dict)

    def format(self, color: bool = True, show_time: bool = True) -> str:
        """Render as ``[time] mark [category] message key=value ...``."""
        parts = []
        if show_time:
            stamp = time.strftime("%H:%M:%S", time.localtime(self.timestamp))
            parts.append(paint(stamp, Colors.GRAY, color))
        if self.level in _LEVEL_MARKS:
            mark, mark_color = _LEVEL_MARKS[self.level]
            parts.append(paint(mark, mark_color, color))
        if self.category != "general":
            parts.append(paint(f"[{self.category}]", Colors.CYAN, color))
        parts.append(self.message)
        parts.extend(f"{key}={value}" for key, value in self.context.items())
        return " ".join(parts)


class TnumLogger:
    """Leveled logger writing to one stream."""

    def __init__(
        self,
        level: LogLevel = LogLevel.NORMAL,
        color: bool = True,
        stream: TextIO | None = None,
        show_time: bool = True,
    ):
        self.level = level
        self._stream = stream or sys.stderr
        self._interactive = supports_color(self._stream)
        self._color = color and self._interactive
        self._show_time = show_time
        self._entries: list[LogEntry] = []

    def enabled(self, level: LogLevel) -> bool:
        return level <= self.level

    def _write(self, line: str) -> None:
        self._stream.write(line)
        self._stream.flush()

    def log(self, level: LogLevel, message: str, category: str = "general", **context: Any) -> None:
        entry = LogEntry(level=level, message=message, category=category, context=context)
        self._entries.append(entry)
        if self.enabled(level):
            self._write(entry.format(color=self._color, show_time=self._show_time) + "\n")

    def info(self, message: str, **context: Any) -> None:
        self.log(LogLevel.NORMAL, message, **context)

    def verbose(self, message: str, **context: Any) -> None:
        self.log(LogLevel.VERBOSE, message, **context)

    def debug(self, message: str, **context: Any) -> None:
        self.log(LogLevel.DEBUG, message, **context)

    def trace(self, message: str, **context: Any) -> None:
        self.log(LogLevel.TRACE, message, **context)

    def _announce(self, symbol: str, color: str, message: str, always: bool = False) -> None:
        if always or self.enabled(LogLevel.NORMAL):
            self._write(f"{paint(symbol, color, self._color)} {message}\n")

    def success(self, message: str) -> None:
        self._announce("✓", Colors.GREEN, message)

    def warning(self, message: str) -> None:
        self._announce("⚠", Colors.YELLOW, message)

    def error(self, message: str) -> None:
        """Errors are shown at every level, QUIET included."""
        self._announce("✗", Colors.RED, message, always=True)

    def progress(self, done: int, total: int, category: str = "general") -> None:
        """Report ``done`` of ``total`` work items.
        A terminal gets a single status line rewritten in place. Other streams
        get one DEBUG entry per call.
        """
        pct = done / total * 100 if total else 100.0
        if not self._interactive:
            self.log(LogLevel.DEBUG, f"{done}/{total} done", category=category, pct=f"{pct:.1f}")
            return
        if not self.enabled(LogLevel.NORMAL):
            return
        label = paint(f"[{category}]", Colors.CYAN, self._color)
        end = "\n" if done >= total else ""
        self._write(f"\r{label} {done}/{total} ({pct:5.1f}%){end}")

    @contextmanager
    def timer(self, name: str, category: str = "timing") -> Iterator[None]:
        """Log the wall time of the block at VERBOSE level."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            self.verbose(f"{name} took {elapsed:.3f}s", category=category)

    def get_entries(
        self,
        level: LogLevel | None = None,
        category: str | None = None,
    ) -> list[LogEntry]:
        return [
            entry
            for entry in self._entries
            if (level is None or entry.level == level)
            and (category is None or entry.category == category)
        ]


_logger: TnumLogger | None = None


def get_logger() -> TnumLogger:
    global _logger
    if _logger is None:
        _logger = TnumLogger()
    return _logger


def set_logger(logger: TnumLogger) -> None:
    global _logger
    _logger = logger


def configure_logging(
    level: LogLevel = LogLevel.NORMAL,
    color: bool = True,
    stream: TextIO | None = None,
    show_time: bool = True,
) -> TnumLogger:
    """Replace the global logger and return it."""
    logger = TnumLogger(level=level, color=color, stream=stream, show_time=show_time)
    set_logger(logger)
    return logger


def install_trace_hook(logger: TnumLogger | None = None) -> TraceHook | None:
    """Route arithmetic trace events to ``logger`` at TRACE level.
    Returns the previously installed hook.
    """
    target = logger or get_logger()

    def hook(event: str, fields: dict[str, Any]) -> None:
        target.log(LogLevel.TRACE, event, category="trace", **fields)

    return set_trace_hook(hook)


__all__ = [
    "LogLevel",
    "LogEntry",
    "Colors",
    "TnumLogger",
    "paint",
    "get_logger",
    "set_logger",
    "configure_logging",
    "install_trace_hook",
    "supports_color",
]
