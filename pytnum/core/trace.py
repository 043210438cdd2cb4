"""Optional trace hook for the arithmetic core.
Transfer functions stay free of I/O. Interesting branches call ``emit`` which
does nothing unless a hook has been installed with ``set_trace_hook``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

TraceHook = Callable[[str, dict[str, Any]], None]

_hook: TraceHook | None = None


def set_trace_hook(hook: TraceHook | None) -> TraceHook | None:
    """Install ``hook`` and return the previously installed one."""
    global _hook
    previous = _hook
    _hook = hook
    return previous


def get_trace_hook() -> TraceHook | None:
    return _hook


def emit(event: str, **fields: Any) -> None:
    """Forward a trace event to the installed hook, if any."""
    if _hook is not None:
        _hook(event, fields)


@contextmanager
def tracing(hook: TraceHook) -> Iterator[TraceHook]:
    """Temporarily install ``hook``."""
    previous = set_trace_hook(hook)
    try:
        yield hook
    finally:
        set_trace_hook(previous)


__all__ = ["TraceHook", "set_trace_hook", "get_trace_hook", "emit", "tracing"]
