"""Error taxonomy for pytnum.
Transfer functions never raise for well-formed inputs: an impossible
concrete operation (division by a possibly-zero divisor) is represented in
the domain as ``top``. Exceptions are reserved for:
- InvariantViolation: an algorithm reached a branch that is unreachable by
  construction. This is a programming defect and must not be caught and
  turned into a plausible-looking value.
- ConfigError: invalid user configuration.
Solver failures are not exceptions either; they surface as an UNKNOWN verdict.
"""

from __future__ import annotations

from typing import Any


class TnumError(Exception):
    """Base class for pytnum errors."""


class InvariantViolation(TnumError, AssertionError):
    """An internal invariant of the abstract domain was violated."""

    def __init__(self, operation: str, detail: str, **context: Any):
        self.operation = operation
        self.detail = detail
        self.context = context
        message = f"{operation}: {detail}"
        if context:
            rendered = ", ".join(f"{k}={v}" for k, v in sorted(context.items()))
            message = f"{message} ({rendered})"
        super().__init__(message)


class FuelExhaustedError(InvariantViolation):
    """A fuel-bounded recursion ran out of fuel before its base case."""

    def __init__(self, operation: str, **context: Any):
        super().__init__(operation, "fuel exhausted before reaching the base case", **context)


class ConfigError(TnumError, ValueError):
    """Raised when a configuration value is invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"invalid configuration {key}={value!r}: {reason}")


__all__ = [
    "TnumError",
    "InvariantViolation",
    "FuelExhaustedError",
    "ConfigError",
]
