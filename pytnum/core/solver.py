"""Z3 solver wrapper for pytnum.
This module provides a narrow interface to the Z3 theorem prover:
constraint assertion, a timeout-bounded ``check`` and model evaluation.
Timeouts and solver errors are reported as an UNKNOWN verdict rather than
raised, so a refutation run always terminates with a result.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum

import z3


class Verdict(Enum):
    """Outcome of a satisfiability check."""

    SAT = "sat"
    UNSAT = "unsat"
    UNKNOWN = "unknown"


@dataclass
class SolverResult:
    """Result of a satisfiability check."""

    verdict: Verdict
    model: z3.ModelRef | None = None
    reason: str | None = None
    elapsed_seconds: float = 0.0

    @property
    def is_sat(self) -> bool:
        return self.verdict is Verdict.SAT

    @property
    def is_unsat(self) -> bool:
        return self.verdict is Verdict.UNSAT

    @property
    def is_unknown(self) -> bool:
        return self.verdict is Verdict.UNKNOWN

    @staticmethod
    def sat(model: z3.ModelRef, elapsed: float = 0.0) -> SolverResult:
        return SolverResult(Verdict.SAT, model=model, elapsed_seconds=elapsed)

    @staticmethod
    def unsat(elapsed: float = 0.0) -> SolverResult:
        return SolverResult(Verdict.UNSAT, elapsed_seconds=elapsed)

    @staticmethod
    def unknown(reason: str | None = None, elapsed: float = 0.0) -> SolverResult:
        return SolverResult(Verdict.UNKNOWN, reason=reason, elapsed_seconds=elapsed)

    def eval_word(self, expr: z3.ExprRef) -> int:
        """Evaluate a bit-vector expression in the model."""
        if self.model is None:
            raise ValueError("no model available: verdict is not SAT")
        return self.model.eval(expr, model_completion=True).as_long()


class SolverSession:
    """One Z3 solver session per independent query.
    Sessions accumulate constraints and are not safe to share between
    threads without external synchronization.
    """

    def __init__(self, timeout_ms: int = 30000) -> None:
        """Initialize the session.
        Args:
            timeout_ms: Timeout applied to every ``check`` call.
        """
        self._solver = z3.Solver()
        self._solver.set("timeout", timeout_ms)
        self.timeout_ms = timeout_ms
        self._assertions = 0
        self._query_count = 0

    @staticmethod
    def word(name: str, width: int = 64) -> z3.BitVecRef:
        """Declare a fixed-width bit-vector symbol."""
        return z3.BitVec(name, width)

    def add(self, *constraints: z3.BoolRef) -> None:
        """Assert constraints on the session."""
        self._solver.add(*constraints)
        self._assertions += len(constraints)

    def push(self) -> None:
        self._solver.push()

    def pop(self) -> None:
        self._solver.pop()

    def reset(self) -> None:
        self._solver.reset()
        self._solver.set("timeout", self.timeout_ms)
        self._assertions = 0

    def check(self, *assumptions: z3.BoolRef) -> SolverResult:
        """Check satisfiability of the accumulated constraints.
        Args:
            assumptions: Additional assumptions for this check only.
        Returns:
            SolverResult with the verdict, and a model when SAT.
        """
        self._query_count += 1
        start = time.perf_counter()
        try:
            result = self._solver.check(*assumptions)
        except z3.Z3Exception as exc:
            return SolverResult.unknown(f"solver error: {exc}", time.perf_counter() - start)
        elapsed = time.perf_counter() - start
        if result == z3.sat:
            return SolverResult.sat(self._solver.model(), elapsed)
        if result == z3.unsat:
            return SolverResult.unsat(elapsed)
        return SolverResult.unknown(self._solver.reason_unknown(), elapsed)

    @property
    def assertion_count(self) -> int:
        return self._assertions

    @property
    def query_count(self) -> int:
        return self._query_count

    def sexpr(self) -> str:
        """SMT-LIB rendering of the asserted constraints."""
        return self._solver.sexpr()


__all__ = ["Verdict", "SolverResult", "SolverSession"]
