"""Protocol definitions for the functions solvers and references are built from.

Using Protocol allows type checkers to accept any callable that
implements the required call signature, without requiring explicit inheritance.
Tests rely on this to drive handles with plain Python functions instead of
compiled expressions.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Equation(Protocol):
    """Right-hand side ``f(t, x)`` of ``dx/dt = f(t, x)``."""

    def __call__(self, t: float, x: float, /) -> float: ...


@runtime_checkable
class AnalyticSolution(Protocol):
    """Closed-form reference ``x(t)``."""

    def __call__(self, t: float, /) -> float: ...

