import logging
import math
from abc import ABC, abstractmethod
from bisect import bisect_right
from collections.abc import Callable
from typing import Any

from odecompare.errors import DomainError
from odecompare.protocols import Equation

logger = logging.getLogger(__name__)


def check_step_size(step_size: float) -> float:
    """Return ``step_size`` as a float, or raise :class:`DomainError` unless it is finite and positive."""
    if not math.isfinite(step_size) or step_size <= 0:
        raise DomainError(f"Step size must be a positive finite number, got {step_size}")
    return float(step_size)


def check_initial_point(initial_point: tuple[float, float]) -> tuple[float, float]:
    t0, x0 = initial_point
    if not (math.isfinite(t0) and math.isfinite(x0)):
        raise DomainError(f"Initial point must be finite, got {initial_point}")
    return float(t0), float(x0)


class SolverHandle(ABC):
    """Abstract base class for one integration strategy with a solved-point cache.

    The cache is the history of ``(t, x)`` pairs computed under the current
    configuration. It starts at the initial point and only ever grows by
    whole steps taken by the strategy; a step that would overshoot the
    requested ``t`` is never taken. Queries that fall between recorded points
    are answered by one unrecorded partial step from the closest recorded
    point below, so the history does not depend on the order of queries and
    repeating a query is bit-identical.

    Any change of equation, initial point or step size clears the history.

    There is no step-count or wall-clock ceiling: an equation that forces
    the strategy into many tiny steps stalls the caller until it finishes
    or produces a non-finite value.
    """

    display_name: str = "Solver"

    def __init__(
        self,
        equation: Equation,
        initial_point: tuple[float, float],
        step_size: float,
    ):
        """
        Initialize the handle.

        :param equation: Right-hand side ``f(t, x)``.
        :param initial_point: Anchor ``(t0, x0)``.
        :param step_size: Nominal step size, must be positive.
        """
        self.step_size = check_step_size(step_size)
        self.initial_point = check_initial_point(initial_point)
        self.equation = equation
        self.integration_steps = 0
        self._ts: list[float] = []
        self._xs: list[float] = []
        self.invalidate()

    def set_equation(self, equation: Equation) -> None:
        self.equation = equation
        self.invalidate()

    def set_initial_point(self, initial_point: tuple[float, float]) -> None:
        self.initial_point = check_initial_point(initial_point)
        self.invalidate()

    def set_step_size(self, step_size: float) -> None:
        """
        Replace the nominal step size.

        :raises DomainError: If ``step_size`` is not a positive finite number.
        """
        self.step_size = check_step_size(step_size)
        self.invalidate()

    def invalidate(self) -> None:
        """Drop every cached point except the initial one."""
        t0, x0 = self.initial_point
        self._ts = [t0]
        self._xs = [x0]
        self.integration_steps = 0
        self._on_invalidate()
        logger.debug("[%s] History cleared, restarting at %s", self.display_name, self.initial_point)

    def _on_invalidate(self) -> None:
        """Hook for subclasses holding extra per-run state."""

    def solve_at_point(self, t: float) -> float:
        """
        Integrated value at ``t``.

        Only the range beyond the last cached point is integrated; everything
        below it is reused.

        :param t: Query point, must be finite and not before ``t0``.
        :return: Approximation of ``x(t)``.
        :raises DomainError: If ``t`` is invalid or integration produces a non-finite value.
        """
        if not math.isfinite(t):
            raise DomainError(f"Cannot solve at non-finite t={t}")
        if t < self._ts[0]:
            raise DomainError(
                f"[{self.display_name}] t={t} lies before the initial point t0={self._ts[0]}"
            )

        if t > self._ts[-1]:
            self._extend(t)

        i = bisect_right(self._ts, t) - 1
        t_i, x_i = self._ts[i], self._xs[i]
        if t_i == t:
            return x_i

        x = self._partial_step(t_i, x_i, t - t_i)
        if not math.isfinite(x):
            raise DomainError(f"[{self.display_name}] Non-finite value at t={t}")
        return x

    def solved_history(self) -> list[tuple[float, float]]:
        """Copy of the cached ``(t, x)`` pairs, ordered by ``t``."""
        return list(zip(self._ts, self._xs, strict=True))

    @property
    def last_cached_t(self) -> float:
        return self._ts[-1]

    def _record(self, t: float, x: float) -> None:
        """Append a whole step to the history."""
        if not math.isfinite(x):
            raise DomainError(
                f"[{self.display_name}] Integration diverged near t={t} (x={x})"
            )
        self._ts.append(t)
        self._xs.append(x)
        self.integration_steps += 1

    def _apply(self, rule: Callable[..., Any], t: float, x: float, h: float) -> Any:
        """Run a step rule on the bound equation, mapping arithmetic failures to DomainError."""
        try:
            return rule(self.equation, t, x, h)
        except DomainError:
            raise
        except (ArithmeticError, ValueError) as e:
            raise DomainError(f"[{self.display_name}] Equation failed near t={t}: {e}") from e

    @abstractmethod
    def _extend(self, t: float) -> None:
        """
        Record whole steps until the next one would pass ``t``.

        :param t: Target point, greater than the last cached point.
        """
        pass

    @abstractmethod
    def _partial_step(self, t: float, x: float, h: float) -> float:
        """
        One unrecorded step of size ``h`` from ``(t, x)``.

        :return: The value at ``t + h``.
        """
        pass
