import logging
from collections.abc import Callable

from odecompare.methods import euler_step, rk4_step
from odecompare.protocols import Equation
from odecompare.solvers.base import SolverHandle

logger = logging.getLogger(__name__)


class FixedStepSolver(SolverHandle):
    """
    Solver handle stepping on the fixed grid ``t0 + n * step_size``.

    Grid points are computed from ``n`` rather than by accumulating the step,
    so the recorded ``t`` values do not drift.
    """

    display_name = "Fixed step"
    rule: Callable[[Equation, float, float, float], float]

    def _extend(self, t: float) -> None:
        t0, _ = self.initial_point
        n = len(self._ts) - 1
        while True:
            t_next = t0 + (n + 1) * self.step_size
            if t_next > t:
                break
            x_next = self._apply(self.rule, self._ts[-1], self._xs[-1], self.step_size)
            self._record(t_next, x_next)
            n += 1
        logger.debug("[%s] Extended history to t=%s (%d steps)", self.display_name, self._ts[-1], n)

    def _partial_step(self, t: float, x: float, h: float) -> float:
        return self._apply(self.rule, t, x, h)


class EulerSolver(FixedStepSolver):
    """Forward Euler on a fixed grid (first order)."""

    display_name = "Euler"
    rule = staticmethod(euler_step)


class RK4Solver(FixedStepSolver):
    """Classical Runge-Kutta on a fixed grid (fourth order)."""

    display_name = "RK4"
    rule = staticmethod(rk4_step)
