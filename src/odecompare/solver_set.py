"""The three solver handles, configured in lockstep.

All configuration goes through :class:`SolverSet`. Each ``reconfigure_*``
method first parses and validates its input completely and only then
touches the handles, so a failed edit changes nothing.
"""

import logging
from collections.abc import Iterator
from enum import Enum
from typing import Literal

from odecompare.constants import (
    DEFAULT_ATOL,
    DEFAULT_RTOL,
    DEFAULT_STEP_BOUNDS,
    EQUATION_VARIABLES,
)
from odecompare.expression import PENDING, CompiledExpression, ExpressionCompiler, Pending, parse_number
from odecompare.protocols import Equation
from odecompare.solvers import (
    AdaptiveStepController,
    EulerSolver,
    RK4Solver,
    SolverHandle,
    check_step_bounds,
    check_step_size,
)
from odecompare.solvers.base import check_initial_point

logger = logging.getLogger(__name__)


class Strategy(Enum):
    """Integration strategies compared by a session."""

    EULER = "euler"
    RK4 = "rk4"
    ADAPTIVE = "adaptive"


class SolverSet:
    """Owns one handle per :class:`Strategy` and keeps their shared configuration identical."""

    def __init__(
        self,
        equation: Equation,
        initial_point: tuple[float, float],
        step_size: float,
        step_bounds: tuple[float, float] = DEFAULT_STEP_BOUNDS,
        rtol: float = DEFAULT_RTOL,
        atol: float = DEFAULT_ATOL,
    ):
        """
        :param equation: Right-hand side shared by all handles.
        :param initial_point: Shared ``(t0, x0)``.
        :param step_size: Shared nominal step size.
        :param step_bounds: ``(min, max)`` of the adaptive handle.
        :param rtol: Relative tolerance of the adaptive handle.
        :param atol: Absolute tolerance of the adaptive handle.
        """
        self._compiler = ExpressionCompiler(EQUATION_VARIABLES)
        self.equation = equation
        self.initial_point = check_initial_point(initial_point)
        self.step_size = check_step_size(step_size)

        self.adaptive = AdaptiveStepController(
            equation, self.initial_point, self.step_size, step_bounds, rtol=rtol, atol=atol
        )
        self._handles: dict[Strategy, SolverHandle] = {
            Strategy.EULER: EulerSolver(equation, self.initial_point, self.step_size),
            Strategy.RK4: RK4Solver(equation, self.initial_point, self.step_size),
            Strategy.ADAPTIVE: self.adaptive,
        }

    def __iter__(self) -> Iterator[SolverHandle]:
        return iter(self._handles.values())

    def __getitem__(self, strategy: Strategy) -> SolverHandle:
        return self._handles[strategy]

    @property
    def step_bounds(self) -> tuple[float, float]:
        return self.adaptive.step_bounds

    def is_synchronized(self) -> bool:
        """Whether every handle holds the same equation object, initial point and step size."""
        return all(
            handle.equation is self.equation
            and handle.initial_point == self.initial_point
            and handle.step_size == self.step_size
            for handle in self
        )

    def reconfigure_equation(self, text: str) -> CompiledExpression | Pending:
        """
        Compile ``text`` once and bind the result to every handle.

        :return: The new equation, or ``PENDING`` (nothing changed) for incomplete text.
        :raises ExpressionSyntaxError: If ``text`` does not parse.
        :raises UnboundVariableError: If ``text`` uses names other than ``t`` and ``x``.
        """
        equation = self._compiler.compile(text)
        if equation is PENDING:
            return PENDING
        assert isinstance(equation, CompiledExpression)

        self.equation = equation
        for handle in self:
            handle.set_equation(equation)
        logger.debug("Equation set to %r", text)
        return equation

    def reconfigure_initial_point(self, coordinate: Literal["t0", "x0"], text: str) -> float:
        """
        Replace one coordinate of the shared initial point.

        :param coordinate: ``"t0"`` or ``"x0"``.
        :param text: The new value.
        :return: The parsed value.
        :raises NumberParseError: If ``text`` is not a finite number.
        """
        value = parse_number(text)
        t0, x0 = self.initial_point
        if coordinate == "t0":
            initial_point = (value, x0)
        elif coordinate == "x0":
            initial_point = (t0, value)
        else:
            raise ValueError(f"Unknown coordinate {coordinate!r}")

        self.initial_point = initial_point
        for handle in self:
            handle.set_initial_point(initial_point)
        logger.debug("Initial point set to %s", initial_point)
        return value

    def reconfigure_step_size(self, text: str) -> float:
        """
        Replace the shared step size.

        :raises NumberParseError: If ``text`` is not a finite number.
        :raises DomainError: If the value is not positive.
        """
        step_size = check_step_size(parse_number(text))

        self.step_size = step_size
        for handle in self:
            handle.set_step_size(step_size)
        logger.debug("Step size set to %s", step_size)
        return step_size

    def reconfigure_step_bounds(self, bound: Literal["min", "max"], text: str) -> float:
        """
        Replace one of the adaptive handle's step bounds.

        Only the adaptive handle's history is cleared.

        :param bound: ``"min"`` or ``"max"``.
        :param text: The new value.
        :raises NumberParseError: If ``text`` is not a finite number.
        :raises ConfigError: If the resulting pair is not positive with ``min <= max``.
        """
        value = parse_number(text)
        h_min, h_max = self.adaptive.step_bounds
        if bound == "min":
            step_bounds = (value, h_max)
        elif bound == "max":
            step_bounds = (h_min, value)
        else:
            raise ValueError(f"Unknown bound {bound!r}")

        self.adaptive.set_step_bounds(check_step_bounds(step_bounds))
        logger.debug("Adaptive step bounds set to %s", step_bounds)
        return value
