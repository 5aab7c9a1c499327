"""Interactive comparison of Euler, RK4 and adaptive Dormand-Prince solutions.

A :class:`ComparativeSession` is what an editor drives: one setter per
editable field, each taking the raw text the user typed and returning an
:class:`EditResult` that tells the presentation whether to show the field as
valid. A rejected edit never changes anything; the last accepted value of
every field stays in effect.

```python
from odecompare import ComparativeSession, Strategy

session = ComparativeSession()
session.set_equation("t*x")
session.set_step_size("0.05")
for t, x in session.solution_series(Strategy.RK4, horizon=1.0):
    ...
```
"""

import logging
import math
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np

from odecompare.constants import (
    ANALYTIC_VARIABLES,
    DEFAULT_ANALYTIC,
    DEFAULT_ATOL,
    DEFAULT_EQUATION,
    DEFAULT_HORIZON,
    DEFAULT_INITIAL_POINT,
    DEFAULT_RTOL,
    DEFAULT_STEP_BOUNDS,
    DEFAULT_STEP_SIZE,
    EQUATION_VARIABLES,
    SAMPLES_PER_UNIT,
)
from odecompare.error_evaluator import ErrorEvaluator
from odecompare.errors import ConfigError, DomainError, OdeCompareError
from odecompare.expression import (
    PENDING,
    CompiledExpression,
    ExpressionCompiler,
    Pending,
    parse_number,
    parse_number_list,
)
from odecompare.protocols import AnalyticSolution, Equation
from odecompare.solver_set import SolverSet, Strategy
from odecompare.solvers import SolverHandle

logger = logging.getLogger(__name__)


class SessionField(Enum):
    """User-editable fields of a session."""

    EQUATION = "equation"
    ANALYTIC = "analytic"
    INITIAL_T = "initial_t"
    INITIAL_X = "initial_x"
    STEP_SIZE = "step_size"
    STEP_MIN = "step_min"
    STEP_MAX = "step_max"
    TABLE_POINTS = "table_points"
    HORIZON = "horizon"


class EditStatus(Enum):
    VALID = "valid"
    PENDING = "pending"
    INVALID = "invalid"


@dataclass(frozen=True)
class EditResult:
    """Outcome of one edit. Truthy unless the edit was rejected."""

    field: SessionField
    status: EditStatus
    error: OdeCompareError | None = None

    def __bool__(self) -> bool:
        return self.status is not EditStatus.INVALID


@dataclass(frozen=True)
class TableRow:
    """Values at one table point; ``None`` where a value is unavailable."""

    t: float
    analytic: float | None
    euler: float | None
    rk4: float | None
    adaptive: float | None


class Series:
    """A lazy ``(t, y)`` sequence that is recomputed every time it is iterated."""

    def __init__(self, factory: Callable[[], Iterator[tuple[float, float]]]):
        self._factory = factory

    def __iter__(self) -> Iterator[tuple[float, float]]:
        return self._factory()

    def to_arrays(self) -> tuple[np.ndarray, np.ndarray]:
        """Materialize as ``(t, y)`` float arrays, e.g. for plotting."""
        points = np.array(list(self), dtype=np.float64).reshape(-1, 2)
        return points[:, 0], points[:, 1]


class ComparativeSession:
    """Three solvers kept in lockstep, an optional reference solution and a point table."""

    def __init__(
        self,
        equation: str = DEFAULT_EQUATION,
        analytic: str = DEFAULT_ANALYTIC,
        initial_point: tuple[float, float] = DEFAULT_INITIAL_POINT,
        step_size: float = DEFAULT_STEP_SIZE,
        step_bounds: tuple[float, float] = DEFAULT_STEP_BOUNDS,
        horizon: float = DEFAULT_HORIZON,
        rtol: float = DEFAULT_RTOL,
        atol: float = DEFAULT_ATOL,
    ):
        """
        Create a session. Unlike the setters, invalid arguments raise.

        :param equation: Right-hand side of ``dx/dt`` in ``t`` and ``x``.
        :param analytic: Reference ``x(t)``; empty for none.
        :param initial_point: ``(t0, x0)``.
        :param step_size: Step of the fixed-step solvers, first attempt of the adaptive one.
        :param step_bounds: ``(min, max)`` step of the adaptive solver.
        :param horizon: Largest ``t`` shown in series.
        :param rtol: Relative tolerance of the adaptive solver.
        :param atol: Absolute tolerance of the adaptive solver.
        :raises OdeCompareError: If any argument is invalid.
        """
        self._analytic_compiler = ExpressionCompiler(ANALYTIC_VARIABLES)

        compiled = ExpressionCompiler(EQUATION_VARIABLES).compile(equation)
        if isinstance(compiled, Pending):
            raise ConfigError(f"Equation {equation!r} is incomplete")
        reference = self._compile_analytic(analytic)
        if isinstance(reference, Pending):
            raise ConfigError(f"Analytic solution {analytic!r} is incomplete")
        check_sampling_range(horizon, "Horizon")
        check_sampling_range(initial_point[0], "Initial t")

        self.solvers = SolverSet(compiled, initial_point, step_size, step_bounds, rtol=rtol, atol=atol)
        self.analytic: AnalyticSolution | None = reference
        self.horizon = float(horizon)
        self.table_points: tuple[float, ...] = ()

        t0, x0 = self.solvers.initial_point
        h_min, h_max = self.solvers.step_bounds
        self._status = {field: EditStatus.VALID for field in SessionField}
        self._text = {
            SessionField.EQUATION: equation,
            SessionField.ANALYTIC: analytic,
            SessionField.INITIAL_T: str(t0),
            SessionField.INITIAL_X: str(x0),
            SessionField.STEP_SIZE: str(self.solvers.step_size),
            SessionField.STEP_MIN: str(h_min),
            SessionField.STEP_MAX: str(h_max),
            SessionField.TABLE_POINTS: "",
            SessionField.HORIZON: str(self.horizon),
        }

    # Current configuration

    @property
    def equation(self) -> Equation:
        return self.solvers.equation

    @property
    def initial_point(self) -> tuple[float, float]:
        return self.solvers.initial_point

    @property
    def step_size(self) -> float:
        return self.solvers.step_size

    @property
    def step_bounds(self) -> tuple[float, float]:
        return self.solvers.step_bounds

    @property
    def has_reference(self) -> bool:
        return self.analytic is not None

    def handle(self, strategy: Strategy | str) -> SolverHandle:
        return self.solvers[Strategy(strategy)]

    def field_status(self, field: SessionField | str) -> EditStatus:
        """Status of the last edit of ``field``; ``VALID`` before any edit."""
        return self._status[SessionField(field)]

    def field_text(self, field: SessionField | str) -> str:
        """Text of the last accepted edit of ``field``."""
        return self._text[SessionField(field)]

    # Setters

    def set_equation(self, text: str) -> EditResult:
        return self._edit(SessionField.EQUATION, text, self.solvers.reconfigure_equation)

    def set_analytic(self, text: str) -> EditResult:
        """Replace the reference solution; empty text removes it."""
        return self._edit(SessionField.ANALYTIC, text, self._replace_analytic)

    def set_initial_t(self, text: str) -> EditResult:
        return self._edit(SessionField.INITIAL_T, text, self._replace_initial_t)

    def set_initial_x(self, text: str) -> EditResult:
        return self._edit(
            SessionField.INITIAL_X, text, lambda s: self.solvers.reconfigure_initial_point("x0", s)
        )

    def set_step_size(self, text: str) -> EditResult:
        return self._edit(SessionField.STEP_SIZE, text, self.solvers.reconfigure_step_size)

    def set_step_min(self, text: str) -> EditResult:
        return self._edit(
            SessionField.STEP_MIN, text, lambda s: self.solvers.reconfigure_step_bounds("min", s)
        )

    def set_step_max(self, text: str) -> EditResult:
        return self._edit(
            SessionField.STEP_MAX, text, lambda s: self.solvers.reconfigure_step_bounds("max", s)
        )

    def set_table_points(self, text: str) -> EditResult:
        """Replace the table with a comma-separated list; one bad entry rejects the whole list."""
        return self._edit(SessionField.TABLE_POINTS, text, self._replace_table_points)

    def set_horizon(self, text: str) -> EditResult:
        return self._edit(SessionField.HORIZON, text, self._replace_horizon)

    def _edit(self, field: SessionField, text: str, apply: Callable[[str], Any]) -> EditResult:
        try:
            outcome = apply(text)
        except OdeCompareError as e:
            logger.info("Rejected %s = %r: %s", field.value, text, e)
            self._status[field] = EditStatus.INVALID
            return EditResult(field, EditStatus.INVALID, e)

        self._status[field] = EditStatus.VALID
        if outcome is PENDING:
            return EditResult(field, EditStatus.PENDING)
        self._text[field] = text
        logger.debug("Accepted %s = %r", field.value, text)
        return EditResult(field, EditStatus.VALID)

    def _compile_analytic(self, text: str) -> CompiledExpression | Pending | None:
        if not text.strip():
            return None
        return self._analytic_compiler.compile(text)

    def _replace_analytic(self, text: str) -> CompiledExpression | Pending | None:
        reference = self._compile_analytic(text)
        if reference is not PENDING:
            self.analytic = reference  # type: ignore[assignment]
        return reference

    def _replace_table_points(self, text: str) -> tuple[float, ...]:
        self.table_points = parse_number_list(text)
        return self.table_points

    def _replace_initial_t(self, text: str) -> float:
        check_sampling_range(parse_number(text), "Initial t")
        return self.solvers.reconfigure_initial_point("t0", text)

    def _replace_horizon(self, text: str) -> float:
        self.horizon = check_sampling_range(parse_number(text), "Horizon")
        return self.horizon

    # Data for presentation

    def sample_points(self, horizon: float | None = None) -> Iterator[float]:
        """Yield ``t = n / SAMPLES_PER_UNIT`` for every integer ``n`` with ``t0 <= t <= horizon``."""
        horizon = self.horizon if horizon is None else check_sampling_range(horizon, "Horizon")
        t0, _ = self.initial_point
        # Rounding keeps e.g. t0 = 0.1 from being pushed past n = 10.
        first = math.ceil(round(t0 * SAMPLES_PER_UNIT, 9))
        last = math.floor(round(horizon * SAMPLES_PER_UNIT, 9))
        for n in range(first, last + 1):
            yield n / SAMPLES_PER_UNIT

    def solution_series(self, strategy: Strategy | str, horizon: float | None = None) -> Series:
        """
        ``(t, x)`` of one solver on the sampling grid up to ``horizon``.

        Points where the solver raises :class:`DomainError` are left out.
        """
        handle = self.handle(strategy)

        def generate() -> Iterator[tuple[float, float]]:
            for t in self.sample_points(horizon):
                try:
                    yield t, handle.solve_at_point(t)
                except DomainError as e:
                    logger.debug("Omitting %s point t=%s: %s", handle.display_name, t, e)

        return Series(generate)

    def analytic_series(self, horizon: float | None = None) -> Series:
        """The reference curve on the sampling grid; empty without a reference."""
        def generate() -> Iterator[tuple[float, float]]:
            analytic = self.analytic
            if analytic is None:
                return
            for t in self.sample_points(horizon):
                value = _evaluate(analytic, t)
                if value is not None:
                    yield t, value

        return Series(generate)

    def error_series(self, strategy: Strategy | str, horizon: float | None = None) -> Series | None:
        """
        Signed error of one solver's cached points with ``t < horizon``.

        :return: ``None`` when no reference solution is configured.
        """
        if self.analytic is None:
            return None
        handle = self.handle(strategy)
        limit = self.horizon if horizon is None else horizon

        def generate() -> Iterator[tuple[float, float]]:
            if self.analytic is None:
                return
            yield from ErrorEvaluator(self.analytic).error_series(handle.solved_history(), limit)

        return Series(generate)

    def table_row(self, t: float) -> TableRow:
        """Reference and solver values at ``t``."""
        values: dict[Strategy, float | None] = {}
        for strategy in Strategy:
            try:
                values[strategy] = self.solvers[strategy].solve_at_point(t)
            except DomainError as e:
                logger.debug("No %s value at t=%s: %s", strategy.value, t, e)
                values[strategy] = None

        analytic = _evaluate(self.analytic, t) if self.analytic is not None else None
        return TableRow(
            t=t,
            analytic=analytic,
            euler=values[Strategy.EULER],
            rk4=values[Strategy.RK4],
            adaptive=values[Strategy.ADAPTIVE],
        )

    def table_rows(self) -> list[TableRow]:
        return [self.table_row(t) for t in self.table_points]


def check_sampling_range(value: float, name: str) -> float:
    """Return ``value``, or raise :class:`ConfigError` if the sampling grid cannot index it."""
    if not math.isfinite(value * SAMPLES_PER_UNIT):
        raise ConfigError(f"{name} must be finite and within sampling range, got {value}")
    return float(value)


def _evaluate(analytic: AnalyticSolution, t: float) -> float | None:
    try:
        value = analytic(t)
    except (ArithmeticError, ValueError) as e:
        logger.debug("Reference undefined at t=%s: %s", t, e)
        return None
    return value if math.isfinite(value) else None
