import math

import pytest

from odecompare.errors import (
    ConfigError,
    DomainError,
    ExpressionSyntaxError,
    NumberParseError,
    UnboundVariableError,
)
from odecompare.expression import PENDING, CompiledExpression
from odecompare.solver_set import SolverSet, Strategy


def _snapshot(solver_set: SolverSet):
    return (
        solver_set.equation,
        solver_set.initial_point,
        solver_set.step_size,
        solver_set.step_bounds,
        [handle.solved_history() for handle in solver_set],
    )


def _solve_all(solver_set: SolverSet, t: float) -> None:
    for handle in solver_set:
        handle.solve_at_point(t)


def test_one_handle_per_strategy(solver_set):
    handles = list(solver_set)

    assert len(handles) == 3
    assert solver_set[Strategy.ADAPTIVE] is solver_set.adaptive
    assert {handle.display_name for handle in handles} == {"Euler", "RK4", "DOPRI"}
    assert solver_set.is_synchronized()


def test_round_trip_configuration(solver_set, growth_solution):
    solver_set.reconfigure_equation("t*x")
    solver_set.reconfigure_initial_point("t0", "0")
    solver_set.reconfigure_initial_point("x0", "1")
    solver_set.reconfigure_step_size("0.01")

    # Same compiled function instance and values everywhere
    assert solver_set.is_synchronized()
    assert all(handle.equation is solver_set.equation for handle in solver_set)

    exact = growth_solution(1.0)
    errors = {s: abs(solver_set[s].solve_at_point(1.0) - exact) for s in Strategy}
    assert errors[Strategy.RK4] < 1e-6
    assert errors[Strategy.ADAPTIVE] < 1e-6
    assert errors[Strategy.EULER] > errors[Strategy.RK4]
    assert errors[Strategy.EULER] > errors[Strategy.ADAPTIVE]


def test_equation_is_compiled_once_and_shared(solver_set):
    equation = solver_set.reconfigure_equation("x - t")

    assert isinstance(equation, CompiledExpression)
    assert all(handle.equation is equation for handle in solver_set)


def test_pending_equation_changes_nothing(solver_set):
    _solve_all(solver_set, 0.5)
    before = _snapshot(solver_set)

    assert solver_set.reconfigure_equation("t*x^") is PENDING
    assert _snapshot(solver_set) == before
    assert solver_set.equation is before[0]


@pytest.mark.parametrize(
    ("text", "error"),
    [("t*y", UnboundVariableError), ("t*(x", ExpressionSyntaxError), ("", ExpressionSyntaxError)],
)
def test_failed_equation_changes_nothing(solver_set, text, error):
    _solve_all(solver_set, 0.5)
    before = _snapshot(solver_set)

    with pytest.raises(error):
        solver_set.reconfigure_equation(text)

    assert _snapshot(solver_set) == before
    assert solver_set.is_synchronized()


def test_initial_point_is_shared(solver_set):
    solver_set.reconfigure_initial_point("t0", "0.5")
    solver_set.reconfigure_initial_point("x0", " 2 ")

    assert solver_set.initial_point == (0.5, 2.0)
    assert all(handle.initial_point == (0.5, 2.0) for handle in solver_set)
    assert all(handle.solved_history() == [(0.5, 2.0)] for handle in solver_set)


@pytest.mark.parametrize("text", ["abc", "", "nan", "inf"])
def test_failed_initial_point_changes_nothing(solver_set, text):
    _solve_all(solver_set, 0.5)
    before = _snapshot(solver_set)

    with pytest.raises(NumberParseError):
        solver_set.reconfigure_initial_point("x0", text)

    assert _snapshot(solver_set) == before


def test_unknown_coordinate(solver_set):
    with pytest.raises(ValueError, match="Unknown coordinate"):
        solver_set.reconfigure_initial_point("y0", "1")  # type: ignore[arg-type]


def test_step_size_clears_every_history(solver_set):
    _solve_all(solver_set, 1.0)
    cached = solver_set[Strategy.EULER].solve_at_point(1.0)

    solver_set.reconfigure_step_size("0.1")

    assert all(handle.solved_history() == [(0.0, 1.0)] for handle in solver_set)
    assert all(handle.step_size == 0.1 for handle in solver_set)
    # Fresh Euler value under the new step size
    assert solver_set[Strategy.EULER].solve_at_point(1.0) != cached


@pytest.mark.parametrize(
    ("text", "error"), [("0", DomainError), ("-0.01", DomainError), ("fast", NumberParseError)]
)
def test_failed_step_size_changes_nothing(solver_set, text, error):
    _solve_all(solver_set, 0.5)
    before = _snapshot(solver_set)

    with pytest.raises(error):
        solver_set.reconfigure_step_size(text)

    assert _snapshot(solver_set) == before


def test_step_bounds_only_touch_adaptive_handle(solver_set):
    _solve_all(solver_set, 0.5)
    euler_history = solver_set[Strategy.EULER].solved_history()
    rk4_history = solver_set[Strategy.RK4].solved_history()

    solver_set.reconfigure_step_bounds("max", "0.01")

    assert solver_set.step_bounds == (0.0001, 0.01)
    assert solver_set.adaptive.solved_history() == [(0.0, 1.0)]
    assert solver_set[Strategy.EULER].solved_history() == euler_history
    assert solver_set[Strategy.RK4].solved_history() == rk4_history


def test_inverted_step_bounds_rejected(solver_set):
    _solve_all(solver_set, 0.5)
    before = _snapshot(solver_set)

    # Current max is 0.001
    with pytest.raises(ConfigError, match="exceeds"):
        solver_set.reconfigure_step_bounds("min", "0.01")
    with pytest.raises(ConfigError):
        solver_set.reconfigure_step_bounds("max", "0")
    with pytest.raises(NumberParseError):
        solver_set.reconfigure_step_bounds("min", "tiny")

    assert _snapshot(solver_set) == before


def test_adaptive_first_attempt_uses_shared_step_size(solver_set):
    solver_set.reconfigure_step_bounds("max", "1")
    solver_set.reconfigure_step_size("0.05")
    solver_set.adaptive.solve_at_point(0.05)

    history = solver_set.adaptive.solved_history()
    # dx/dt = t*x near t=0 is easy: the 0.05 attempt is accepted as-is
    assert history[1][0] == pytest.approx(0.05)
    assert math.isfinite(history[1][1])
