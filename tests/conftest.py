"""Test configuration and fixtures for odecompare tests."""

import math

import matplotlib
import pytest

from odecompare.expression import CompiledExpression, compile_expression
from odecompare.session import ComparativeSession
from odecompare.solver_set import SolverSet

matplotlib.use("Agg")


@pytest.fixture
def growth_equation() -> CompiledExpression:
    """dx/dt = t*x, solved by x(t) = e^(t^2 / 2) through (0, 1)."""
    equation = compile_expression("t*x", ("t", "x"))
    assert isinstance(equation, CompiledExpression)
    return equation


@pytest.fixture
def growth_solution():
    return lambda t: math.exp(0.5 * t**2)


@pytest.fixture
def solver_set(growth_equation: CompiledExpression) -> SolverSet:
    return SolverSet(growth_equation, (0.0, 1.0), 0.01, (0.0001, 0.001))


@pytest.fixture
def session() -> ComparativeSession:
    return ComparativeSession()
