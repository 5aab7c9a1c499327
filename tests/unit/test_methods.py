import pytest

from odecompare.methods import (
    MAX_FACTOR,
    MIN_FACTOR,
    SAFETY,
    dormand_prince_step,
    error_norm,
    euler_step,
    rk4_step,
    step_factor,
)


def test_euler_step():
    # x' = x from x=1 with h=0.1 -> 1 + 0.1 * 1
    assert euler_step(lambda t, x: x, 0.0, 1.0, 0.1) == pytest.approx(1.1)


def test_rk4_is_exact_for_cubic():
    # x' = 3t^2 integrates to t^3; RK4 reduces to Simpson's rule, exact for cubics
    assert rk4_step(lambda t, x: 3 * t**2, 0.0, 0.0, 1.0) == pytest.approx(1.0, abs=1e-14)


def test_dormand_prince_is_exact_for_quartic():
    # x' = 5t^4 integrates to t^5; the fifth-order weights integrate quartics exactly
    x5, err = dormand_prince_step(lambda t, x: 5 * t**4, 0.0, 0.0, 1.0)

    assert x5 == pytest.approx(1.0, abs=1e-12)
    # The embedded fourth-order solution is not exact, so the estimate is nonzero
    assert err != 0.0


def test_dormand_prince_error_vanishes_for_constant_slope():
    x5, err = dormand_prince_step(lambda t, x: 2.0, 1.0, 3.0, 0.5)

    assert x5 == pytest.approx(4.0)
    assert err == pytest.approx(0.0, abs=1e-15)


def test_error_norm_uses_mixed_tolerance():
    # atol + rtol * max(|x|, |x_new|) = 1e-6 + 1e-6 * 2
    assert error_norm(3e-6, 1.0, 2.0, rtol=1e-6, atol=1e-6) == pytest.approx(1.0)


def test_step_factor_bounds():
    # No error: grow as much as allowed
    assert step_factor(0.0) == MAX_FACTOR
    # Error exactly at tolerance: shrink by the safety factor only
    assert step_factor(1.0) == pytest.approx(SAFETY)
    # Huge or infinite error: shrink as much as allowed
    assert step_factor(1e12) == MIN_FACTOR
    assert step_factor(float("inf")) == MIN_FACTOR
