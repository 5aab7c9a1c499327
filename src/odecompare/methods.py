"""Single-step rules for the scalar ODE ``dx/dt = f(t, x)``.

The rules are stateless: they advance one step and return. Step
bookkeeping, caching and step-size control live in :mod:`odecompare.solvers`.
"""

import numpy as np

from odecompare.protocols import Equation

# Dormand-Prince 5(4) tableau.
DP_C = np.array([0.0, 1 / 5, 3 / 10, 4 / 5, 8 / 9, 1.0, 1.0])
DP_A = np.array(
    [
        [0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0],
        [1 / 5, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0],
        [3 / 40, 9 / 40, 0.0, 0.0, 0.0, 0.0, 0.0],
        [44 / 45, -56 / 15, 32 / 9, 0.0, 0.0, 0.0, 0.0],
        [19372 / 6561, -25360 / 2187, 64448 / 6561, -212 / 729, 0.0, 0.0, 0.0],
        [9017 / 3168, -355 / 33, 46732 / 5247, 49 / 176, -5103 / 18656, 0.0, 0.0],
        [35 / 384, 0.0, 500 / 1113, 125 / 192, -2187 / 6784, 11 / 84, 0.0],
    ]
)
DP_B5 = np.array([35 / 384, 0.0, 500 / 1113, 125 / 192, -2187 / 6784, 11 / 84, 0.0])
DP_B4 = np.array(
    [5179 / 57600, 0.0, 7571 / 16695, 393 / 640, -92097 / 339200, 187 / 2100, 1 / 40]
)
DP_E = DP_B5 - DP_B4
DP_ORDER = 5

# Step-size controller.
SAFETY = 0.9
MIN_FACTOR = 0.2
MAX_FACTOR = 10.0


def euler_step(f: Equation, t: float, x: float, h: float) -> float:
    """Forward Euler, first order."""
    return x + h * f(t, x)


def rk4_step(f: Equation, t: float, x: float, h: float) -> float:
    """Classical fourth-order Runge-Kutta."""
    k1 = f(t, x)
    k2 = f(t + 0.5 * h, x + 0.5 * h * k1)
    k3 = f(t + 0.5 * h, x + 0.5 * h * k2)
    k4 = f(t + h, x + h * k3)
    return x + (h / 6) * (k1 + 2 * k2 + 2 * k3 + k4)


def dormand_prince_step(f: Equation, t: float, x: float, h: float) -> tuple[float, float]:
    """
    One Dormand-Prince 5(4) step.

    :return: ``(x5, err)`` where ``x5`` is the fifth-order solution and
        ``err`` the difference to the embedded fourth-order one.
    """
    k = np.zeros(7)
    with np.errstate(over="ignore", invalid="ignore"):
        for i in range(7):
            k[i] = f(t + DP_C[i] * h, x + h * float(DP_A[i, :i] @ k[:i]))
        x5 = x + h * float(DP_B5 @ k)
        err = h * float(DP_E @ k)
    return x5, err


def error_norm(err: float, x: float, x_new: float, rtol: float, atol: float) -> float:
    """Error scaled by the mixed tolerance; a step is acceptable when this is <= 1."""
    return abs(err) / (atol + rtol * max(abs(x), abs(x_new)))


def step_factor(err_norm: float) -> float:
    """Multiplier for the next step size given the scaled error of the last attempt."""
    if err_norm == 0.0:
        return MAX_FACTOR
    factor = SAFETY * err_norm ** (-1.0 / DP_ORDER)
    return min(MAX_FACTOR, max(MIN_FACTOR, factor))
