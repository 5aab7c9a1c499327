"""Constants used throughout the odecompare package."""

DEFAULT_EQUATION: str = "t*x"
"""Right-hand side of dx/dt shown when a session starts."""

DEFAULT_ANALYTIC: str = "e^(0.5*t^2)"
"""Closed-form solution of the default equation through (0, 1)."""

DEFAULT_INITIAL_POINT: tuple[float, float] = (0.0, 1.0)

DEFAULT_STEP_SIZE: float = 0.01

DEFAULT_STEP_BOUNDS: tuple[float, float] = (0.0001, 0.001)
"""(min, max) step of the adaptive solver."""

DEFAULT_HORIZON: float = 3.0

DEFAULT_RTOL: float = 1e-6
DEFAULT_ATOL: float = 1e-6

SAMPLES_PER_UNIT: int = 100
"""Plotted series are sampled at t = n / SAMPLES_PER_UNIT."""

EQUATION_VARIABLES: tuple[str, str] = ("t", "x")
ANALYTIC_VARIABLES: tuple[str] = ("t",)
