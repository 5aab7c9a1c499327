import logging
import math

from odecompare.constants import DEFAULT_ATOL, DEFAULT_RTOL, DEFAULT_STEP_BOUNDS
from odecompare.errors import ConfigError, DomainError
from odecompare.methods import dormand_prince_step, error_norm, step_factor
from odecompare.protocols import Equation
from odecompare.solvers.base import SolverHandle

logger = logging.getLogger(__name__)


def check_step_bounds(step_bounds: tuple[float, float]) -> tuple[float, float]:
    """
    Validate a ``(min, max)`` step-size pair.

    :raises ConfigError: Unless both bounds are positive finite numbers with ``min <= max``.
    """
    h_min, h_max = step_bounds
    if not (math.isfinite(h_min) and math.isfinite(h_max)) or h_min <= 0 or h_max <= 0:
        raise ConfigError(f"Step bounds must be positive finite numbers, got {step_bounds}")
    if h_min > h_max:
        raise ConfigError(f"Minimum step {h_min} exceeds maximum step {h_max}")
    return float(h_min), float(h_max)


class AdaptiveStepController(SolverHandle):
    """
    Dormand-Prince 5(4) handle with step-size control inside ``(min, max)`` bounds.

    The first attempt after every reconfiguration uses the shared nominal
    step size clamped into the bounds. Rejected attempts shrink the step;
    an attempt at the minimum bound is accepted whatever its error, so
    progress is always made.
    """

    display_name = "DOPRI"

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
        Initialize the adaptive handle.

        :param equation: Right-hand side ``f(t, x)``.
        :param initial_point: Anchor ``(t0, x0)``.
        :param step_size: Nominal size of the first attempt.
        :param step_bounds: ``(min, max)`` step sizes.
        :param rtol: Relative tolerance of the local error.
        :param atol: Absolute tolerance of the local error.
        """
        self.step_bounds = check_step_bounds(step_bounds)
        self.rtol = rtol
        self.atol = atol
        self._next_step = 0.0
        super().__init__(equation, initial_point, step_size)

    def set_step_bounds(self, step_bounds: tuple[float, float]) -> None:
        """
        Replace the ``(min, max)`` bounds and clear this handle's history.

        :raises ConfigError: If the bounds are invalid; nothing changes in that case.
        """
        self.step_bounds = check_step_bounds(step_bounds)
        self.invalidate()

    def _on_invalidate(self) -> None:
        self._next_step = self._clamp(self.step_size)

    def _clamp(self, h: float) -> float:
        h_min, h_max = self.step_bounds
        return min(max(h, h_min), h_max)

    def _extend(self, t: float) -> None:
        h_min, _ = self.step_bounds
        rejected = 0
        while True:
            t_i, x_i = self._ts[-1], self._xs[-1]
            h = self._next_step
            if t_i + h > t:
                break
            if t_i + h <= t_i:
                raise DomainError(
                    f"[{self.display_name}] Step {h} is below float resolution at t={t_i}"
                )

            x_new, err = self._apply(dormand_prince_step, t_i, x_i, h)
            norm = error_norm(err, x_i, x_new, self.rtol, self.atol)
            if not math.isfinite(norm):
                norm = math.inf

            if norm <= 1.0 or h <= h_min:
                if norm > 1.0:
                    logger.debug(
                        "[%s] Accepting step at minimum size %s near t=%s (error norm %.3g)",
                        self.display_name,
                        h,
                        t_i,
                        norm,
                    )
                self._record(t_i + h, x_new)
            else:
                rejected += 1
            self._next_step = self._clamp(h * step_factor(norm))

        logger.debug(
            "[%s] Extended history to t=%s (%d steps, %d rejected)",
            self.display_name,
            self._ts[-1],
            self.integration_steps,
            rejected,
        )

    def _partial_step(self, t: float, x: float, h: float) -> float:
        x_new, _ = self._apply(dormand_prince_step, t, x, h)
        return x_new
