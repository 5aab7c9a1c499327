import logging
import math
from collections.abc import Iterable, Iterator

from odecompare.protocols import AnalyticSolution

logger = logging.getLogger(__name__)


class ErrorEvaluator:
    """
    Signed error of solved points against a closed-form reference.

    The error at ``t`` is ``x_numeric - analytic(t)``. Nothing is cached:
    the reference is cheap compared with integration, and the solver
    histories it is applied to change whenever the configuration does.

    Only construct this with an actual reference; "no reference" is handled
    by the caller (see ``ComparativeSession.error_series``).
    """

    def __init__(self, analytic: AnalyticSolution):
        self.analytic = analytic

    def error_series(
        self, history: Iterable[tuple[float, float]], horizon: float
    ) -> Iterator[tuple[float, float]]:
        """
        Lazily yield ``(t, x - analytic(t))`` for every point with ``t < horizon``.

        Points where the reference cannot be evaluated or is not finite are skipped.

        :param history: Solved ``(t, x)`` pairs ordered by ``t``.
        :param horizon: Exclusive upper bound on ``t``.
        """
        for t, x in history:
            if t >= horizon:
                break
            try:
                reference = self.analytic(t)
            except (ArithmeticError, ValueError) as e:
                logger.debug("Reference undefined at t=%s: %s", t, e)
                continue
            if not math.isfinite(reference):
                logger.debug("Reference not finite at t=%s", t)
                continue
            yield t, x - reference


def error_series(
    history: Iterable[tuple[float, float]], analytic: AnalyticSolution, horizon: float
) -> Iterator[tuple[float, float]]:
    """Shorthand for ``ErrorEvaluator(analytic).error_series(history, horizon)``."""
    return ErrorEvaluator(analytic).error_series(history, horizon)
