#!/usr/bin/env python
"""
Compare Euler, RK4 and Dormand-Prince on dx/dt = t*x, x(0) = 1, whose exact
solution is x(t) = e^(t^2 / 2).

Prints the point table and saves the solution / error plots.

Requires: numpy, sympy, matplotlib
"""

import logging

from odecompare import ComparativeSession
from odecompare.plotters import MatplotlibPlotter, format_table

logger = logging.getLogger("odecompare")


def main() -> None:
    session = ComparativeSession()
    session.set_step_size("0.05")
    session.set_table_points("0.5, 1, 1.5, 2, 2.5")

    # A rejected edit keeps the previous value.
    result = session.set_equation("t*y")
    logger.info("Editing equation to 't*y': %s (%s)", result.status.value, result.error)

    logger.info("\n%s", format_table(session.table_rows()))

    MatplotlibPlotter(session).save_plot("comparison.png")


if __name__ == "__main__":
    main()
