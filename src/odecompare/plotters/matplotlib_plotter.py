# pyright: basic

import logging
from collections.abc import Iterable

from matplotlib import pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from odecompare.session import ComparativeSession, TableRow
from odecompare.solver_set import Strategy

logger = logging.getLogger(__name__)

TABLE_HEADER = ("t", "x(t)", "Euler", "RK4", "DOPRI")


class MatplotlibPlotter:
    def __init__(self, session: ComparativeSession):
        """
        Initialize the plotter with the session whose data it draws.

        :param session: An instance of ComparativeSession.
        """
        self.session = session

    def plot_solutions(self, ax: Axes | None = None, horizon: float | None = None) -> Axes:
        """
        Draw the three numerical solutions, plus the reference when one is configured.

        :param ax: Axes to draw on. If None, the current axes are used.
        :param horizon: Largest t to draw. If None, the session horizon is used.
        """
        ax = ax if ax is not None else plt.gca()

        for strategy in Strategy:
            t, x = self.session.solution_series(strategy, horizon).to_arrays()
            ax.plot(t, x, label=f"{self.session.handle(strategy).display_name} Solution")

        if self.session.has_reference:
            t, x = self.session.analytic_series(horizon).to_arrays()
            ax.plot(t, x, "k--", label="Actual Solution")

        ax.set_title("Solution Plot")
        ax.set_xlabel("t")
        ax.set_ylabel("x")
        ax.legend()
        return ax

    def plot_errors(self, ax: Axes | None = None, horizon: float | None = None) -> Axes:
        """
        Draw the signed error of each solver against the reference.

        Without a reference the panel is left empty and says so.
        """
        ax = ax if ax is not None else plt.gca()
        ax.set_title("Error Plot")
        ax.set_xlabel("t")

        if not self.session.has_reference:
            ax.text(0.5, 0.5, "no reference", ha="center", va="center", transform=ax.transAxes)
            return ax

        for strategy in Strategy:
            series = self.session.error_series(strategy, horizon)
            assert series is not None
            t, err = series.to_arrays()
            ax.plot(t, err, label=f"{self.session.handle(strategy).display_name} Error")
        ax.set_ylabel("x - x(t)")
        ax.legend()
        return ax

    def plot_comparison(self, horizon: float | None = None) -> Figure:
        """Solution and error panels side by side."""
        # Solutions first: the error panel reads the histories they fill.
        fig, (ax_solution, ax_error) = plt.subplots(1, 2, figsize=(14, 6))
        self.plot_solutions(ax_solution, horizon)
        self.plot_errors(ax_error, horizon)
        fig.tight_layout()
        return fig

    def save_plot(self, path: str, horizon: float | None = None) -> None:
        fig = self.plot_comparison(horizon)
        logger.info("Saving plots to: %s", path)
        fig.savefig(path, dpi=300)
        plt.close(fig)


def format_table(rows: Iterable[TableRow]) -> str:
    """Render table rows as aligned text, with ``n/a`` for missing values."""
    lines = [TABLE_HEADER]
    for row in rows:
        lines.append(
            (
                f"{row.t:g}",
                *(
                    "n/a" if value is None else f"{value:.10g}"
                    for value in (row.analytic, row.euler, row.rk4, row.adaptive)
                ),
            )
        )

    widths = [max(len(line[i]) for line in lines) for i in range(len(TABLE_HEADER))]
    return "\n".join(
        "  ".join(cell.rjust(width) for cell, width in zip(line, widths, strict=True))
        for line in lines
    )
