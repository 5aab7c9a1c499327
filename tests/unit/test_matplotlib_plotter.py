import matplotlib.pyplot as plt
import pytest

from odecompare.plotters import MatplotlibPlotter, format_table
from odecompare.session import ComparativeSession, TableRow


@pytest.fixture
def plotter(session: ComparativeSession) -> MatplotlibPlotter:
    return MatplotlibPlotter(session)


def test_plot_comparison_with_reference(plotter):
    fig = plotter.plot_comparison(horizon=0.5)
    ax_solution, ax_error = fig.axes

    # Three solvers plus the reference curve
    assert len(ax_solution.get_lines()) == 4
    assert len(ax_error.get_lines()) == 3
    labels = [line.get_label() for line in ax_solution.get_lines()]
    assert "Actual Solution" in labels
    assert "RK4 Solution" in labels
    plt.close(fig)


def test_plot_comparison_without_reference(plotter, session):
    session.set_analytic("")

    fig = plotter.plot_comparison(horizon=0.5)
    ax_solution, ax_error = fig.axes

    assert len(ax_solution.get_lines()) == 3
    assert len(ax_error.get_lines()) == 0
    assert [text.get_text() for text in ax_error.texts] == ["no reference"]
    plt.close(fig)


def test_save_plot(plotter, tmp_path):
    path = tmp_path / "comparison.png"

    plotter.save_plot(str(path), horizon=0.2)

    assert path.exists()
    assert path.stat().st_size > 0


def test_format_table():
    rows = [
        TableRow(t=0.5, analytic=None, euler=1.1, rk4=1.2, adaptive=1.3),
        TableRow(t=1.0, analytic=1.5, euler=None, rk4=None, adaptive=None),
    ]

    lines = format_table(rows).splitlines()

    assert len(lines) == 3
    assert lines[0].split() == ["t", "x(t)", "Euler", "RK4", "DOPRI"]
    assert lines[1].split() == ["0.5", "n/a", "1.1", "1.2", "1.3"]
    assert lines[2].split() == ["1", "1.5", "n/a", "n/a", "n/a"]
    # Columns are aligned
    assert len({len(line) for line in lines}) == 1
