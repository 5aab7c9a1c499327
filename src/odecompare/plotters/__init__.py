from odecompare.plotters.matplotlib_plotter import MatplotlibPlotter, format_table

__all__ = ["MatplotlibPlotter", "format_table"]
