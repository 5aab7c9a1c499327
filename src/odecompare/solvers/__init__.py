"""Solver handles, one per integration strategy.

Handles
-------
EulerSolver : forward Euler on a fixed grid
RK4Solver : classical Runge-Kutta on a fixed grid
AdaptiveStepController : Dormand-Prince 5(4) with (min, max) step bounds

Every handle caches the points it has solved, so repeated queries are
answered without integrating from the initial point again.

```python
from odecompare.solvers import RK4Solver

solver = RK4Solver(lambda t, x: t * x, initial_point=(0.0, 1.0), step_size=0.01)
solver.solve_at_point(1.0)  # ~ 1.6487
solver.solve_at_point(2.0)  # continues from t=1.0
```
"""

from odecompare.solvers.adaptive import AdaptiveStepController, check_step_bounds
from odecompare.solvers.base import SolverHandle, check_step_size
from odecompare.solvers.fixed_step import EulerSolver, FixedStepSolver, RK4Solver

__all__ = [
    "AdaptiveStepController",
    "EulerSolver",
    "FixedStepSolver",
    "RK4Solver",
    "SolverHandle",
    "check_step_bounds",
    "check_step_size",
]
