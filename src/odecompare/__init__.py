"""odecompare: Side-by-side comparison of numerical ODE solvers."""

import logging
import sys

from odecompare.error_evaluator import ErrorEvaluator
from odecompare.errors import (
    ConfigError,
    DomainError,
    ExpressionSyntaxError,
    NumberParseError,
    OdeCompareError,
    ParseError,
    UnboundVariableError,
)
from odecompare.expression import PENDING, CompiledExpression, ExpressionCompiler, Pending
from odecompare.session import (
    ComparativeSession,
    EditResult,
    EditStatus,
    Series,
    SessionField,
    TableRow,
)
from odecompare.solver_set import SolverSet, Strategy

# Configure library logger with default handler
_logger = logging.getLogger("odecompare")
if not _logger.handlers:
    _handler = logging.StreamHandler(sys.stdout)
    _logger.addHandler(_handler)
    _logger.setLevel(logging.INFO)

__all__ = [
    "PENDING",
    "ComparativeSession",
    "CompiledExpression",
    "ConfigError",
    "DomainError",
    "EditResult",
    "EditStatus",
    "ErrorEvaluator",
    "ExpressionCompiler",
    "ExpressionSyntaxError",
    "NumberParseError",
    "OdeCompareError",
    "ParseError",
    "Pending",
    "Series",
    "SessionField",
    "SolverSet",
    "Strategy",
    "TableRow",
    "UnboundVariableError",
]
