"""Turning user-typed text into callables and numbers.

Expressions are parsed with sympy's ``parse_expr`` (``^`` is accepted as
the power operator) and bound to plain-float callables with ``lambdify``.
A third outcome besides success and failure exists: text that ends in a
dangling exponent such as ``x^`` is reported as ``PENDING`` so that an
expression which is still being typed neither replaces the current one nor
shows up as an error.
"""

import logging
import math
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from tokenize import TokenError
from typing import Any, Final

import sympy as sp
from sympy.core.function import AppliedUndef
from sympy.core.sympify import SympifyError
from sympy.parsing.sympy_parser import convert_xor, parse_expr, standard_transformations

from odecompare.errors import (
    DomainError,
    ExpressionSyntaxError,
    NumberParseError,
    UnboundVariableError,
)

logger = logging.getLogger(__name__)

TRANSFORMATIONS = standard_transformations + (convert_xor,)

# Operand (identifier, number or closing paren) followed by a power operator.
_PENDING_PATTERN = re.compile(r"[\w.)]\s*(\^|\*\*)$")

_LAMBDIFY_MODULES = ["math", "mpmath", "sympy"]


class Pending:
    """Marker for text that is recognisably incomplete."""

    _instance: "Pending | None" = None

    def __new__(cls) -> "Pending":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "PENDING"


PENDING: Final = Pending()


def is_pending(text: str) -> bool:
    """Whether ``text`` ends in a dangling exponent operator (``x^``, ``(t+1)**``)."""
    return _PENDING_PATTERN.search(text.rstrip()) is not None


@dataclass(frozen=True)
class CompiledExpression:
    """
    An immutable, validated expression bound to named variables.

    Calling it with one float per variable returns a float. Evaluation
    failures (division by zero, overflow, math domain errors, complex
    results) raise :class:`DomainError`.

    Attributes:
        text (str): The source text the expression was compiled from.
        variables (tuple[str, ...]): Argument names, in call order.
        expr (sympy.Expr): The parsed sympy expression.
    """

    text: str
    variables: tuple[str, ...]
    expr: sp.Expr = field(compare=False, repr=False)
    _fn: Callable[..., Any] = field(init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        symbols = [sp.Symbol(name) for name in self.variables]
        object.__setattr__(self, "_fn", sp.lambdify(symbols, self.expr, modules=_LAMBDIFY_MODULES))

    def __call__(self, *args: float) -> float:
        if len(args) != len(self.variables):
            raise TypeError(
                f"{self.text!r} takes {len(self.variables)} argument(s) "
                f"({', '.join(self.variables)}), got {len(args)}"
            )
        try:
            value = self._fn(*args)
            return float(value)
        except (ArithmeticError, ValueError) as e:
            raise DomainError(f"{self.text!r} failed at {args}: {e}") from e
        except TypeError as e:
            # float() of a complex / mpc result
            raise DomainError(f"{self.text!r} is not real at {args}") from e


class ExpressionCompiler:
    """Compiles text into :class:`CompiledExpression` objects over a fixed variable set.

    Parsing goes through sympy's ``parse_expr``, which calls ``eval``: only pass text
    typed by the local user, never untrusted input.
    """

    def __init__(self, variables: Sequence[str]):
        """
        :param variables: Names the expression may reference, in call order.
        """
        self.variables = tuple(variables)
        self._local_dict: dict[str, Any] = {name: sp.Symbol(name) for name in self.variables}
        if "e" not in self._local_dict:
            self._local_dict["e"] = sp.E

    def compile(self, text: str) -> CompiledExpression | Pending:
        """
        Compile ``text``.

        :param text: Expression source, e.g. ``"t*x"`` or ``"e^(0.5*t^2)"``.
        :return: The compiled expression, or ``PENDING`` for incomplete input.
        :raises ExpressionSyntaxError: If the text does not parse to a scalar expression.
        :raises UnboundVariableError: If it references unknown variables or functions.
        """
        if is_pending(text):
            logger.debug("Expression %r is incomplete, not compiling", text)
            return PENDING

        if not text.strip():
            raise ExpressionSyntaxError("Expression is empty")

        try:
            expr = parse_expr(text, local_dict=dict(self._local_dict), transformations=TRANSFORMATIONS)
        except (SyntaxError, TokenError, SympifyError, TypeError, ValueError, AttributeError) as e:
            raise ExpressionSyntaxError(f"Cannot parse {text!r}: {e}") from e

        # Tuples ("t, x"), relations ("t > x") and booleans are not Expr.
        if not isinstance(expr, sp.Expr):
            raise ExpressionSyntaxError(f"{text!r} is not a scalar expression")

        allowed = set(self.variables)
        unknown = sorted(
            {str(symbol) for symbol in expr.free_symbols if str(symbol) not in allowed}
            | {str(call.func) for call in expr.atoms(AppliedUndef)}
        )
        if unknown:
            raise UnboundVariableError(unknown, self.variables)

        return CompiledExpression(text=text, variables=self.variables, expr=expr)


def compile_expression(text: str, variables: Sequence[str]) -> CompiledExpression | Pending:
    """Shorthand for ``ExpressionCompiler(variables).compile(text)``."""
    return ExpressionCompiler(variables).compile(text)


def parse_number(text: str) -> float:
    """
    Parse a finite real number, ignoring surrounding whitespace.

    :raises NumberParseError: For anything ``float()`` rejects, and for ``inf``/``nan``.
    """
    try:
        value = float(text)
    except ValueError as e:
        raise NumberParseError(f"Not a number: {text!r}") from e
    if not math.isfinite(value):
        raise NumberParseError(f"Not a finite number: {text!r}")
    return value


def parse_number_list(text: str) -> tuple[float, ...]:
    """
    Parse a comma-separated list of finite reals.

    All whitespace is ignored and blank text is the empty list. A single bad
    token (including an empty one, as in ``"1,,2"``) rejects the whole list.
    """
    cleaned = "".join(text.split())
    if not cleaned:
        return ()
    return tuple(parse_number(token) for token in cleaned.split(","))
