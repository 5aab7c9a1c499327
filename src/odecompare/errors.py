"""Exception hierarchy for odecompare.

Parsing failures derive from ``ValueError`` and evaluation failures from
``ArithmeticError`` so callers outside the package can catch them with the
built-in categories as well.
"""


class OdeCompareError(Exception):
    """Base class for every error raised by odecompare."""


class ParseError(OdeCompareError, ValueError):
    """Text input could not be turned into a value."""


class ExpressionSyntaxError(ParseError):
    """Expression text does not parse."""


class UnboundVariableError(ParseError):
    """Expression references identifiers outside the allowed variables."""

    def __init__(self, names: list[str], allowed: tuple[str, ...]):
        self.names = names
        self.allowed = allowed
        super().__init__(
            f"Unknown identifier(s) {', '.join(names)}; expected only {', '.join(allowed)}"
        )


class NumberParseError(ParseError):
    """Text is not a finite real number (or a list of them)."""


class DomainError(OdeCompareError, ArithmeticError):
    """A numeric operation failed at evaluation time."""


class ConfigError(OdeCompareError, ValueError):
    """Parsed values violate a cross-field constraint."""
