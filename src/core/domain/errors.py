"""
Evaluation errors

Every way a line can fail to evaluate has its own exception class and its
own ErrorKind tag. All of them derive from EvaluationError so the pipeline
can turn exactly these (and nothing else) into Failure outcomes.

Floating-point anomalies (Inf, NaN) are NOT errors: they are results of the
shadow evaluation and travel through the success path.
"""

from enum import Enum
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from src.core.math.float_shadow import FloatShadow


class ErrorKind(str, Enum):
    """Tag of a failed evaluation"""

    LEX_ERROR = "LexError"
    PARSE_ERROR = "ParseError"
    DIVISION_BY_ZERO = "DivisionByZero"
    RESOURCE_EXHAUSTED = "ResourceExhausted"
    UNKNOWN_IDENTIFIER = "UnknownIdentifier"
    DOMAIN_ERROR = "DomainError"


class EvaluationError(Exception):
    """
    Base class for turn-level evaluation failures.

    Attributes:
        message: Human-readable description
        position: 0-based offset in the input line, if known
    """

    kind: ClassVar[ErrorKind]

    def __init__(self, message: str, position: int | None = None):
        super().__init__(message)
        self.message = message
        self.position = position


class LexError(EvaluationError):
    """Unrecognized character in the input."""

    kind = ErrorKind.LEX_ERROR

    def __init__(self, position: int, character: str):
        super().__init__(
            f"unrecognized character {character!r} at position {position}",
            position,
        )
        self.character = character


class ParseError(EvaluationError):
    """Malformed expression: missing operand, unmatched parenthesis, trailing tokens."""

    kind = ErrorKind.PARSE_ERROR

    def __init__(
        self,
        position: int,
        expected: str,
        found: str,
        message: str | None = None,
    ):
        super().__init__(
            message or f"expected {expected}, found {found} at position {position}",
            position,
        )
        self.expected = expected
        self.found = found


class DivisionByZero(EvaluationError, ZeroDivisionError):
    """
    Exact division by the rational zero.

    When raised by the evaluator, ``shadow`` holds the value the binary64
    side produced for the whole expression (typically Inf or NaN).
    """

    kind = ErrorKind.DIVISION_BY_ZERO

    def __init__(
        self,
        message: str = "division by zero",
        position: int | None = None,
        shadow: "FloatShadow | None" = None,
    ):
        super().__init__(message, position)
        self.shadow = shadow


class ResourceExhausted(EvaluationError):
    """Expression too deep, too large, or producing unreasonably large numbers."""

    kind = ErrorKind.RESOURCE_EXHAUSTED


class UnknownIdentifier(EvaluationError):
    """Reference to a name that is not registered."""

    kind = ErrorKind.UNKNOWN_IDENTIFIER

    def __init__(self, name: str, position: int | None = None):
        super().__init__(f"unknown identifier {name!r}", position)
        self.name = name


class DomainError(EvaluationError, ValueError):
    """Operation outside the exact evaluator's domain (e.g. 2^(1/2))."""

    kind = ErrorKind.DOMAIN_ERROR
