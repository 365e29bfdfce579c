"""
Lexer — input line to tokens

Scans left to right and stops at the first character it does not know:
nothing is skipped silently except whitespace. The token stream is finite,
always ends with END_OF_INPUT, and a Lexer can be iterated any number of
times.

Number literals: ``12``, ``1.5``, ``1.``, ``.5``, ``2.5e-3``, ``0.(3)``,
``1.2(34...)``. The ``a/b`` form is lexed as NUMBER ``/`` NUMBER and becomes
an exact division.
"""

import logging
import re
from collections.abc import Iterator
from typing import Final

from src.core.domain.errors import LexError
from src.core.domain.tokens import Token, TokenKind

logger = logging.getLogger(__name__)

# Same shape as Rational's decimal literal, without a sign (unary minus is an
# operator). A repeating group is only taken after a decimal point.
_NUMBER_RE: Final = re.compile(
    r"""
    (?:
        [0-9]+\.[0-9]*(?:\([0-9]+(?:\.\.\.)?\))?
      | \.[0-9]+(?:\([0-9]+(?:\.\.\.)?\))?
      | [0-9]+
    )
    (?:[eE][+-]?[0-9]+)?
    """,
    re.VERBOSE,
)
_IDENTIFIER_RE: Final = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Longest spelling first
OPERATORS: Final[dict[str, str]] = {
    "**": "^",
    "^": "^",
    "+": "+",
    "-": "-",
    "*": "*",
    "/": "/",
}

_PUNCTUATION: Final[dict[str, TokenKind]] = {
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    ",": TokenKind.COMMA,
}


class Lexer:
    """
    Restartable tokenizer for one line.

    Examples:
        >>> [t.text for t in Lexer("2 * (1.5 - x)")]
        ['2', '*', '(', '1.5', '-', 'x', ')', '']
    """

    def __init__(self, text: str):
        self.text = text

    def __iter__(self) -> Iterator[Token]:
        return self._scan()

    def tokens(self) -> list[Token]:
        """
        All tokens, END_OF_INPUT included.

        Raises:
            LexError: On the first unrecognized character
        """
        result = list(self._scan())
        logger.debug("lexed %d tokens from %r", len(result), self.text)
        return result

    def _scan(self) -> Iterator[Token]:
        text = self.text
        position = 0
        length = len(text)

        while position < length:
            char = text[position]

            if char.isspace():
                position += 1
                continue

            number = _NUMBER_RE.match(text, position)
            if number is not None:
                yield Token(TokenKind.NUMBER, number.group(), position)
                position = number.end()
                continue

            identifier = _IDENTIFIER_RE.match(text, position)
            if identifier is not None:
                yield Token(TokenKind.IDENTIFIER, identifier.group(), position)
                position = identifier.end()
                continue

            operator = _match_operator(text, position)
            if operator is not None:
                spelling, symbol = operator
                yield Token(TokenKind.OPERATOR, symbol, position)
                position += len(spelling)
                continue

            if char in _PUNCTUATION:
                yield Token(_PUNCTUATION[char], char, position)
                position += 1
                continue

            raise LexError(position, char)

        yield Token(TokenKind.END_OF_INPUT, "", length)


def _match_operator(text: str, position: int) -> tuple[str, str] | None:
    for spelling, symbol in OPERATORS.items():
        if text.startswith(spelling, position):
            return spelling, symbol
    return None


def tokenize(text: str) -> list[Token]:
    """Convenience wrapper: ``Lexer(text).tokens()``."""
    return Lexer(text).tokens()
