"""
Token — lexical unit of an input line
"""

from enum import Enum
from typing import NamedTuple


class TokenKind(str, Enum):
    """Kind of a lexical token"""

    NUMBER = "number"
    OPERATOR = "operator"
    LPAREN = "("
    RPAREN = ")"
    IDENTIFIER = "identifier"
    COMMA = ","
    END_OF_INPUT = "end of input"


class Token(NamedTuple):
    """
    One token of the input.

    Attributes:
        kind: Token kind
        text: Source text (operators are normalized, ``**`` becomes ``^``)
        position: 0-based offset of the first character in the line
    """

    kind: TokenKind
    text: str
    position: int

    def describe(self) -> str:
        """Short human description, used in parse error messages."""
        if self.kind is TokenKind.END_OF_INPUT:
            return "end of input"
        if self.kind is TokenKind.NUMBER:
            return f"number {self.text}"
        if self.kind is TokenKind.IDENTIFIER:
            return f"identifier {self.text!r}"
        return repr(self.text)
