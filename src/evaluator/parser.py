"""
Parser — tokens to expression tree

Precedence climbing over the binary operators, with prefix signs and
function calls handled in the operand position.

PRECEDENCE (lowest to highest):
    1. ``+ -``   left-associative
    2. ``* /``   left-associative
    3. unary ``- +``
    4. ``^``     right-associative; its right operand may carry a sign

So ``-2^2`` is ``-(2^2)``, ``-2*3`` is ``(-2)*3`` and ``2^3^2`` is
``2^(3^2)``.

The parser never guesses: empty input, a missing operand, an unmatched
parenthesis or anything left over after a complete expression is a
ParseError. Nesting deeper than ``max_depth`` or trees with more than
``max_nodes`` nodes are ResourceExhausted.
"""

import logging
from enum import Enum
from typing import Final

from src.core.domain.errors import ParseError, ResourceExhausted
from src.core.domain.expression import (
    BinaryOp,
    ExpressionNode,
    FunctionCall,
    Identifier,
    NumberLiteral,
    UnaryOp,
)
from src.core.domain.tokens import Token, TokenKind
from src.evaluator.config import EvaluatorConfig

logger = logging.getLogger(__name__)


class Associativity(str, Enum):
    LEFT = "left"
    RIGHT = "right"


BINARY_PRECEDENCE: Final[dict[str, tuple[int, Associativity]]] = {
    "+": (1, Associativity.LEFT),
    "-": (1, Associativity.LEFT),
    "*": (2, Associativity.LEFT),
    "/": (2, Associativity.LEFT),
    "^": (4, Associativity.RIGHT),
}

UNARY_PRECEDENCE: Final[int] = 3
UNARY_OPERATORS: Final[frozenset[str]] = frozenset({"-", "+"})


class Parser:
    """
    One-shot parser over a token list.

    Examples:
        >>> from src.evaluator.lexer import tokenize
        >>> from src.core.domain.expression import to_source
        >>> to_source(Parser(tokenize("1 + 2 * 3")).parse())
        '(1 + (2 * 3))'
    """

    def __init__(self, tokens: list[Token], config: EvaluatorConfig | None = None):
        if not tokens or tokens[-1].kind is not TokenKind.END_OF_INPUT:
            raise ValueError("token list must end with END_OF_INPUT")

        self.config = config or EvaluatorConfig()
        self._tokens = tokens
        self._index = 0
        self._depth = 0
        self._nodes = 0

        # Offsets of "(" not yet closed, innermost last
        self._open_parens: list[int] = []

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    def parse(self) -> ExpressionNode:
        """
        Parse the whole token list as one expression.

        Raises:
            ParseError: Malformed expression
            ResourceExhausted: Nesting or size limit exceeded
        """
        if self._peek().kind is TokenKind.END_OF_INPUT:
            raise ParseError(0, "expression", "end of input", "empty input")

        tree = self._parse_expression(1)

        trailing = self._peek()
        if trailing.kind is not TokenKind.END_OF_INPUT:
            if trailing.kind is TokenKind.RPAREN:
                raise ParseError(
                    trailing.position,
                    "end of input",
                    trailing.describe(),
                    f"unmatched ')' at position {trailing.position}",
                )
            raise ParseError(trailing.position, "end of input", trailing.describe())

        logger.debug("parsed %d nodes", self._nodes)
        return tree

    # -------------------------------------------------------------------------
    # Grammar
    # -------------------------------------------------------------------------

    def _parse_expression(self, min_precedence: int) -> ExpressionNode:
        self._enter()
        left = self._parse_operand()

        while True:
            token = self._peek()
            if token.kind is not TokenKind.OPERATOR:
                break

            precedence, associativity = BINARY_PRECEDENCE[token.text]
            if precedence < min_precedence:
                break

            self._advance()
            next_min = precedence + 1 if associativity is Associativity.LEFT else precedence
            right = self._parse_expression(next_min)
            left = self._node(BinaryOp(token.text, left, right, token.position))

        self._depth -= 1
        return left

    def _parse_operand(self) -> ExpressionNode:
        token = self._peek()

        if token.kind is TokenKind.OPERATOR and token.text in UNARY_OPERATORS:
            self._advance()
            operand = self._parse_expression(UNARY_PRECEDENCE)
            return self._node(UnaryOp(token.text, operand, token.position))

        if token.kind is TokenKind.NUMBER:
            self._advance()
            return self._node(NumberLiteral(token.text, token.position))

        if token.kind is TokenKind.IDENTIFIER:
            self._advance()
            if self._peek().kind is TokenKind.LPAREN:
                return self._parse_call(token)
            return self._node(Identifier(token.text, token.position))

        if token.kind is TokenKind.LPAREN:
            self._advance()
            self._open_parens.append(token.position)
            inner = self._parse_expression(1)
            self._expect_closing()
            return inner

        raise self._error("expression", token)

    def _parse_call(self, name: Token) -> ExpressionNode:
        opening = self._advance()
        self._open_parens.append(opening.position)

        arguments: list[ExpressionNode] = []
        if self._peek().kind is not TokenKind.RPAREN:
            arguments.append(self._parse_expression(1))
            while self._peek().kind is TokenKind.COMMA:
                self._advance()
                arguments.append(self._parse_expression(1))

        self._expect_closing()
        return self._node(FunctionCall(name.text, tuple(arguments), name.position))

    def _expect_closing(self) -> None:
        token = self._peek()
        if token.kind is not TokenKind.RPAREN:
            raise self._error("')'", token)
        self._advance()
        self._open_parens.pop()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _peek(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        if token.kind is not TokenKind.END_OF_INPUT:
            self._index += 1
        return token

    def _enter(self) -> None:
        self._depth += 1
        if self._depth > self.config.max_depth:
            raise ResourceExhausted(
                f"expression nested deeper than {self.config.max_depth} levels",
                self._peek().position,
            )

    def _node(self, node: ExpressionNode) -> ExpressionNode:
        self._nodes += 1
        if self._nodes > self.config.max_nodes:
            raise ResourceExhausted(
                f"expression has more than {self.config.max_nodes} nodes",
                node.position,
            )
        return node

    def _error(self, expected: str, found: Token) -> ParseError:
        """ParseError for ``found``; at end of input, cite the innermost open '('."""
        if found.kind is TokenKind.END_OF_INPUT and self._open_parens:
            opening = self._open_parens[-1]
            return ParseError(
                opening,
                expected,
                found.describe(),
                f"unexpected end of input: expected {expected}, "
                f"unmatched '(' at position {opening}",
            )
        return ParseError(found.position, expected, found.describe())


def parse(tokens: list[Token], config: EvaluatorConfig | None = None) -> ExpressionNode:
    """Convenience wrapper: ``Parser(tokens, config).parse()``."""
    return Parser(tokens, config).parse()
