"""
Domain models and value objects.

Contains tokens, expression trees, and evaluation errors. Outcome types
live in src.core.domain.outcome (they depend on the number systems in
src.core.math and are imported from there directly).
"""

from src.core.domain.errors import (
    DivisionByZero,
    DomainError,
    ErrorKind,
    EvaluationError,
    LexError,
    ParseError,
    ResourceExhausted,
    UnknownIdentifier,
)
from src.core.domain.expression import (
    BinaryOp,
    ExpressionNode,
    FunctionCall,
    Identifier,
    NumberLiteral,
    UnaryOp,
    children,
    count_nodes,
    to_source,
)
from src.core.domain.tokens import Token, TokenKind

__all__ = [
    # Errors
    "ErrorKind",
    "EvaluationError",
    "LexError",
    "ParseError",
    "DivisionByZero",
    "ResourceExhausted",
    "UnknownIdentifier",
    "DomainError",
    # Tokens
    "Token",
    "TokenKind",
    # Expression tree
    "ExpressionNode",
    "NumberLiteral",
    "Identifier",
    "UnaryOp",
    "BinaryOp",
    "FunctionCall",
    "children",
    "count_nodes",
    "to_source",
]
