"""
ExpressionNode — expression tree produced by the parser

Each node owns its children and remembers where it came from in the input
line, so evaluation errors can point at the offending operator.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class NumberLiteral:
    """Literal number exactly as written (``1.5``, ``0.(3)``, ``2e-3``)."""

    text: str
    position: int


@dataclass(frozen=True)
class Identifier:
    """Reference to a named constant."""

    name: str
    position: int


@dataclass(frozen=True)
class UnaryOp:
    """Prefix ``-`` or ``+``."""

    op: str
    operand: "ExpressionNode"
    position: int


@dataclass(frozen=True)
class BinaryOp:
    """Infix operator; ``position`` is the operator's offset."""

    op: str
    left: "ExpressionNode"
    right: "ExpressionNode"
    position: int


@dataclass(frozen=True)
class FunctionCall:
    """``name(arg, ...)``; ``position`` is the name's offset."""

    name: str
    arguments: tuple["ExpressionNode", ...]
    position: int


ExpressionNode = Union[NumberLiteral, Identifier, UnaryOp, BinaryOp, FunctionCall]


def children(node: ExpressionNode) -> tuple[ExpressionNode, ...]:
    """Direct children in evaluation order (left to right)."""
    if isinstance(node, BinaryOp):
        return (node.left, node.right)
    if isinstance(node, UnaryOp):
        return (node.operand,)
    if isinstance(node, FunctionCall):
        return node.arguments
    return ()


def count_nodes(node: ExpressionNode) -> int:
    """Number of nodes in the tree (iterative, safe for deep trees)."""
    total = 0
    pending = [node]
    while pending:
        current = pending.pop()
        total += 1
        pending.extend(children(current))
    return total


def to_source(node: ExpressionNode) -> str:
    """
    Fully parenthesized rendering of a tree, showing how it was grouped.

    Examples:
        ``1 + 2 * 3`` renders as ``(1 + (2 * 3))``
    """
    if isinstance(node, NumberLiteral):
        return node.text
    if isinstance(node, Identifier):
        return node.name
    if isinstance(node, UnaryOp):
        return f"({node.op}{to_source(node.operand)})"
    if isinstance(node, BinaryOp):
        return f"({to_source(node.left)} {node.op} {to_source(node.right)})"
    arguments = ", ".join(to_source(argument) for argument in node.arguments)
    return f"{node.name}({arguments})"
