"""
DualEvaluator — exact and binary64 evaluation in lock-step

One post-order walk over the expression tree. At every node the SAME
operator method (add/sub/mul/div/pow/neg) is dispatched on the Rational and
on the FloatShadow values of the children, so both sides perform literally
the same sequence of operations.

Division by an exact zero does not stop the walk: the exact side is marked
faulted (the first fault's position is kept) and the shadow side carries on,
because the Inf/NaN it produces is exactly what is being studied. The walk
then ends with DivisionByZero carrying the final shadow value.

The walk uses an explicit stack, so long operator chains (``1+1+...+1``)
cannot exhaust the Python call stack.
"""

import logging
from dataclasses import dataclass
from typing import Final

from src.core.domain.errors import (
    DivisionByZero,
    DomainError,
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
)
from src.core.domain.outcome import EvalResult
from src.core.math.float_shadow import FloatShadow
from src.core.math.rational import Rational
from src.evaluator.config import EvaluatorConfig
from src.evaluator.symbols import FunctionRule

logger = logging.getLogger(__name__)


# Operator symbol -> method name shared by Rational and FloatShadow
BINARY_METHODS: Final[dict[str, str]] = {
    "+": "add",
    "-": "sub",
    "*": "mul",
    "/": "div",
    "^": "pow",
}


@dataclass(frozen=True)
class DualValue:
    """
    Paired value of one sub-expression.

    ``exact`` is None once the exact side has faulted on a division by zero;
    ``fault`` is the position of the first such division.
    """

    exact: Rational | None
    shadow: FloatShadow
    fault: int | None = None
    approximations: tuple[str, ...] = ()


class DualEvaluator:
    """
    Evaluates expression trees on both number systems.

    Holds no state between calls: evaluating the same tree twice gives equal
    results.
    """

    def __init__(self, config: EvaluatorConfig | None = None):
        self.config = config or EvaluatorConfig()

    def evaluate(self, tree: ExpressionNode) -> EvalResult:
        """
        Evaluate a tree.

        Returns:
            EvalResult with the exact and shadow values

        Raises:
            DivisionByZero: Exact side divided by zero (``shadow`` attribute
                holds the binary64 outcome)
            UnknownIdentifier: Name not in the symbol table
            DomainError: Non-integer exponent, wrong function arity, misuse
                of a constant as a function or vice versa
            ResourceExhausted: Exponent or exact result too large
        """
        value = self._walk(tree)

        if value.fault is not None:
            logger.debug("exact side faulted at %d, shadow=%r", value.fault, value.shadow.value)
            raise DivisionByZero(
                f"division by zero at position {value.fault}",
                value.fault,
                shadow=value.shadow,
            )

        return EvalResult(value.exact, value.shadow, value.approximations)

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    def _walk(self, root: ExpressionNode) -> DualValue:
        values: list[DualValue] = []
        pending: list[tuple[ExpressionNode, bool]] = [(root, False)]

        while pending:
            node, expanded = pending.pop()

            if isinstance(node, NumberLiteral):
                values.append(self._literal(node))
                continue
            if isinstance(node, Identifier):
                values.append(self._identifier(node))
                continue

            operands_of = children(node)
            if not expanded:
                if isinstance(node, FunctionCall):
                    self._resolve_function(node)
                pending.append((node, True))
                pending.extend((child, False) for child in reversed(operands_of))
                continue

            count = len(operands_of)
            operands = values[len(values) - count:]
            del values[len(values) - count:]
            values.append(self._apply(node, operands))

        return values[0]

    def _apply(self, node: ExpressionNode, operands: list[DualValue]) -> DualValue:
        if isinstance(node, BinaryOp):
            return self._binary(node, operands[0], operands[1])
        if isinstance(node, UnaryOp):
            return self._unary(node, operands[0])
        return self._call(node, operands)

    # -------------------------------------------------------------------------
    # Leaves
    # -------------------------------------------------------------------------

    def _literal(self, node: NumberLiteral) -> DualValue:
        try:
            exact = Rational.parse(node.text, max_exponent=self.config.max_literal_exponent)
        except ResourceExhausted as error:
            raise ResourceExhausted(error.message, node.position) from error
        self._check_size(exact, node.position)
        return DualValue(exact, FloatShadow.from_rational(exact, node.text))

    def _identifier(self, node: Identifier) -> DualValue:
        symbols = self.config.symbols
        constant = symbols.lookup_constant(node.name)
        if constant is None:
            if symbols.lookup_function(node.name) is not None:
                raise DomainError(
                    f"{node.name!r} is a function; call it as {node.name}(...)",
                    node.position,
                )
            raise UnknownIdentifier(node.name, node.position)

        approximations = (node.name,) if constant.approximate else ()
        return DualValue(constant.exact, constant.shadow, None, approximations)

    # -------------------------------------------------------------------------
    # Operators
    # -------------------------------------------------------------------------

    def _binary(self, node: BinaryOp, left: DualValue, right: DualValue) -> DualValue:
        method = BINARY_METHODS[node.op]
        if node.op == "^":
            self._check_power(node, left, right)

        shadow = getattr(left.shadow, method)(right.shadow)
        fault = left.fault if left.fault is not None else right.fault

        exact = None
        if left.exact is not None and right.exact is not None:
            try:
                exact = getattr(left.exact, method)(right.exact)
            except DivisionByZero:
                fault = node.position
            else:
                self._check_size(exact, node.position)

        return DualValue(exact, shadow, fault, _merge(left, right))

    def _unary(self, node: UnaryOp, operand: DualValue) -> DualValue:
        if node.op == "+":
            return operand
        exact = operand.exact.neg() if operand.exact is not None else None
        return DualValue(exact, operand.shadow.neg(), operand.fault, operand.approximations)

    def _call(self, node: FunctionCall, operands: list[DualValue]) -> DualValue:
        rule = self._resolve_function(node)

        shadow = rule.shadow(*(operand.shadow for operand in operands))
        fault = next((operand.fault for operand in operands if operand.fault is not None), None)

        exact = None
        if all(operand.exact is not None for operand in operands):
            try:
                exact = rule.exact(*(operand.exact for operand in operands))
            except DivisionByZero:
                fault = node.position
            else:
                self._check_size(exact, node.position)

        return DualValue(exact, shadow, fault, _merge(*operands))

    # -------------------------------------------------------------------------
    # Checks
    # -------------------------------------------------------------------------

    def _resolve_function(self, node: FunctionCall) -> FunctionRule:
        symbols = self.config.symbols
        rule = symbols.lookup_function(node.name)
        if rule is None:
            if symbols.lookup_constant(node.name) is not None:
                raise DomainError(f"{node.name!r} is a constant, not a function", node.position)
            raise UnknownIdentifier(node.name, node.position)

        if len(node.arguments) != rule.arity:
            raise DomainError(
                f"{node.name}() takes {rule.arity} argument(s), got {len(node.arguments)}",
                node.position,
            )
        return rule

    def _check_power(self, node: BinaryOp, base: DualValue, exponent: DualValue) -> None:
        if exponent.exact is None:
            return

        if not exponent.exact.is_integer():
            raise DomainError(
                "exponent is not an integer; "
                "the exact result would not be rational",
                node.position,
            )

        n = abs(exponent.exact.numerator)
        if n > self.config.max_exponent:
            raise ResourceExhausted(
                f"exponent exceeds the limit of ±{self.config.max_exponent}",
                node.position,
            )
        if base.exact is not None and base.exact.bit_length() * n > self.config.max_rational_bits:
            raise ResourceExhausted(
                f"power would exceed {self.config.max_rational_bits} bits",
                node.position,
            )

    def _check_size(self, exact: Rational, position: int) -> None:
        if exact.bit_length() > self.config.max_rational_bits:
            raise ResourceExhausted(
                f"exact value exceeds {self.config.max_rational_bits} bits",
                position,
            )


def _merge(*values: DualValue) -> tuple[str, ...]:
    """Union of approximation names, first-seen order."""
    names: dict[str, None] = {}
    for value in values:
        names.update(dict.fromkeys(value.approximations))
    return tuple(names)
