"""
Tests for the Parser

Checks:
1. Precedence and associativity (shown via fully parenthesized source)
2. Unary signs, function calls, parentheses
3. Parse errors: empty input, missing operand, unmatched parentheses,
   trailing tokens
4. Nesting and size limits
"""

import pytest

from src.core.domain.errors import ParseError, ResourceExhausted
from src.core.domain.expression import (
    BinaryOp,
    FunctionCall,
    NumberLiteral,
    count_nodes,
    to_source,
)
from src.evaluator.config import EvaluatorConfig
from src.evaluator.lexer import tokenize
from src.evaluator.parser import Parser, parse


def grouped(text: str, config: EvaluatorConfig | None = None) -> str:
    return to_source(parse(tokenize(text), config))


# =============================================================================
# GRAMMAR
# =============================================================================


class TestPrecedence:
    """Tests for operator precedence and associativity"""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("1 + 2 * 3", "(1 + (2 * 3))"),
            ("1 - 2 - 3", "((1 - 2) - 3)"),
            ("8 / 4 / 2", "((8 / 4) / 2)"),
            ("2 ^ 3 ^ 2", "(2 ^ (3 ^ 2))"),
            ("-2 ^ 2", "(-(2 ^ 2))"),
            ("-2 * 3", "((-2) * 3)"),
            ("2 ^ -1", "(2 ^ (-1))"),
            ("(1 + 2) * 3", "((1 + 2) * 3)"),
            ("--1", "(-(-1))"),
            ("+1", "(+1)"),
            ("2 ** 3", "(2 ^ 3)"),
        ],
    )
    def test_grouping(self, text: str, expected: str) -> None:
        assert grouped(text) == expected

    def test_positions_point_at_operators(self) -> None:
        tree = parse(tokenize("10 + 2"))
        assert isinstance(tree, BinaryOp)
        assert tree.position == 3
        assert tree.left == NumberLiteral("10", 0)
        assert tree.right == NumberLiteral("2", 5)


class TestCalls:
    """Tests for function calls and identifiers"""

    def test_call_arguments(self) -> None:
        tree = parse(tokenize("max(1, 2 + 3)"))
        assert isinstance(tree, FunctionCall)
        assert tree.name == "max"
        assert len(tree.arguments) == 2
        assert grouped("max(1, 2 + 3)") == "max(1, (2 + 3))"

    def test_call_without_arguments(self) -> None:
        tree = parse(tokenize("f()"))
        assert tree == FunctionCall("f", (), 0)

    def test_identifier(self) -> None:
        assert grouped("2 * pi") == "(2 * pi)"


# =============================================================================
# ERRORS
# =============================================================================


class TestParseErrors:
    """Tests for malformed input"""

    def test_empty_input(self) -> None:
        with pytest.raises(ParseError) as info:
            parse(tokenize("   "))
        assert info.value.position == 0
        assert info.value.message == "empty input"

    def test_unmatched_open_paren(self) -> None:
        """'(1 + ' cites the unmatched parenthesis"""
        with pytest.raises(ParseError) as info:
            parse(tokenize("(1 + "))
        assert info.value.position == 0
        assert "unmatched '('" in info.value.message
        assert info.value.found == "end of input"

    def test_innermost_paren_is_cited(self) -> None:
        with pytest.raises(ParseError) as info:
            parse(tokenize("(1 + (2"))
        assert info.value.position == 5
        assert info.value.expected == "')'"

    def test_unmatched_close_paren(self) -> None:
        with pytest.raises(ParseError) as info:
            parse(tokenize("1 + 2)"))
        assert info.value.position == 5
        assert "unmatched ')'" in info.value.message

    def test_missing_operand(self) -> None:
        with pytest.raises(ParseError) as info:
            parse(tokenize("1 * * 2"))
        assert info.value.position == 4
        assert info.value.expected == "expression"

    def test_trailing_tokens(self) -> None:
        with pytest.raises(ParseError) as info:
            parse(tokenize("1 2"))
        assert info.value.position == 2
        assert info.value.found == "number 2"

    def test_empty_parentheses(self) -> None:
        with pytest.raises(ParseError):
            parse(tokenize("()"))

    def test_token_list_must_be_terminated(self) -> None:
        with pytest.raises(ValueError):
            Parser([])


# =============================================================================
# LIMITS
# =============================================================================


class TestLimits:
    """Tests for nesting depth and tree size"""

    def test_deep_nesting(self) -> None:
        text = "(" * 200 + "1" + ")" * 200
        with pytest.raises(ResourceExhausted):
            parse(tokenize(text))

    def test_nesting_within_limit(self) -> None:
        text = "(" * 50 + "1" + ")" * 50
        assert grouped(text) == "1"

    def test_configured_depth(self) -> None:
        config = EvaluatorConfig(max_depth=5)
        with pytest.raises(ResourceExhausted):
            grouped("((((((1))))))", config)

    def test_long_unary_chain(self) -> None:
        with pytest.raises(ResourceExhausted):
            parse(tokenize("-" * 500 + "1"))

    def test_node_limit(self) -> None:
        config = EvaluatorConfig(max_nodes=10)
        with pytest.raises(ResourceExhausted):
            grouped("+".join(["1"] * 20), config)

    def test_long_flat_chain_within_limit(self) -> None:
        tree = parse(tokenize("+".join(["1"] * 300)))
        assert count_nodes(tree) == 599
