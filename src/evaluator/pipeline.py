"""
Line pipeline — the one operation the core offers a front end

    text -> Lexer -> Parser -> DualEvaluator -> ErrorReport -> Success | Failure

Each call runs the whole pipeline to completion and keeps nothing: a failed
line cannot affect the next one. Exactly the evaluation errors are turned
into Failure values; anything else is a bug and propagates.
"""

import logging

from src.core.domain.errors import (
    DivisionByZero,
    EvaluationError,
    ParseError,
    ResourceExhausted,
)
from src.core.domain.outcome import EvalOutcome, Failure, Success
from src.evaluator.config import EvaluatorConfig
from src.evaluator.dual_evaluator import DualEvaluator
from src.evaluator.error_report import compute_error_metrics
from src.evaluator.lexer import Lexer
from src.evaluator.parser import Parser

logger = logging.getLogger(__name__)


class LineEvaluator:
    """
    Evaluates one line of text at a time.

    Examples:
        >>> outcome = LineEvaluator().evaluate("1/2 + 1/4")
        >>> outcome.ok, str(outcome.result.exact), outcome.metrics.ulp_distance
        (True, '3/4', 0)
    """

    def __init__(self, config: EvaluatorConfig | None = None):
        self.config = config or EvaluatorConfig()
        self._evaluator = DualEvaluator(self.config)

    def evaluate(self, line: str) -> EvalOutcome:
        """
        Evaluate a line.

        Args:
            line: Expression text

        Returns:
            Success with result and metrics, or Failure describing the error
        """
        try:
            outcome = self._run(line)
        except EvaluationError as error:
            outcome = _failure(error)
            logger.debug("line %r failed: %s (%s)", line, error.message, error.kind.value)
        else:
            logger.debug("line %r -> %s", line, outcome.metrics.classification.value)
        return outcome

    def _run(self, line: str) -> Success:
        if len(line) > self.config.max_input_length:
            raise ResourceExhausted(
                f"input is {len(line)} characters long; the limit is "
                f"{self.config.max_input_length}",
                self.config.max_input_length,
            )

        tokens = Lexer(line).tokens()
        tree = Parser(tokens, self.config).parse()
        result = self._evaluator.evaluate(tree)
        return Success(result, compute_error_metrics(result))


def _failure(error: EvaluationError) -> Failure:
    expected = found = None
    if isinstance(error, ParseError):
        expected, found = error.expected, error.found

    shadow = error.shadow if isinstance(error, DivisionByZero) else None
    return Failure(
        kind=error.kind,
        message=error.message,
        position=error.position,
        expected=expected,
        found=found,
        shadow=shadow,
    )


def evaluate_line(line: str, config: EvaluatorConfig | None = None) -> EvalOutcome:
    """Convenience wrapper: ``LineEvaluator(config).evaluate(line)``."""
    return LineEvaluator(config).evaluate(line)
