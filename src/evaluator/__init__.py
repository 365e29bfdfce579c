"""
Evaluator: lexer, parser, dual evaluator, and error report.

``LineEvaluator`` ties them together; it is the only entry point a front
end needs.
"""

from src.evaluator.config import EvaluatorConfig
from src.evaluator.dual_evaluator import DualEvaluator
from src.evaluator.error_report import compute_error_metrics
from src.evaluator.lexer import Lexer, tokenize
from src.evaluator.parser import Parser, parse
from src.evaluator.pipeline import LineEvaluator, evaluate_line
from src.evaluator.symbols import DEFAULT_SYMBOLS, FunctionRule, NamedConstant, SymbolTable

__all__ = [
    "EvaluatorConfig",
    "DualEvaluator",
    "compute_error_metrics",
    "Lexer",
    "tokenize",
    "Parser",
    "parse",
    "LineEvaluator",
    "evaluate_line",
    "DEFAULT_SYMBOLS",
    "FunctionRule",
    "NamedConstant",
    "SymbolTable",
]
