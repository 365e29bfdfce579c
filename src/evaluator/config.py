"""
EvaluatorConfig — configuration surface of the evaluator

Immutable pydantic model. The floating-point format and rounding mode are
fixed (binary64, round-to-nearest ties-to-even, which is what the host
hardware does natively); they are part of the model so that results can
state which format they describe. The limits bound the work a single line
may cause; exceeding any of them is a ResourceExhausted failure.
"""

from typing import Final, Literal

from pydantic import BaseModel, Field

from src.evaluator.symbols import DEFAULT_SYMBOLS, SymbolTable

# Parser recursion per nesting level is a few Python frames; keep the
# deepest accepted nesting well inside the interpreter's recursion limit.
MAX_DEPTH_CEILING: Final[int] = 256


class EvaluatorConfig(BaseModel):
    """Configuration of lexing, parsing and dual evaluation."""

    float_format: Literal["binary64"] = Field("binary64", description="Shadow format")
    rounding_mode: Literal["nearest-even"] = Field(
        "nearest-even", description="Shadow rounding mode"
    )

    max_input_length: int = Field(4096, gt=0, description="Longest accepted line (chars)")
    max_depth: int = Field(
        128, gt=0, le=MAX_DEPTH_CEILING, description="Deepest parenthesis/unary nesting"
    )
    max_nodes: int = Field(1024, gt=0, description="Largest expression tree (nodes)")
    max_exponent: int = Field(4096, gt=0, description="Largest |n| in x ^ n")
    max_literal_exponent: int = Field(
        4096, gt=0, description="Largest |e| in scientific-notation literals"
    )
    max_rational_bits: int = Field(
        1 << 20, gt=0, description="Largest numerator/denominator of an exact result (bits)"
    )

    symbols: SymbolTable = Field(DEFAULT_SYMBOLS, description="Named constants and functions")

    model_config = {"frozen": True, "arbitrary_types_allowed": True}
