"""
Rendering of evaluation outcomes for the terminal.

Supports two output formats:
- Rich console output: exact value, the binary64 value with its correct
  leading digits emphasized, error metrics, and the rounding-event trail
- JSON records (validated against the eval_outcome contract)
"""

from rich.console import Console
from rich.text import Text

from src.core.contracts import outcome_to_dict, validate_eval_outcome
from src.core.domain.outcome import ErrorClass, EvalOutcome, Failure, Success
from src.core.math.decimal_expansion import DecimalExpansion
from src.core.math.float_shadow import FloatShadow
from src.core.math.rational import Rational, int_to_text
from src.evaluator.symbols import SymbolTable

# Classification colors for Rich console
CLASSIFICATION_STYLES = {
    ErrorClass.EXACT: "bold green",
    ErrorClass.INEXACT: "yellow",
    ErrorClass.INFINITE: "bold red",
    ErrorClass.NAN: "bold magenta",
}

LABEL_STYLE = "bold cyan"
CORRECT_STYLE = "bold"
INCORRECT_STYLE = "dim"
ERROR_STYLE = "bold red"

LABEL_WIDTH = 9

# Significant digits of a metric
RATIO_DIGITS = 4

# Longer numerators and denominators are shown by their edges and length
MAX_SHOWN_DIGITS = 80
EDGE_DIGITS = 20


# =============================================================================
# TEXT HELPERS
# =============================================================================


def split_correct_digits(approx: DecimalExpansion, truth: DecimalExpansion) -> tuple[str, str]:
    """
    Split the rendering of ``approx`` into its correct prefix and the rest.

    A correct prefix longer than the rendering itself means the digits
    continue as zeros; they are padded in and the tail shows ``(0...)``.

    Examples:
        >>> split_correct_digits(DecimalExpansion.parse("1.23"), DecimalExpansion.parse("1.24"))
        ('1.2', '3')
        >>> split_correct_digits(DecimalExpansion.parse("1"), DecimalExpansion.parse("1.(001)"))
        ('1.00', '(0...)')
    """
    text = str(approx)
    length = approx.common_prefix_length(truth)
    if length is None:
        return text, ""

    if approx.truncated:
        length = min(length, len(text) - len("..."))
        return text[:length], text[length:]

    if length < len(text):
        return text[:length], text[length:]

    padded = text + "." if approx.is_integer() else text
    return padded.ljust(length, "0"), "(0...)"


def caret_line(position: int) -> str:
    """Marker pointing at a 0-based column."""
    return " " * position + "^"


def format_ratio(value: Rational | None) -> str:
    """
    Short scientific rendering of an exact metric.

    Digits and exponent come from the rational itself, so values beyond the
    binary64 range still show their magnitude.

    Examples:
        >>> format_ratio(Rational(1, 4))
        '2.500e-01'
        >>> format_ratio(Rational(1, 10**400))
        '1.000e-400'
    """
    if value is None:
        return "undefined"
    if value.is_zero():
        return "0"

    magnitude = value.abs()
    # floor(log10(2) * bit difference) is at most one off the decimal exponent
    exponent = (
        magnitude.numerator.bit_length() - magnitude.denominator.bit_length()
    ) * 30103 // 100000
    while magnitude < _power_of_ten(exponent):
        exponent -= 1
    while magnitude >= _power_of_ten(exponent + 1):
        exponent += 1

    scaled = magnitude / _power_of_ten(exponent - (RATIO_DIGITS - 1))
    digits = (2 * scaled.numerator + scaled.denominator) // (2 * scaled.denominator)
    if digits == 10**RATIO_DIGITS:
        digits //= 10
        exponent += 1

    text = str(digits)
    sign = "-" if value.sign < 0 else ""
    return f"{sign}{text[0]}.{text[1:]}e{exponent:+03d}"


def exact_text(value: Rational) -> str:
    """Fraction text with very long numerators and denominators elided."""
    parts = [int_to_text(value.numerator)]
    if not value.is_integer():
        parts.append(int_to_text(value.denominator))
    return "/".join(_elide(part) for part in parts)


def _elide(digits: str) -> str:
    count = len(digits.lstrip("-"))
    if count <= MAX_SHOWN_DIGITS:
        return digits
    return f"{digits[:EDGE_DIGITS]}...{digits[-EDGE_DIGITS:]} [{count} digits]"


def _power_of_ten(exponent: int) -> Rational:
    if exponent >= 0:
        return Rational(10**exponent)
    return Rational(1, 10**-exponent)


def shadow_expansion(shadow: FloatShadow, max_digits: int) -> DecimalExpansion | None:
    """Decimal expansion of the shortest repr of a finite shadow."""
    if not shadow.is_finite():
        return None
    return DecimalExpansion.from_rational(Rational.parse(repr(shadow.value)), max_digits)


# =============================================================================
# RENDERER
# =============================================================================


class OutcomeRenderer:
    """
    Prints outcomes on a Rich console.

    Args:
        console: Rich console instance (default: create new)
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console(highlight=False)

    def render(self, line: str, outcome: EvalOutcome, *, digits: int, trace: bool = False,
               as_json: bool = False) -> None:
        if as_json:
            record = outcome_to_dict(outcome)
            validate_eval_outcome(record)
            self.console.print_json(data=record)
            return

        if isinstance(outcome, Success):
            self._success(outcome, digits, trace)
        else:
            self._failure(line, outcome, trace)

    def render_constants(self, symbols: SymbolTable) -> None:
        for constant in symbols.constants.values():
            kind = "approximation" if constant.approximate else "exact"
            self.console.print(
                Text.assemble(
                    (f"{constant.name:<{LABEL_WIDTH}}", LABEL_STYLE),
                    f"{constant.shadow.value!r}  ",
                    (f"({kind}) {constant.description}", INCORRECT_STYLE),
                )
            )
        for rule in symbols.functions.values():
            self.console.print(
                Text.assemble(
                    (f"{rule.name:<{LABEL_WIDTH}}", LABEL_STYLE),
                    f"{rule.arity} argument(s)  ",
                    (rule.description, INCORRECT_STYLE),
                )
            )

    def _success(self, outcome: Success, digits: int, trace: bool) -> None:
        result, metrics = outcome.result, outcome.metrics
        truth = DecimalExpansion.from_rational(result.exact, digits)

        self._row("exact", Text(exact_text(result.exact)))
        if not result.exact.is_integer():
            self._row("", Text(str(truth)))

        self._row("float64", self._shadow_text(result.shadow, truth, digits))

        style = CLASSIFICATION_STYLES[metrics.classification]
        status = Text(metrics.classification.value, style=style)
        if metrics.classification is ErrorClass.INEXACT:
            status.append(
                f"  abs {format_ratio(metrics.absolute_error)}"
                f"  rel {format_ratio(metrics.relative_error)}"
                f"  ulps {metrics.ulp_distance if metrics.ulp_distance is not None else 'undefined'}"
                f"  ulp error {format_ratio(metrics.ulp_error)}"
            )
            if metrics.correctly_rounded:
                status.append("  correctly rounded", style="green")
        self._row("error", status)

        if result.approximations:
            names = ", ".join(result.approximations)
            self._row("note", Text(f"exact side uses rational approximations of {names}", "yellow"))

        if trace:
            self._trace(result.shadow)

    def _failure(self, line: str, outcome: Failure, trace: bool) -> None:
        if outcome.position is not None and outcome.position <= len(line):
            self.console.print(Text(" " * LABEL_WIDTH + line), soft_wrap=True)
            self.console.print(
                Text(" " * LABEL_WIDTH + caret_line(outcome.position), ERROR_STYLE), soft_wrap=True
            )

        self.console.print(
            Text.assemble((f"{outcome.kind.value}: ", ERROR_STYLE), outcome.message)
        )
        if outcome.shadow is not None:
            self._row("float64", Text(repr(outcome.shadow.value), ERROR_STYLE))
            if trace:
                self._trace(outcome.shadow)

    def _shadow_text(self, shadow: FloatShadow, truth: DecimalExpansion, digits: int) -> Text:
        approx = shadow_expansion(shadow, digits)
        if approx is None:
            return Text(repr(shadow.value), ERROR_STYLE)
        correct, rest = split_correct_digits(approx, truth)
        return Text.assemble((correct, CORRECT_STYLE), (rest, INCORRECT_STYLE))

    def _trace(self, shadow: FloatShadow) -> None:
        if not shadow.events:
            self._row("events", Text("none", INCORRECT_STYLE))
            return
        for index, event in enumerate(shadow.events):
            self._row("events" if index == 0 else "", Text(event.describe()))

    def _row(self, label: str, body: Text) -> None:
        self.console.print(Text.assemble((f"{label:<{LABEL_WIDTH}}", LABEL_STYLE), body))
