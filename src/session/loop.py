"""
Interactive session

Reads lines, evaluates each one independently, and renders the outcome.
Lines starting with ``:`` are session commands that change how results are
shown; they never change how anything is evaluated.

COMMANDS:
    :help              list commands
    :constants         list named constants and functions
    :trace on|off      show the rounding-event trail
    :digits N          decimal digits rendered for exact values
    :json on|off       print outcome records as JSON
    :quit              leave the session (Ctrl-D works too)
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from typing import Final

from src.core.math.decimal_expansion import DEFAULT_MAX_DIGITS
from src.evaluator.pipeline import LineEvaluator
from src.session.render import ERROR_STYLE, OutcomeRenderer

logger = logging.getLogger(__name__)

PROMPT: Final[str] = ">> "

HELP_TEXT: Final[str] = """\
Enter an arithmetic expression, e.g. 0.1 + 0.2, 1/3, 2^-10, 0.(3) * 3, pi.
Each line is evaluated exactly (rationals) and in IEEE binary64.

  :help              this text
  :constants         named constants and functions
  :trace on|off      show rounding events
  :digits N          decimal digits shown (1-{max_digits})
  :json on|off       JSON output
  :quit              exit (Ctrl-D)""".format(max_digits=DEFAULT_MAX_DIGITS)


@dataclass(frozen=True)
class SessionOptions:
    """Display options; commands replace them, evaluation never reads them."""

    trace: bool = False
    digits: int = 60
    json: bool = False


class SessionLoop:
    """
    Line-oriented front end.

    Args:
        evaluator: Line evaluator (default configuration if omitted)
        renderer: Outcome renderer (new console if omitted)
        options: Initial display options
    """

    def __init__(
        self,
        evaluator: LineEvaluator | None = None,
        renderer: OutcomeRenderer | None = None,
        options: SessionOptions | None = None,
    ):
        self.evaluator = evaluator or LineEvaluator()
        self.renderer = renderer or OutcomeRenderer()
        self.options = options or SessionOptions()
        self.failures = 0

    @property
    def console(self):
        return self.renderer.console

    def handle(self, line: str) -> bool:
        """
        Process one input line.

        Returns:
            False when the session should end
        """
        text = line.strip()
        if not text:
            return True
        if text.startswith(":"):
            return self.command(text[1:])

        outcome = self.evaluator.evaluate(line)
        if not outcome.ok:
            self.failures += 1
        self.renderer.render(
            line,
            outcome,
            digits=self.options.digits,
            trace=self.options.trace,
            as_json=self.options.json,
        )
        return True

    def command(self, text: str) -> bool:
        """Run a session command (without its leading colon)."""
        name, _, argument = text.strip().partition(" ")
        argument = argument.strip()

        if name in ("quit", "q", "exit"):
            return False
        if name == "help":
            self.console.print(HELP_TEXT, markup=False)
        elif name == "constants":
            self.renderer.render_constants(self.evaluator.config.symbols)
        elif name in ("trace", "json", "digits"):
            try:
                self.options = _updated(self.options, name, argument)
            except ValueError as error:
                self.console.print(f"{error}", style=ERROR_STYLE, markup=False)
            else:
                logger.debug("session options: %s", self.options)
        else:
            self.console.print(
                f"unknown command :{name} (try :help)", style=ERROR_STYLE, markup=False
            )
        return True

    def run_lines(self, lines: Iterable[str]) -> int:
        """
        Process lines until exhausted or :quit.

        Returns:
            Number of lines that failed to evaluate
        """
        for line in lines:
            if not self.handle(line):
                break
        return self.failures

    def run(self, read_line: Callable[[str], str] = input) -> int:
        """
        Interactive loop: Ctrl-C discards the current line, Ctrl-D exits.

        Returns:
            Number of lines that failed to evaluate
        """
        while True:
            try:
                line = read_line(PROMPT)
            except KeyboardInterrupt:
                self.console.print("^C", markup=False)
                continue
            except EOFError:
                self.console.print("^D", markup=False)
                break

            if not self.handle(line):
                break
        return self.failures


def _updated(options: SessionOptions, name: str, argument: str) -> SessionOptions:
    if name == "digits":
        try:
            digits = int(argument)
        except ValueError:
            raise ValueError(f":digits expects a number, got {argument!r}") from None
        if not 1 <= digits <= DEFAULT_MAX_DIGITS:
            raise ValueError(f":digits must be between 1 and {DEFAULT_MAX_DIGITS}")
        return replace(options, digits=digits)

    switches = {"on": True, "off": False}
    if argument not in switches:
        raise ValueError(f":{name} expects on or off, got {argument!r}")
    return replace(options, **{name: switches[argument]})
