"""
Command-line entry point.

    floatshadow                       interactive session
    floatshadow -e "0.1 + 0.2"        evaluate and exit
    floatshadow -e 1/3 -e 1/0 --json  JSON records, exit status 1 if any failed
"""

import argparse
import logging
import sys

from pydantic import ValidationError
from rich.console import Console

from src.core.math.decimal_expansion import DEFAULT_MAX_DIGITS
from src.evaluator.config import MAX_DEPTH_CEILING, EvaluatorConfig
from src.evaluator.pipeline import LineEvaluator
from src.session.loop import HELP_TEXT, SessionLoop, SessionOptions
from src.session.render import OutcomeRenderer

EXIT_OK = 0
EXIT_EVALUATION_FAILED = 1
EXIT_USAGE = 2

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="floatshadow",
        description="Evaluate arithmetic exactly and in IEEE binary64, side by side.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=HELP_TEXT,
    )
    parser.add_argument(
        "-e",
        "--expression",
        action="append",
        default=[],
        metavar="EXPR",
        help="Evaluate EXPR and exit (repeatable).",
    )
    parser.add_argument("--json", action="store_true", help="Print outcome records as JSON.")
    parser.add_argument("--trace", action="store_true", help="Show rounding events.")
    parser.add_argument(
        "--digits",
        type=int,
        default=SessionOptions.digits,
        help=f"Decimal digits shown for exact values (1-{DEFAULT_MAX_DIGITS}).",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help=f"Deepest accepted nesting (at most {MAX_DEPTH_CEILING}).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr.")
    return parser


def parse_args(argv: list[str]) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None, console: Console | None = None) -> int:
    try:
        args = parse_args(list(sys.argv[1:] if argv is None else argv))
    except SystemExit as e:
        # argparse uses SystemExit for --help and parse errors
        code = e.code
        return int(code) if isinstance(code, int) else EXIT_USAGE

    _configure_logging(args.verbose)
    err = Console(stderr=True)

    if not 1 <= args.digits <= DEFAULT_MAX_DIGITS:
        err.print(f"--digits must be between 1 and {DEFAULT_MAX_DIGITS}", markup=False)
        return EXIT_USAGE

    overrides = {} if args.max_depth is None else {"max_depth": args.max_depth}
    try:
        config = EvaluatorConfig(**overrides)
    except ValidationError as e:
        err.print(f"invalid configuration: {e}", markup=False)
        return EXIT_USAGE

    session = SessionLoop(
        evaluator=LineEvaluator(config),
        renderer=OutcomeRenderer(console),
        options=SessionOptions(trace=args.trace, digits=args.digits, json=args.json),
    )

    if args.expression:
        failures = session.run_lines(args.expression)
        return EXIT_EVALUATION_FAILED if failures else EXIT_OK

    session.run()
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
