"""
Terminal front end: interactive session, rendering, and CLI.
"""

from src.session.loop import SessionLoop, SessionOptions
from src.session.render import OutcomeRenderer, split_correct_digits

__all__ = [
    "SessionLoop",
    "SessionOptions",
    "OutcomeRenderer",
    "split_correct_digits",
]
