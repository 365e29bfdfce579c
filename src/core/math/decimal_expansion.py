"""
DecimalExpansion — exact decimal rendering of a rational

Every rational has a decimal expansion that either terminates or becomes
periodic: 879/104 = 8.451(923076...). This module computes that expansion
(up to a digit budget) and compares two expansions digit by digit, which is
how the session shows which leading digits of a float result are correct.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from itertools import chain, cycle, islice, repeat
from typing import Final

from src.core.math.rational import LiteralParts, Rational, int_to_text, split_literal

# Digits after the point computed before giving up on finding the period
DEFAULT_MAX_DIGITS: Final[int] = 1100


@dataclass(frozen=True)
class DecimalExpansion:
    """
    Sign, integer part, non-repeating and repeating fractional digits.

    ``truncated`` marks an expansion whose period was not found within the
    digit budget; ``fixed`` then holds the first digits only.

    Examples:
        >>> str(DecimalExpansion.from_rational(Rational(879, 104)))
        '8.451(923076...)'
        >>> str(DecimalExpansion.from_rational(Rational(-1, 4)))
        '-0.25'
    """

    negative: bool
    integer: int
    fixed: tuple[int, ...] = ()
    repeating: tuple[int, ...] = ()
    truncated: bool = False

    @classmethod
    def from_rational(cls, value: Rational, max_digits: int = DEFAULT_MAX_DIGITS) -> "DecimalExpansion":
        """
        Long division with remainder tracking; a repeated remainder closes the period.

        Args:
            value: Rational to expand
            max_digits: Budget of fractional digits

        Raises:
            ValueError: If max_digits is negative
        """
        if max_digits < 0:
            raise ValueError(f"max_digits must be non-negative, got {max_digits}")

        numerator, denominator = abs(value.numerator), value.denominator
        integer, remainder = divmod(numerator, denominator)

        digits: list[int] = []
        seen: dict[int, int] = {}
        while remainder and remainder not in seen and len(digits) < max_digits:
            seen[remainder] = len(digits)
            digit, remainder = divmod(remainder * 10, denominator)
            digits.append(digit)

        negative = value.sign < 0
        if remainder == 0:
            return cls(negative, integer, tuple(digits))
        if remainder in seen:
            start = seen[remainder]
            return cls(negative, integer, tuple(digits[:start]), tuple(digits[start:]))
        return cls(negative, integer, tuple(digits), truncated=True)

    @classmethod
    def parse(cls, text: str) -> "DecimalExpansion":
        """
        Parse ``-1.2(3...)`` style text (no exponent), normalizing it.

        ``0.(9)`` normalizes to ``1``, ``0.1(0)`` to ``0.1``.

        Raises:
            ValueError: If text is not a decimal literal or has an exponent
        """
        parts: LiteralParts = split_literal(text)
        if parts.exponent:
            raise ValueError(f"exponent not allowed in a decimal expansion: {text!r}")
        return cls.from_rational(Rational.from_parts(parts))

    def to_rational(self) -> Rational:
        """
        Raises:
            ValueError: If the expansion is truncated
        """
        if self.truncated:
            raise ValueError("truncated expansion has no exact value")
        parts = LiteralParts(
            negative=self.negative,
            integer=int_to_text(self.integer),
            fixed="".join(map(str, self.fixed)),
            repeating="".join(map(str, self.repeating)),
            exponent=0,
        )
        return Rational.from_parts(parts)

    def is_integer(self) -> bool:
        return not self.fixed and not self.repeating and not self.truncated

    def is_repeating(self) -> bool:
        return bool(self.repeating)

    def _symbols(self) -> Iterator[str]:
        """Integer digits, point, then the fraction continued forever."""
        return chain(
            int_to_text(self.integer),
            ".",
            map(str, self.fixed),
            cycle(map(str, self.repeating)) if self.repeating else iter(()),
            repeat("0"),
        )

    def _length(self) -> int:
        return len(int_to_text(self.integer)) + 1 + len(self.fixed) + len(self.repeating)

    def common_prefix_length(self, other: "DecimalExpansion") -> int | None:
        """
        Length of the longest common prefix of the two renderings.

        The decimal point counts as a character, a leading minus sign counts
        once both sides are negative, and differing integer widths share no
        prefix (digits are compared in aligned positions). Returns None when
        both expansions are identical.

        Examples:
            >>> a, b = DecimalExpansion.parse("12.0"), DecimalExpansion.parse("12.2")
            >>> a.common_prefix_length(b)
            3
            >>> DecimalExpansion.parse("0.9999").common_prefix_length(DecimalExpansion.parse("1"))
            0
        """
        if self.negative != other.negative:
            return 0
        if self == other and not self.truncated:
            return None

        sign_width = 1 if self.negative else 0
        if len(int_to_text(self.integer)) != len(int_to_text(other.integer)):
            return sign_width if self.negative else 0

        bound = 2 * max(self._length(), other._length())
        pairs = zip(islice(self._symbols(), bound), islice(other._symbols(), bound))
        for index, (left, right) in enumerate(pairs):
            if left != right:
                return index + sign_width
        if self.truncated or other.truncated:
            return bound + sign_width
        return None

    def __str__(self) -> str:
        text = ("-" if self.negative else "") + int_to_text(self.integer)
        fraction = "".join(map(str, self.fixed))
        if self.repeating:
            fraction += "(" + "".join(map(str, self.repeating)) + "...)"
        elif self.truncated:
            fraction += "..."
        if fraction:
            text += "." + fraction
        return text
