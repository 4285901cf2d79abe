"""Exact fraction values that remember whether they were written as ``n/d``."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from fractions import Fraction

from .errors import DivisionByZeroError

_DECIMAL_LITERAL_RE = re.compile(r"^-?\d+(?:\.\d+)?$")
_FRACTION_LITERAL_RE = re.compile(r"^-?\d+/\d+$")


def is_number_literal(text: str) -> bool:
    return bool(_DECIMAL_LITERAL_RE.match(text) or _FRACTION_LITERAL_RE.match(text))


def _decimal_places(value) -> int:
    if isinstance(value, int):
        return 0
    text = str(value)
    if "." not in text:
        return 0
    return len(text.split(".", 1)[1])


def _scale_to_integers(numerator, denominator) -> tuple[int, int]:
    if isinstance(numerator, int) and isinstance(denominator, int):
        return numerator, denominator
    scale = 10 ** max(_decimal_places(numerator), _decimal_places(denominator))
    return round(numerator * scale), round(denominator * scale)


def gcd(a, b):
    """Greatest common divisor that also accepts decimal inputs.

    Non-integers are scaled by ``10**k`` where ``k`` is the longest decimal
    expansion of ``str(a)`` / ``str(b)``, the integer GCD is taken, and the
    result is scaled back down. Values whose ``str`` form uses scientific
    notation (``1e-07``) are not scaled and lose precision; this is a known
    limitation kept for compatibility. ``gcd(0, n)`` is ``n``.
    """
    if isinstance(a, int) and isinstance(b, int):
        return math.gcd(a, b)
    scale = 10 ** max(_decimal_places(a), _decimal_places(b))
    divisor = math.gcd(round(a * scale), round(b * scale))
    return divisor / scale


@dataclass(frozen=True, eq=False)
class Rational:
    """Exact numerator/denominator pair with a display policy.

    ``raw`` marks values that keep their written ``n/d`` form when rendered.
    Values without it render as plain numbers. Use :meth:`make` to build
    normalized instances; the bare constructor trusts its arguments.
    """

    numerator: int
    denominator: int = 1
    raw: bool = False

    def __post_init__(self) -> None:
        if self.denominator == 0:
            raise DivisionByZeroError("Rational denominator cannot be zero")

    @classmethod
    def make(cls, numerator, denominator=1, preserve_form: bool = False) -> "Rational":
        if denominator == 0:
            raise DivisionByZeroError("Rational denominator cannot be zero")
        if denominator < 0:
            numerator, denominator = -numerator, -denominator
        numerator, denominator = _scale_to_integers(numerator, denominator)
        if not preserve_form:
            divisor = gcd(numerator, denominator)
            numerator //= divisor
            denominator //= divisor
        return cls(numerator, denominator, raw=preserve_form)

    @classmethod
    def from_literal(cls, text: str) -> "Rational":
        if _FRACTION_LITERAL_RE.match(text):
            num_text, den_text = text.split("/", 1)
            return cls.make(int(num_text), int(den_text), preserve_form=True)
        if not _DECIMAL_LITERAL_RE.match(text):
            raise ValueError(f"Invalid numeric literal {text!r}")
        if "." in text:
            whole, frac = text.split(".", 1)
            return cls.make(int(whole + frac), 10 ** len(frac))
        return cls.make(int(text))

    @classmethod
    def from_fraction(cls, value: Fraction, preserve_form: bool = False) -> "Rational":
        return cls.make(value.numerator, value.denominator, preserve_form)

    def to_fraction(self) -> Fraction:
        return Fraction(self.numerator, self.denominator)

    def _derive(self, other: "Rational", numerator: int, denominator: int, preserve_form: bool) -> "Rational":
        # Reduction follows the caller; a raw operand only keeps the n/d rendering.
        result = Rational.make(numerator, denominator, preserve_form)
        if result.raw or not (self.raw or other.raw):
            return result
        return Rational(result.numerator, result.denominator, raw=True)

    def add(self, other: "Rational", preserve_form: bool = False) -> "Rational":
        return self._derive(
            other,
            self.numerator * other.denominator + other.numerator * self.denominator,
            self.denominator * other.denominator,
            preserve_form,
        )

    def subtract(self, other: "Rational", preserve_form: bool = False) -> "Rational":
        return self._derive(
            other,
            self.numerator * other.denominator - other.numerator * self.denominator,
            self.denominator * other.denominator,
            preserve_form,
        )

    def multiply(self, other: "Rational", preserve_form: bool = False) -> "Rational":
        return self._derive(
            other,
            self.numerator * other.numerator,
            self.denominator * other.denominator,
            preserve_form,
        )

    def divide(self, other: "Rational", preserve_form: bool = True) -> "Rational":
        if other.numerator == 0:
            raise DivisionByZeroError()
        return self._derive(
            other,
            self.numerator * other.denominator,
            self.denominator * other.numerator,
            preserve_form,
        )

    def equals(self, other: "Rational") -> bool:
        return self.numerator * other.denominator == other.numerator * self.denominator

    def greater_than(self, other: "Rational") -> bool:
        return self.numerator * other.denominator > other.numerator * self.denominator

    def greater_than_or_equal(self, other: "Rational") -> bool:
        return self.numerator * other.denominator >= other.numerator * self.denominator

    def to_string(self) -> str:
        if self.denominator == 1:
            return str(self.numerator)
        if not self.raw:
            try:
                return repr(self.numerator / self.denominator)
            except OverflowError:
                return f"{self.numerator}/{self.denominator}"
        return f"{self.numerator}/{self.denominator}"

    def __str__(self) -> str:
        return self.to_string()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Rational):
            return NotImplemented
        return self.equals(other)

    def __hash__(self) -> int:
        return hash(self.to_fraction())
