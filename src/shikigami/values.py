"""Runtime value model: kinds, display text and coercion of host values."""

from __future__ import annotations

import math
import numbers
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import Union

from .rational import Rational

Value = Union[Rational, str, bool]


class ValueKind(str, Enum):
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"


def kind_of(value: object) -> ValueKind:
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, Rational):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    raise TypeError(f"unsupported runtime type {type(value).__name__}")


def format_value(value: object) -> str:
    """Display text for a program result; ``None`` (empty program) is ``""``."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Rational):
        return value.to_string()
    return str(value)


def coerce_value(value: object, *, where: str = "value") -> Value:
    """Convert a host value into a runtime value, e.g. for seeding an environment."""
    if isinstance(value, (bool, str, Rational)):
        return value
    if isinstance(value, Fraction):
        return Rational.from_fraction(value, preserve_form=value.denominator != 1)
    if isinstance(value, int):
        return Rational.make(value)
    if isinstance(value, (float, Decimal)):
        if not math.isfinite(value):
            raise ValueError(f"{where} must be finite, got {value!r}")
        return Rational.make(value)
    if isinstance(value, numbers.Rational):
        return Rational.make(int(value.numerator), int(value.denominator))
    raise TypeError(f"{where} has unsupported runtime type {type(value).__name__}")
