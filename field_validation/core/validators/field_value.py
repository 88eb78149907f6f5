"""
Runtime value normalization shared by all validators.

Object fields arrive as arbitrary Python values; checks work on three
derived views: emptiness, trimmed text (scalars only) and a float
(numbers and numeric-looking strings).
"""

import math
import re
from collections.abc import Mapping, Set
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

SCALAR_TYPES = (str, bool, int, float, Decimal)

_NUMERIC_STRING = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?", re.ASCII)


def is_empty(value: Any) -> bool:
    """None, blank strings and empty collections are empty; everything else is not."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, Mapping, Set)):
        return len(value) == 0
    return False


def format_number(number: float | int | Decimal) -> str:
    """
    Render a number the way rule messages show it.

    Integral values drop the fraction ("10", not "10.0"); others use the
    shortest round-tripping form ("2.5").
    """
    if isinstance(number, bool):
        return "1" if number else ""
    if isinstance(number, int):
        return str(number)
    number = float(number)
    if math.isfinite(number) and number.is_integer() and abs(number) < 1e15:
        return str(int(number))
    return repr(number)


def to_string_value(value: Any) -> str | None:
    """
    Textual form of a scalar value, trimmed.

    Returns:
        Trimmed text, or None for non-scalar values and numbers that
        have no text form (signaling NaN, ints past the digit limit)
    """
    if not isinstance(value, SCALAR_TYPES):
        return None
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return "1" if value else ""
    try:
        return format_number(value).strip()
    except (ValueError, ArithmeticError):
        return None


def to_numeric_value(value: Any) -> float | None:
    """
    Float view of numbers and numeric strings.

    Booleans, NaN and anything non-numeric yield None; out-of-range
    magnitudes collapse to +/- infinity.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip()
        if not _NUMERIC_STRING.fullmatch(text):
            return None
        value = text
    elif not isinstance(value, (int, float, Decimal)):
        return None

    try:
        number = float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf
    except (TypeError, ValueError, ArithmeticError):
        return None

    if math.isnan(number):
        return None
    return number


@dataclass(frozen=True)
class FieldValue:
    """A field's raw value with its derived views."""

    raw: Any
    is_empty: bool
    string_value: str | None
    numeric_value: float | None

    @classmethod
    def of(cls, value: Any) -> "FieldValue":
        return cls(
            raw=value,
            is_empty=is_empty(value),
            string_value=to_string_value(value),
            numeric_value=to_numeric_value(value),
        )
