"""Numeric parsing policy for user-entered values.

Form fields, pasted cells and spreadsheet columns all arrive as loosely
typed values. Two policies are supported:

- ``ParseMode.LENIENT`` (default): anything that does not parse resolves to
  the fallback value (``0`` unless the caller says otherwise). A leading
  number followed by junk (``"12 pcs"``) keeps the number.
- ``ParseMode.STRICT``: anything that does not parse raises
  :class:`~shero_core.exceptions.InvalidNumberError`.

Examples:
    >>> parse_number("12.5")
    12.5
    >>> parse_number("")
    0.0
    >>> parse_number("abc", mode=ParseMode.STRICT)
    Traceback (most recent call last):
    ...
    shero_core.exceptions.InvalidNumberError: Not a number: 'abc'
"""

from __future__ import annotations

import math
import re
from enum import Enum
from typing import Any, Optional

from shero_core.exceptions import InvalidNumberError

_LEADING_NUMBER_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class ParseMode(str, Enum):
    """How unparseable numeric input is handled."""

    LENIENT = "lenient"
    STRICT = "strict"

    @classmethod
    def from_value(cls, value: str | ParseMode | None) -> ParseMode:
        if value is None or value == "":
            return cls.LENIENT
        if isinstance(value, ParseMode):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise ValueError(
                f"Invalid parse mode {value!r}. Must be 'lenient' or 'strict'."
            ) from e


def try_parse_number(value: Any) -> Optional[float]:
    """Parse a value as a float, returning None when it is not a number.

    Booleans are not numbers here. NaN and infinities are rejected.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        f = float(value)
        return None if math.isnan(f) or math.isinf(f) else f

    s = str(value).strip().replace(",", "")
    if not s:
        return None
    match = _LEADING_NUMBER_RE.match(s)
    if match is None:
        return None
    f = float(match.group(0))
    return None if math.isinf(f) else f


def parse_number(
    value: Any,
    mode: ParseMode = ParseMode.LENIENT,
    default: float = 0.0,
) -> float:
    """Parse a numeric input according to the parse mode.

    Args:
        value: Raw input (number, string, None).
        mode: LENIENT resolves failures to ``default``; STRICT raises.
        default: Fallback used in lenient mode.

    Returns:
        The parsed float.

    Raises:
        InvalidNumberError: In strict mode, when the value is not a number
            or carries trailing text.
    """
    if mode is ParseMode.STRICT:
        if isinstance(value, str):
            try:
                return _strict_float(value)
            except ValueError:
                raise InvalidNumberError(f"Not a number: {value!r}") from None
        parsed = try_parse_number(value)
        if parsed is None:
            raise InvalidNumberError(f"Not a number: {value!r}")
        return parsed

    parsed = try_parse_number(value)
    return default if parsed is None else parsed


def parse_quantity(value: Any, mode: ParseMode = ParseMode.LENIENT) -> int:
    """Parse an order quantity.

    Fractions are truncated. In lenient mode a missing, unparseable or zero
    quantity means one portion.
    """
    number = parse_number(value, mode=mode, default=0.0)
    qty = int(number)
    if qty == 0:
        if mode is ParseMode.STRICT:
            raise InvalidNumberError(f"Quantity must be a non-zero whole number: {value!r}")
        return 1
    return qty


def _strict_float(s: str) -> float:
    f = float(s.strip())
    if math.isnan(f) or math.isinf(f):
        raise ValueError(s)
    return f
