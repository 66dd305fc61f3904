"""Parsing of user-entered money amounts."""

from __future__ import annotations

import math
import numbers
from typing import Any

import pandas as pd

from .errors import InvalidAmount


def _normalize_text(value: str) -> str:
    cleaned = value.strip()
    # Drop currency markers and grouping spaces, keep digits and separators
    cleaned = ''.join(c for c in cleaned if c.isdigit() or c in {',', '.', '-', '+'})
    if ',' in cleaned and '.' in cleaned:
        # "1,234.56": comma is a thousands separator
        cleaned = cleaned.replace(',', '')
    else:
        # "12,50": comma is the decimal separator
        cleaned = cleaned.replace(',', '.')
    return cleaned


def parse_amount(value: Any, *, allow_zero: bool = False) -> float:
    """Convert a user-entered amount into a float.

    Accepts numbers and strings such as ``"12.50"``, ``"12,50"``, ``"€ 1,234.56"``.
    Raises :class:`InvalidAmount` for anything non-numeric, non-finite or
    non-positive (zero is accepted when ``allow_zero`` is set).

    Example:
        >>> parse_amount("12,50")
        12.5
        >>> parse_amount("0", allow_zero=True)
        0.0
    """
    if value is None or isinstance(value, bool) or not isinstance(value, (str, numbers.Number)):
        raise InvalidAmount(value, "not a number")
    if isinstance(value, str):
        text = _normalize_text(value)
        if not text:
            raise InvalidAmount(value, "not a number")
        value_to_parse: Any = text
    else:
        value_to_parse = value
    try:
        number = float(pd.to_numeric([value_to_parse], errors='coerce')[0])
    except (TypeError, ValueError) as exc:
        raise InvalidAmount(value, "not a number") from exc
    if math.isnan(number):
        raise InvalidAmount(value, "not a number")
    if not math.isfinite(number):
        raise InvalidAmount(value, "not a finite number")
    if number < 0 or (number == 0 and not allow_zero):
        reason = "must not be negative" if allow_zero else "must be greater than zero"
        raise InvalidAmount(value, reason)
    return number
