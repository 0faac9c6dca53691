"""Scalar value model for dataset cells.

Cells hold JSON-style scalars. Every calculator reads them through the
same two functions so that numeric parsing is identical everywhere:

- ``kind_of`` tags a raw value as number, text, boolean or null
- ``parse_number`` attempts a numeric parse and returns ``None`` on failure
"""

from __future__ import annotations

import math
import numbers
from enum import Enum
from typing import Any

import numpy as np
import pandas as pd


class ValueKind(str, Enum):
    """Closed set of scalar kinds a cell may hold."""

    NUMBER = "number"
    TEXT = "text"
    BOOLEAN = "boolean"
    NULL = "null"


def _is_missing(value: Any) -> bool:
    if value is None or value is pd.NA or value is pd.NaT:
        return True
    # DataFrame gaps arrive as float NaN
    return isinstance(value, float) and math.isnan(value)


def kind_of(value: Any) -> ValueKind:
    """Tag a raw cell value with its kind.

    Args:
        value: Raw cell value

    Returns:
        ValueKind for the value. Booleans are never numbers, and NaN
        markers coming from DataFrames count as null.
    """
    if _is_missing(value):
        return ValueKind.NULL
    if isinstance(value, (bool, np.bool_)):
        return ValueKind.BOOLEAN
    if isinstance(value, numbers.Real):
        return ValueKind.NUMBER
    return ValueKind.TEXT


def parse_number(value: Any) -> float | None:
    """Attempt to read a cell as a finite float.

    Args:
        value: Raw cell value

    Returns:
        The parsed float, or None if the value is null, boolean,
        non-finite, or text that does not parse as a number.

    Example:
        >>> parse_number(" 3.5 ")
        3.5
        >>> parse_number("abc") is None
        True
    """
    kind = kind_of(value)

    if kind == ValueKind.NUMBER:
        number = float(value)
    elif kind == ValueKind.TEXT and isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    return number


def is_numeric(value: Any) -> bool:
    """Check whether a value parses as a finite number."""
    return parse_number(value) is not None
