"""Lenient conversion of sheet cells into numbers and calendar dates."""

import math
import re
from datetime import date
from typing import Optional, Union

import pandas as pd


def to_number(value: Union[str, float, int, None]) -> float:
    """Parse a numeric cell, returning 0.0 for blank, unparsable or non-finite input."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    return number if math.isfinite(number) else 0.0


_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def leading_number(value: Union[str, float, int, None]) -> float:
    """Like to_number, but reads the number at the start of the cell ("10 m3" -> 10.0)."""
    if value is None or isinstance(value, (int, float)):
        return to_number(value)
    match = _LEADING_NUMBER.match(str(value).strip())
    return to_number(match.group(0)) if match else 0.0


def parse_weigh_date(value: Optional[str]) -> Optional[date]:
    """Calendar date of a weighing timestamp, or None if it cannot be parsed.

    The time-of-day component is discarded so that trips weighed on the same
    day share one key.
    """
    if value is None or not str(value).strip():
        return None
    try:
        ts = pd.to_datetime(str(value).strip(), errors="coerce")
    except (ValueError, OverflowError, TypeError):
        return None
    if pd.isna(ts):
        return None
    return ts.date()


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))
