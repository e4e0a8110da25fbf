"""Display formatting for dashboard numbers."""

from typing import Optional

import numpy as np

from src.config.constants import MISSING_VALUE


def format_number(value: Optional[float], digits: int = 0) -> str:
    """Thousands-separated number with fixed decimals; "—" for missing or non-finite."""
    if value is None or not np.isfinite(value):
        return MISSING_VALUE
    return f"{value:,.{digits}f}"


def format_metric(value: Optional[float], digits: int = 0) -> str:
    """Like format_number, but a zero metric (e.g. a guarded division) shows as "—"."""
    if value is None or value == 0:
        return MISSING_VALUE
    return format_number(value, digits)


def format_top(top, digits: int = 0, unit: str = "") -> str:
    """Render a (vehicle id, value) pair as "V1 | 42"."""
    if top is None:
        return MISSING_VALUE
    veh, value = top
    suffix = f" {unit}" if unit else ""
    return f"{veh} | {format_number(value, digits)}{suffix}"
