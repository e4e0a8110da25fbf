"""Trip count / tonnage trend buckets by month or by day."""

from typing import Dict, Iterable, List, Optional

from src.config.constants import MONTHS_ORDER
from src.config.schema import SeriesPoint
from src.data.coercion import round_half_up
from src.data.records import TripRecord

GROUP_MODES = ("month", "day")
METRICS = ("trips", "tons")


def _bucket_key(trip: TripRecord, group_by: str) -> Optional[str]:
    if group_by == "month":
        return trip.month_code or None
    day = trip.weigh_date
    return day.isoformat() if day is not None else None


def _month_rank(code: str) -> int:
    # Unknown codes go after the canonical twelve
    return MONTHS_ORDER.index(code) if code in MONTHS_ORDER else len(MONTHS_ORDER)


def build_time_series(
    filtered_trips: Iterable[TripRecord],
    group_by: str = "month",
    metric: str = "trips",
) -> List[SeriesPoint]:
    """Bucket filtered trips for trend charting.

    Args:
        filtered_trips: Output of the trip filter stage.
        group_by: "month" (canonical month order) or "day" (ISO date order).
        metric: "trips" counts trips, "tons" sums tonnage rounded per bucket.
    """
    if group_by not in GROUP_MODES:
        raise ValueError(f"group_by must be one of {GROUP_MODES}, got {group_by!r}")
    if metric not in METRICS:
        raise ValueError(f"metric must be one of {METRICS}, got {metric!r}")

    buckets: Dict[str, float] = {}
    for trip in filtered_trips:
        key = _bucket_key(trip, group_by)
        if key is None:
            continue
        buckets[key] = buckets.get(key, 0) + (1 if metric == "trips" else trip.tons)

    if group_by == "month":
        ordered = sorted(buckets.items(), key=lambda kv: _month_rank(kv[0]))
    else:
        ordered = sorted(buckets.items())

    return [SeriesPoint(name=key, value=round_half_up(value)) for key, value in ordered]
