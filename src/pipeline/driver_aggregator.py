"""Per-driver workload table."""

from typing import Dict, Iterable, List

from src.config.constants import DRIVER_SEPARATOR
from src.config.schema import DriverStatsRow
from src.data.records import TripRecord


def aggregate_drivers(filtered_trips: Iterable[TripRecord]) -> List[DriverStatsRow]:
    """One row per named driver, in first-seen order.

    Trips with a blank driver are left out of this table only; they still
    count toward vehicle and fleet totals.
    """
    groups: Dict[str, dict] = {}
    for trip in filtered_trips:
        name = trip.driver.strip()
        if not name:
            continue
        group = groups.setdefault(name, {"trips": 0, "tons": 0.0, "vehicles": {}})
        group["trips"] += 1
        group["tons"] += trip.tons
        if trip.vehicle_id:
            group["vehicles"].setdefault(trip.vehicle_id, None)

    return [
        DriverStatsRow(
            driver=name,
            trips=g["trips"],
            tons=g["tons"],
            avg_tons_per_trip=g["tons"] / g["trips"] if g["trips"] else 0.0,
            vehicles=DRIVER_SEPARATOR.join(g["vehicles"]),
        )
        for name, g in groups.items()
    ]
