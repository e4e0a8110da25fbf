"""Fleet-wide KPI summary."""

from typing import Iterable, List, Optional, Sequence, Set, Tuple

from src.config.schema import KpiSummary, VehicleTableRow
from src.data.records import TripRecord


def _top(rows: Sequence[VehicleTableRow], attr: str) -> Optional[Tuple[str, float]]:
    """Vehicle with the largest value of attr; the first one wins ties. None if all are 0."""
    best_veh, best_val = None, 0
    for row in rows:
        value = getattr(row, attr)
        if value > best_val:
            best_veh, best_val = row.veh, value
    return (best_veh, best_val) if best_veh is not None else None


def compute_kpis(
    filtered_trips: Iterable[TripRecord],
    vehicle_rows: Sequence[VehicleTableRow],
) -> KpiSummary:
    """Summarise the filtered trips.

    Cost totals come from vehicle_rows, which already cover exactly the active
    vehicles with month-attributed fuel and full-period maintenance.
    """
    trips: List[TripRecord] = list(filtered_trips)
    total_tons = sum(t.tons for t in trips)

    days: Set = set()
    active: Set[str] = set()
    for trip in trips:
        day = trip.weigh_date
        if day is not None:
            days.add(day)
        if trip.vehicle_id:
            active.add(trip.vehicle_id)

    active_rows = [row for row in vehicle_rows if row.veh in active]
    total_capacity = sum(row.cap_ton for row in active_rows)

    return KpiSummary(
        total_tons=total_tons,
        total_trips=len(trips),
        total_fuel=sum(row.fuel for row in active_rows),
        total_maint=sum(row.maint for row in active_rows),
        days_count=len(days),
        avg_tons_per_day=total_tons / len(days) if days else 0.0,
        active_vehicles=len(active),
        top_trips=_top(active_rows, "trips"),
        top_tons=_top(active_rows, "tons"),
        avg_capacity=total_capacity / len(active) if active else 0.0,
    )
