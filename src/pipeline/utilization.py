"""Capacity utilization derived from the vehicle table."""

from typing import Iterable, List

from src.config.constants import UNDERUTILIZATION_THRESHOLD_PCT
from src.config.schema import UtilizationRow, VehicleTableRow


def compute_utilization(
    vehicle_rows: Iterable[VehicleTableRow],
    threshold_pct: float = UNDERUTILIZATION_THRESHOLD_PCT,
) -> List[UtilizationRow]:
    """Average load per trip as a percentage of theoretical capacity.

    A vehicle with no rated capacity reports 0% rather than dividing by zero.
    """
    rows = []
    for v in vehicle_rows:
        avg = v.tons / v.trips if v.trips > 0 else 0.0
        utilization = avg / v.cap_ton * 100 if v.cap_ton > 0 else 0.0
        rows.append(UtilizationRow(
            veh=v.veh,
            cap_ton=v.cap_ton,
            avg_tons_per_trip=avg,
            utilization=utilization,
            underutilized=utilization < threshold_pct,
        ))
    return rows
