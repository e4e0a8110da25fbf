"""Per-vehicle efficiency table: trips and tonnage joined with reference data.

Fuel is billed per month, so when a month filter is active only the selected
months' fuel cost is attributed to a vehicle. Maintenance has no monthly
breakdown and is always counted in full.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

from src.config.constants import DRIVER_SEPARATOR, MONTHS_ORDER
from src.config.schema import VehicleTableRow
from src.data.coercion import leading_number, to_number
from src.data.records import (
    AreaRecord,
    FleetData,
    FuelRecord,
    MaintenanceRecord,
    TripRecord,
    VehicleRecord,
    index_by_vehicle,
)


@dataclass
class TripTally:
    """Running trip count, tonnage and distinct drivers for one vehicle."""

    trips: int = 0
    tons: float = 0.0
    drivers: Dict[str, None] = field(default_factory=dict)  # ordered set

    def add(self, trip: TripRecord) -> None:
        self.trips += 1
        self.tons += trip.tons
        if trip.driver:
            self.drivers.setdefault(trip.driver, None)


def group_by_vehicle(trips: Iterable[TripRecord]) -> Dict[str, TripTally]:
    """Tally trips per vehicle id in first-seen order. Trips without a vehicle id are skipped."""
    groups: Dict[str, TripTally] = {}
    for trip in trips:
        if not trip.vehicle_id:
            continue
        groups.setdefault(trip.vehicle_id, TripTally()).add(trip)
    return groups


def attributed_months(selected_months: Iterable[str]) -> Sequence[str]:
    """Months whose fuel cost counts: the selection if any, else the full year."""
    selected = sorted(
        {m.lower() for m in selected_months},
        key=lambda m: MONTHS_ORDER.index(m) if m in MONTHS_ORDER else len(MONTHS_ORDER),
    )
    return selected or MONTHS_ORDER


def fuel_cost(record: FuelRecord, months: Sequence[str]) -> float:
    return sum(to_number(record.cost_for(m)) for m in months)


def maintenance_cost(record: MaintenanceRecord) -> float:
    return to_number(record.cost)


def theoretical_capacity(record: VehicleRecord) -> float:
    """Rated tonnage: body volume (m³) × load density (t/m³)."""
    return leading_number(record.capacity_m3) * leading_number(record.load_density)


def aggregate_vehicles(
    filtered_trips: Iterable[TripRecord],
    data: FleetData,
    selected_months: Iterable[str] = (),
) -> List[VehicleTableRow]:
    """Build one VehicleTableRow per vehicle present in the filtered trips.

    Args:
        filtered_trips: Output of the trip filter stage.
        data: Reference collections (vehicles, areas, fuel, maintenance).
        selected_months: Active month selection, used for fuel attribution.

    Returns:
        Rows in the order vehicles first appear in filtered_trips.
    """
    groups = group_by_vehicle(filtered_trips)
    months = attributed_months(selected_months)

    vehicles = index_by_vehicle(data.vehicles)
    areas = index_by_vehicle(data.areas)
    fuel = index_by_vehicle(data.fuel)
    maint = index_by_vehicle(data.maintenance)

    rows = []
    for veh, tally in groups.items():
        vehicle = vehicles.get(veh, VehicleRecord(veh))
        area = areas.get(veh, AreaRecord(veh))

        fuel_total = fuel_cost(fuel.get(veh, FuelRecord(veh)), months)
        maint_total = maintenance_cost(maint.get(veh, MaintenanceRecord(veh)))
        total_cost = fuel_total + maint_total

        rows.append(VehicleTableRow(
            veh=veh,
            area=area.zone,
            drivers=DRIVER_SEPARATOR.join(tally.drivers),
            year=vehicle.manufacture_year,
            cap_m3=leading_number(vehicle.capacity_m3),
            cap_ton=theoretical_capacity(vehicle),
            trips=tally.trips,
            tons=tally.tons,
            fuel=fuel_total,
            maint=maint_total,
            cost_trip=total_cost / tally.trips if tally.trips else 0.0,
            cost_ton=total_cost / tally.tons if tally.tons else 0.0,
        ))
    return rows
