"""Fixed record types for the five source feeds and the in-memory store.

Each record reads only the headers it knows about; any other column in the
sheet is ignored. Missing cells become empty strings and numeric fields stay
as the raw sheet text until an aggregator coerces them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar

from src.config.constants import (
    AREA_COLUMNS,
    KG_PER_TON,
    MAINTENANCE_COLUMNS,
    MONTHS_ORDER,
    TRIP_COLUMNS,
    VEHICLE_COLUMNS,
    VEHICLE_ID_COLUMN,
)
from src.data.coercion import parse_weigh_date, to_number


def _cell(row: Mapping[str, object], column: str) -> str:
    value = row.get(column)
    if value is None:
        return ""
    return str(value).strip()


@dataclass(frozen=True)
class TripRecord:
    vehicle_id: str
    net_load_kg: str = ""
    month: str = ""
    weighed_at: str = ""
    driver: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> TripRecord:
        return cls(**{name: _cell(row, col) for name, col in TRIP_COLUMNS.items()})

    @property
    def month_code(self) -> str:
        return self.month.lower()

    @property
    def tons(self) -> float:
        return to_number(self.net_load_kg) / KG_PER_TON

    @property
    def weigh_date(self) -> Optional[date]:
        return parse_weigh_date(self.weighed_at)


@dataclass(frozen=True)
class VehicleRecord:
    vehicle_id: str
    manufacture_year: str = ""
    capacity_m3: str = ""
    load_density: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> VehicleRecord:
        return cls(**{name: _cell(row, col) for name, col in VEHICLE_COLUMNS.items()})


@dataclass(frozen=True)
class FuelRecord:
    """Monthly fuel cost for one vehicle, keyed by month code."""

    vehicle_id: str
    monthly_cost: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> FuelRecord:
        # Month headers are matched case-insensitively
        by_lower = {str(k).strip().lower(): k for k in row.keys()}
        monthly = {}
        for month in MONTHS_ORDER:
            if month in by_lower:
                monthly[month] = _cell(row, by_lower[month])
        return cls(vehicle_id=_cell(row, VEHICLE_ID_COLUMN), monthly_cost=monthly)

    def cost_for(self, month: str) -> str:
        return self.monthly_cost.get(month, "")


def unrecognized_month_headers(columns: Iterable[object]) -> List[str]:
    """Headers that look like a month (e.g. "jul", "September") but are not a canonical code."""
    prefixes = {m[:3] for m in MONTHS_ORDER}
    found = []
    for column in columns:
        key = str(column).strip().lower()
        if key not in MONTHS_ORDER and key.isalpha() and key[:3] in prefixes:
            found.append(str(column))
    return found


@dataclass(frozen=True)
class MaintenanceRecord:
    vehicle_id: str
    cost: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> MaintenanceRecord:
        return cls(**{name: _cell(row, col) for name, col in MAINTENANCE_COLUMNS.items()})


@dataclass(frozen=True)
class AreaRecord:
    vehicle_id: str
    zone: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> AreaRecord:
        return cls(**{name: _cell(row, col) for name, col in AREA_COLUMNS.items()})


@dataclass(frozen=True)
class FleetData:
    """Snapshot of the five parsed feeds."""

    trips: Tuple[TripRecord, ...] = ()
    vehicles: Tuple[VehicleRecord, ...] = ()
    fuel: Tuple[FuelRecord, ...] = ()
    maintenance: Tuple[MaintenanceRecord, ...] = ()
    areas: Tuple[AreaRecord, ...] = ()

    def vehicle_ids(self) -> list:
        """Distinct non-empty vehicle ids seen in trips, sorted."""
        return sorted({t.vehicle_id for t in self.trips if t.vehicle_id})

    def month_codes(self) -> list:
        """Distinct non-empty lowercased month codes seen in trips, first-seen order."""
        seen: Dict[str, None] = {}
        for trip in self.trips:
            if trip.month_code:
                seen.setdefault(trip.month_code, None)
        return list(seen)


R = TypeVar("R")


def index_by_vehicle(records: Iterable[R]) -> Dict[str, R]:
    """Map vehicle id to its first record; later duplicates are ignored."""
    index: Dict[str, R] = {}
    for record in records:
        index.setdefault(record.vehicle_id, record)
    return index

