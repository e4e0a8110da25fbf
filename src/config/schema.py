"""Dataclasses for the derived tables and summaries."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class VehicleTableRow:
    """Per-vehicle efficiency metrics over the filtered trips."""

    veh: str
    area: str
    drivers: str          # distinct driver names, comma separated
    year: str
    cap_m3: float
    cap_ton: float        # capacity_m3 × load density
    trips: int
    tons: float
    fuel: float
    maint: float
    cost_trip: float
    cost_ton: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DriverStatsRow:
    driver: str
    trips: int
    tons: float
    avg_tons_per_trip: float
    vehicles: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class UtilizationRow:
    veh: str
    cap_ton: float
    avg_tons_per_trip: float
    utilization: float    # percent of theoretical capacity
    underutilized: bool

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class AreaShare:
    zone: str
    tons: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SeriesPoint:
    name: str             # month code or ISO date
    value: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class KpiSummary:
    """Fleet-wide summary for the filtered trips."""

    total_tons: float
    total_trips: int
    total_fuel: float
    total_maint: float
    days_count: int
    avg_tons_per_day: float
    active_vehicles: int
    top_trips: Optional[Tuple[str, int]]     # (vehicle id, trips), None if no trips
    top_tons: Optional[Tuple[str, float]]    # (vehicle id, tons), None if no tonnage
    avg_capacity: float

    @property
    def total_cost(self) -> float:
        return self.total_fuel + self.total_maint

    def to_dict(self) -> dict:
        payload = asdict(self)
        payload["total_cost"] = self.total_cost
        for key in ("top_trips", "top_tons"):
            if payload[key] is not None:
                payload[key] = {"veh": payload[key][0], "value": payload[key][1]}
        return payload


@dataclass(frozen=True)
class VehicleTableTotals:
    trips: int
    tons: float
    fuel: float
    maint: float
    avg_cost_trip: float
    avg_cost_ton: float

    def to_dict(self) -> dict:
        return asdict(self)
