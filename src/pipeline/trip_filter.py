"""Filter state and the trip filter stage feeding every aggregator."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import FrozenSet, Iterable, List

from src.data.records import TripRecord

FILTER_KINDS = ("vehicle", "month")


@dataclass(frozen=True)
class FilterState:
    """Selected vehicle ids and month codes. An empty set means no restriction."""

    vehicles: FrozenSet[str] = frozenset()
    months: FrozenSet[str] = frozenset()

    def toggle(self, kind: str, value: str) -> FilterState:
        """Return a new state with value added if absent, removed if present."""
        if kind == "vehicle":
            return replace(self, vehicles=self.vehicles ^ {value})
        if kind == "month":
            return replace(self, months=self.months ^ {value.lower()})
        raise ValueError(f"Unknown filter kind {kind!r}, expected one of {FILTER_KINDS}")

    def reset(self) -> FilterState:
        return FilterState()

    @property
    def is_empty(self) -> bool:
        return not self.vehicles and not self.months

    def includes_vehicle(self, vehicle_id: str) -> bool:
        return not self.vehicles or vehicle_id in self.vehicles

    def includes_month(self, month: str) -> bool:
        return not self.months or month.lower() in self.months

    def includes(self, trip: TripRecord) -> bool:
        return self.includes_vehicle(trip.vehicle_id) and self.includes_month(trip.month)


def filter_trips(trips: Iterable[TripRecord], state: FilterState) -> List[TripRecord]:
    """Order-preserving subsequence of trips admitted by the filter state."""
    return [trip for trip in trips if state.includes(trip)]
