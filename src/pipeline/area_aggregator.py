"""Tonnage distribution across work zones."""

from typing import Dict, Iterable, List

from src.config.constants import UNSPECIFIED_ZONE
from src.config.schema import AreaShare
from src.data.coercion import round_half_up
from src.data.records import AreaRecord, TripRecord, index_by_vehicle


def zone_lookup(areas: Iterable[AreaRecord]) -> Dict[str, str]:
    """vehicle id -> zone name, first mapping wins."""
    return {veh: record.zone for veh, record in index_by_vehicle(areas).items()}


def aggregate_areas(
    filtered_trips: Iterable[TripRecord],
    areas: Iterable[AreaRecord],
) -> List[AreaShare]:
    """Total tons per zone, largest first; equal totals keep first-seen order."""
    zones = zone_lookup(areas)
    totals: Dict[str, float] = {}
    for trip in filtered_trips:
        zone = zones.get(trip.vehicle_id) or UNSPECIFIED_ZONE
        totals[zone] = totals.get(zone, 0.0) + trip.tons

    shares = [AreaShare(zone=zone, tons=round_half_up(tons)) for zone, tons in totals.items()]
    return sorted(shares, key=lambda s: s.tons, reverse=True)
