"""Sorting and totals for the derived tables."""

from dataclasses import fields
from typing import List, Optional, Sequence, TypeVar

from src.config.schema import VehicleTableRow, VehicleTableTotals

Row = TypeVar("Row")


def sort_rows(rows: Sequence[Row], sort_by: str) -> List[Row]:
    """Text columns ascending, numeric columns descending. Ties keep their order."""
    if not rows:
        return []
    names = {f.name for f in fields(rows[0])}
    if sort_by not in names:
        raise ValueError(f"Cannot sort by {sort_by!r}; columns are {sorted(names)}")

    if isinstance(getattr(rows[0], sort_by), str):
        return sorted(rows, key=lambda r: getattr(r, sort_by))
    return sorted(rows, key=lambda r: getattr(r, sort_by), reverse=True)


def vehicle_table_totals(rows: Sequence[VehicleTableRow]) -> Optional[VehicleTableTotals]:
    """Column totals; the two cost ratios are plain means over the rows."""
    if not rows:
        return None
    n = len(rows)
    return VehicleTableTotals(
        trips=sum(r.trips for r in rows),
        tons=sum(r.tons for r in rows),
        fuel=sum(r.fuel for r in rows),
        maint=sum(r.maint for r in rows),
        avg_cost_trip=sum(r.cost_trip for r in rows) / n,
        avg_cost_ton=sum(r.cost_ton for r in rows) / n,
    )
