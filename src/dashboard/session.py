"""Dashboard session: owns the loaded feeds and the filter state.

Every read recomputes the derived views from the current snapshot; nothing
derived is kept between filter changes. Mutations go through one lock so that
toggles from concurrent requests are applied one at a time.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from src.config.constants import FILTERING_DEBOUNCE_SECONDS
from src.config.schema import (
    AreaShare,
    DriverStatsRow,
    KpiSummary,
    SeriesPoint,
    UtilizationRow,
    VehicleTableRow,
    VehicleTableTotals,
)
from src.data.feeds import FeedError
from src.data.records import FleetData, TripRecord
from src.pipeline.area_aggregator import aggregate_areas
from src.pipeline.driver_aggregator import aggregate_drivers
from src.pipeline.kpi_aggregator import compute_kpis
from src.pipeline.tables import sort_rows, vehicle_table_totals
from src.pipeline.time_series import build_time_series
from src.pipeline.trip_filter import FILTER_KINDS, FilterState, filter_trips
from src.pipeline.utilization import compute_utilization
from src.pipeline.vehicle_aggregator import aggregate_vehicles
from src.report.fleet_report import (
    ReportGenerationError,
    ReportRequest,
    TextModel,
    generate_fleet_report,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardSnapshot:
    """All derived views for one filter state."""

    filters: FilterState
    is_filtering: bool
    kpis: KpiSummary
    vehicle_table: List[VehicleTableRow]
    vehicle_totals: Optional[VehicleTableTotals]
    drivers: List[DriverStatsRow]
    utilization: List[UtilizationRow]
    areas: List[AreaShare]
    time_series: List[SeriesPoint]
    load_error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "filters": {
                "vehicles": sorted(self.filters.vehicles),
                "months": sorted(self.filters.months),
            },
            "is_filtering": self.is_filtering,
            "kpis": self.kpis.to_dict(),
            "vehicle_table": [r.to_dict() for r in self.vehicle_table],
            "vehicle_totals": self.vehicle_totals.to_dict() if self.vehicle_totals else None,
            "drivers": [r.to_dict() for r in self.drivers],
            "utilization": [r.to_dict() for r in self.utilization],
            "areas": [a.to_dict() for a in self.areas],
            "time_series": [p.to_dict() for p in self.time_series],
            "load_error": self.load_error,
        }


@dataclass
class ReportState:
    text: str = ""
    error: Optional[str] = None


class DashboardSession:
    """Single owner of the raw store, the filter state and the report state."""

    def __init__(
        self,
        data: Optional[FleetData] = None,
        report_client: Optional[TextModel] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.data = data or FleetData()
        self.filters = FilterState()
        self.load_error: Optional[str] = None
        self.report = ReportState()
        self.report_client = report_client
        self._clock = clock
        self._filtering_until = 0.0
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Data loading
    # ------------------------------------------------------------------

    def reload(self, loader: Callable[[], FleetData]) -> bool:
        """Replace the store with fresh feeds. On failure the previous store stays in use."""
        try:
            data = loader()
        except FeedError as exc:
            logger.error(f"Feed load failed: {exc}")
            with self._lock:
                self.load_error = str(exc)
            return False

        with self._lock:
            self.data = data
            self.load_error = None
            # Drop selections that no longer occur in the trip data
            self.filters = FilterState(
                vehicles=self.filters.vehicles & set(data.vehicle_ids()),
                months=self.filters.months & set(data.month_codes()),
            )
        logger.info(f"Loaded {len(data.trips)} trips, {len(data.vehicles)} vehicles")
        return True

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def available_filters(self) -> dict:
        return {"vehicles": self.data.vehicle_ids(), "months": self.data.month_codes()}

    def toggle(self, kind: str, value: str) -> FilterState:
        if kind not in FILTER_KINDS:
            raise ValueError(f"Unknown filter kind {kind!r}, expected one of {FILTER_KINDS}")
        with self._lock:
            observed = self.data.vehicle_ids() if kind == "vehicle" else self.data.month_codes()
            key = value if kind == "vehicle" else value.lower()
            if key not in observed:
                raise ValueError(f"{kind} {value!r} does not occur in the trip data")
            self.filters = self.filters.toggle(kind, key)
            self._mark_filtering()
            return self.filters

    def reset(self) -> FilterState:
        with self._lock:
            self.filters = self.filters.reset()
            self._mark_filtering()
            return self.filters

    def _mark_filtering(self) -> None:
        self._filtering_until = self._clock() + FILTERING_DEBOUNCE_SECONDS

    @property
    def is_filtering(self) -> bool:
        return self._clock() < self._filtering_until

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def filtered_trips(self) -> List[TripRecord]:
        return filter_trips(self.data.trips, self.filters)

    def vehicle_table(self) -> List[VehicleTableRow]:
        with self._lock:
            data, filters = self.data, self.filters
        return aggregate_vehicles(filter_trips(data.trips, filters), data, filters.months)

    def snapshot(
        self,
        group_by: str = "month",
        metric: str = "trips",
        vehicle_sort: str = "veh",
        driver_sort: str = "tons",
        utilization_sort: str = "utilization",
    ) -> DashboardSnapshot:
        with self._lock:
            data, filters, load_error = self.data, self.filters, self.load_error

        trips = filter_trips(data.trips, filters)
        vehicles = aggregate_vehicles(trips, data, filters.months)
        return DashboardSnapshot(
            filters=filters,
            is_filtering=self.is_filtering,
            kpis=compute_kpis(trips, vehicles),
            vehicle_table=sort_rows(vehicles, vehicle_sort),
            vehicle_totals=vehicle_table_totals(vehicles),
            drivers=sort_rows(aggregate_drivers(trips), driver_sort),
            utilization=sort_rows(compute_utilization(vehicles), utilization_sort),
            areas=aggregate_areas(trips, data.areas),
            time_series=build_time_series(trips, group_by, metric),
            load_error=load_error,
        )

    # ------------------------------------------------------------------
    # Report
    # ------------------------------------------------------------------

    def generate_report(
        self,
        mode: str,
        vehicle_id: Optional[str] = None,
        vehicle_ids: Sequence[str] = (),
        custom_prompt: str = "",
    ) -> str:
        """Generate a narrative report for the current vehicle table.

        ReportRequestError propagates untouched. On ReportGenerationError the
        message is kept as report.error, the last good report text is kept,
        and the error is re-raised.
        """
        request = ReportRequest(
            mode=mode,
            vehicle_id=vehicle_id,
            vehicle_ids=tuple(vehicle_ids),
            custom_prompt=custom_prompt,
        )
        rows = self.vehicle_table()
        try:
            text = generate_fleet_report(rows, request, self.report_client)
        except ReportGenerationError as exc:
            with self._lock:
                self.report = ReportState(text=self.report.text, error=str(exc))
            raise

        with self._lock:
            self.report = ReportState(text=text)
        return text
