"""Tests for the filter state and trip filter stage."""

import pytest

from src.data.records import TripRecord
from src.pipeline.trip_filter import FilterState, filter_trips


class TestFilterState:
    def test_toggle_adds_then_removes(self):
        state = FilterState().toggle("vehicle", "V1")
        assert state.vehicles == {"V1"}
        assert state.toggle("vehicle", "V1") == FilterState()

    @pytest.mark.parametrize("kind,value", [("vehicle", "V2"), ("month", "feb"), ("month", "JAN")])
    def test_toggle_twice_is_identity(self, kind, value):
        start = FilterState(vehicles=frozenset({"V1"}), months=frozenset({"mar"}))
        assert start.toggle(kind, value).toggle(kind, value) == start

    def test_month_toggle_lowercases(self):
        assert FilterState().toggle("month", "JAN").months == {"jan"}

    def test_toggle_returns_new_state(self):
        state = FilterState()
        state.toggle("vehicle", "V1")
        assert state.is_empty

    def test_reset(self):
        state = FilterState().toggle("vehicle", "V1").toggle("month", "jan")
        assert state.reset() == FilterState()

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            FilterState().toggle("driver", "A")


class TestFilterTrips:
    def test_empty_state_is_identity(self, trips):
        assert filter_trips(trips, FilterState()) == list(trips)

    def test_vehicle_filter_preserves_order(self, trips):
        result = filter_trips(trips, FilterState(vehicles=frozenset({"V2", "V1"})))
        assert [t.vehicle_id for t in result] == ["V1", "V1", "V2", "V2"]

    def test_month_filter_is_case_insensitive(self, trips):
        result = filter_trips(trips, FilterState(months=frozenset({"feb"})))
        assert [t.vehicle_id for t in result] == ["V2", "V2", "V3"]

    def test_vehicle_and_month_combined(self, trips):
        state = FilterState(vehicles=frozenset({"V2", "V3"}), months=frozenset({"feb"}))
        result = filter_trips(trips, state)
        assert len(result) == 3
        state = FilterState(vehicles=frozenset({"V1"}), months=frozenset({"feb"}))
        assert filter_trips(trips, state) == []

    def test_blank_vehicle_only_without_vehicle_filter(self):
        trips = [TripRecord("", "1000", "jan"), TripRecord("V1", "1000", "jan")]
        assert len(filter_trips(trips, FilterState())) == 2
        assert len(filter_trips(trips, FilterState(vehicles=frozenset({"V1"})))) == 1
