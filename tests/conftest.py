"""Shared test fixtures."""

from pathlib import Path

import pytest

from src.data.records import (
    AreaRecord,
    FleetData,
    FuelRecord,
    MaintenanceRecord,
    TripRecord,
    VehicleRecord,
)


class FakeModel:
    """Stands in for the report model; records every prompt it receives."""

    def __init__(self, text="تقرير", error=None):
        self.text = text
        self.error = error
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def trips():
    return (
        TripRecord("V1", "5000", "jan", "2024-01-05", "A"),
        TripRecord("V1", "3000", "jan", "2024-01-06", "B"),
        TripRecord("V2", "4000", "feb", "2024-02-01 08:15", "A"),
        TripRecord("V2", "abc", "feb", "not a date", ""),
        TripRecord("V3", "2000", "Feb", "2024-02-01 17:40", "C"),
    )


@pytest.fixture
def fleet_data(trips):
    return FleetData(
        trips=trips,
        vehicles=(
            VehicleRecord("V1", "2015", "10", "0.5"),
            VehicleRecord("V2", "2019", "8", "0.5"),
        ),
        fuel=(
            FuelRecord("V1", {"jan": "50", "feb": "20"}),
            FuelRecord("V2", {"jan": "100", "feb": "200"}),
        ),
        maintenance=(
            MaintenanceRecord("V1", "10"),
            MaintenanceRecord("V2", "40"),
        ),
        areas=(
            AreaRecord("V1", "North"),
            AreaRecord("V2", "North"),
        ),
    )


@pytest.fixture
def fake_model():
    return FakeModel()


@pytest.fixture
def make_model():
    return FakeModel


FEED_CSV = {
    "trips.csv": (
        "رقم المركبة,صافي التحميل,الشهر,تاريخ التوزين الثاني,السائق,ملاحظات\n"
        "V1,5000,jan,2024-01-05 09:30,A,x\n"
        "V1,3000,jan,2024-01-06 11:00,B,\n"
        "V2,4000,feb,2024-02-01 08:15,A,y\n"
    ),
    "vehicles.csv": (
        "رقم المركبة,سنة التصنيع,سعة المركبة بالمتر المكعب,كثافة التحميل\n"
        "V1,2015,10,0.5\n"
        "V2,2019,8,0.5\n"
    ),
    "fuel.csv": (
        "رقم المركبة,jan,feb,mar,apr,may,jun,july,aug,sep,oct,nov,dec\n"
        "V1,50,20,,,,,,,,,,\n"
        "V2,100,200,,,,,,,,,,\n"
    ),
    "maintenance.csv": "رقم المركبة,كلفة الصيانة\nV1,10\nV2,40\n",
    "areas.csv": "رقم المركبة,المنطقة\nV1,North\nV2,South\n",
}


@pytest.fixture
def feed_dir(tmp_path: Path) -> Path:
    for name, text in FEED_CSV.items():
        (tmp_path / name).write_text(text, encoding="utf-8")
    return tmp_path
