"""Tests for CSV feed ingestion."""

from pathlib import Path

import pytest
import requests

from src.data.coercion import leading_number, parse_weigh_date, round_half_up, to_number
from src.data.feeds import (
    FeedError,
    default_sources,
    load_feed,
    load_fleet_data,
    parse_csv,
    read_source,
)
from src.data.records import FuelRecord, TripRecord, unrecognized_month_headers


class _FakeResponse:
    def __init__(self, text, status=200):
        self.text = text
        self.content = text.encode("utf-8")
        self.status_code = status
        self.headers = {"Content-Type": "text/csv; charset=utf-8"}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class _FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.urls = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.response


class TestLoadFleetData:
    def test_loads_all_feeds(self, feed_dir: Path):
        data = load_fleet_data(default_sources(feed_dir))
        assert len(data.trips) == 3
        assert len(data.vehicles) == 2
        assert data.trips[0] == TripRecord("V1", "5000", "jan", "2024-01-05 09:30", "A")
        assert data.fuel[1].cost_for("feb") == "200"
        assert data.fuel[0].cost_for("mar") == ""
        assert data.areas[1].zone == "South"
        assert data.maintenance[0].cost == "10"

    def test_missing_file_raises_feed_error(self, feed_dir: Path):
        (feed_dir / "areas.csv").unlink()
        with pytest.raises(FeedError):
            load_fleet_data(default_sources(feed_dir))

    def test_missing_source_key(self, feed_dir: Path):
        sources = default_sources(feed_dir)
        del sources["fuel"]
        with pytest.raises(ValueError):
            load_fleet_data(sources)

    def test_filter_values_from_trips(self, feed_dir: Path):
        data = load_fleet_data(default_sources(feed_dir))
        assert data.vehicle_ids() == ["V1", "V2"]
        assert data.month_codes() == ["jan", "feb"]


class TestParseCsv:
    def test_short_rows_padded_long_rows_truncated(self):
        text = "a,b,c\n1,2\n4,5,6,7\n"
        df = parse_csv(text)
        assert list(df.columns) == ["a", "b", "c"]
        assert df.to_dict(orient="records") == [
            {"a": "1", "b": "2", "c": ""},
            {"a": "4", "b": "5", "c": "6"},
        ]

    def test_cells_and_headers_stripped(self):
        df = parse_csv(" a , b \n 1 ,  x \n")
        assert df.to_dict(orient="records") == [{"a": "1", "b": "x"}]

    def test_empty_text(self):
        assert parse_csv("   \n").empty

    def test_header_only(self):
        df = parse_csv("a,b\n")
        assert df.empty

    def test_unknown_columns_ignored(self):
        row = {"رقم المركبة": "V9", "jan": "5", "JUL": "7", "Extra": "zzz"}
        record = FuelRecord.from_row(row)
        assert record.vehicle_id == "V9"
        assert record.monthly_cost == {"jan": "5"}

    def test_month_like_headers_reported(self):
        headers = ["رقم المركبة", "jan", "JUL", "July", "sept", "ملاحظات", "Extra"]
        assert unrecognized_month_headers(headers) == ["JUL", "sept"]

    def test_fuel_feed_warns_on_unknown_month(self, tmp_path: Path, caplog):
        path = tmp_path / "fuel.csv"
        path.write_text("رقم المركبة,jan,jul\nV1,10,20\n", encoding="utf-8")
        with caplog.at_level("WARNING", logger="src.data.feeds"):
            (record,) = load_feed("fuel", path)
        assert record.monthly_cost == {"jan": "10"}
        assert "'jul'" in caplog.text


class TestReadSource:
    def test_http_source(self):
        session = _FakeSession(_FakeResponse("a,b\n1,2\n"))
        assert read_source("https://example.org/feed.csv", session) == "a,b\n1,2\n"
        assert session.urls == ["https://example.org/feed.csv"]

    def test_http_failure_wrapped(self):
        session = _FakeSession(error=requests.ConnectionError("offline"))
        with pytest.raises(FeedError, match="offline"):
            read_source("https://example.org/feed.csv", session)

    def test_http_status_error_wrapped(self):
        session = _FakeSession(_FakeResponse("", status=404))
        with pytest.raises(FeedError):
            read_source("https://example.org/feed.csv", session)

    def test_csv_without_charset_decoded_as_utf8(self):
        response = requests.Response()
        response.status_code = 200
        response.headers["Content-Type"] = "text/csv"
        response._content = "\ufeffرقم المركبة,صافي التحميل,الشهر\nV1,5000,jan\n".encode("utf-8")
        text = read_source("https://example.org/trips.csv", _FakeSession(response))

        (trip,) = [TripRecord.from_row(r) for r in parse_csv(text).to_dict(orient="records")]
        assert trip.vehicle_id == "V1"
        assert trip.net_load_kg == "5000"
        assert trip.month == "jan"

    def test_invalid_utf8_body_wrapped(self):
        response = requests.Response()
        response.status_code = 200
        response.headers["Content-Type"] = "text/csv"
        response._content = b"V2,\xff\xfe\n"
        with pytest.raises(FeedError, match="UTF-8"):
            read_source("https://example.org/areas.csv", _FakeSession(response))

    def test_invalid_utf8_file_wrapped(self, tmp_path: Path):
        path = tmp_path / "areas.csv"
        path.write_bytes("رقم المركبة,المنطقة\n".encode("utf-8") + b"V2,\xff\xfe\n")
        with pytest.raises(FeedError):
            read_source(path)


class TestCoercion:
    @pytest.mark.parametrize("raw,expected", [
        ("5000", 5000.0), (" 12.5 ", 12.5), ("", 0.0), (None, 0.0),
        ("abc", 0.0), ("nan", 0.0), ("inf", 0.0), (7, 7.0),
    ])
    def test_to_number(self, raw, expected):
        assert to_number(raw) == expected

    @pytest.mark.parametrize("raw,expected", [
        ("10 m3", 10.0), ("0.55t/m3", 0.55), (" 12 ", 12.0), ("-3.5x", -3.5),
        (".5", 0.5), ("m3 10", 0.0), ("", 0.0), (None, 0.0), (8, 8.0),
    ])
    def test_leading_number(self, raw, expected):
        assert leading_number(raw) == expected

    def test_parse_date_drops_time(self):
        assert parse_weigh_date("2024-01-05 23:59:00").isoformat() == "2024-01-05"

    @pytest.mark.parametrize("raw", ["", None, "not a date", "  "])
    def test_parse_date_invalid(self, raw):
        assert parse_weigh_date(raw) is None

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(2.4) == 2
        assert round_half_up(0.5) == 1
