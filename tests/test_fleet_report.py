"""Tests for report request validation, prompt building and the model wrapper."""

import json

import pytest

import src.report.fleet_report as fleet_report
from src.pipeline.vehicle_aggregator import aggregate_vehicles
from src.report.fleet_report import (
    ANALYSIS_MODES,
    GeminiReportClient,
    ReportGenerationError,
    ReportRequest,
    ReportRequestError,
    build_prompt,
    generate_fleet_report,
)


@pytest.fixture
def rows(fleet_data):
    return aggregate_vehicles(fleet_data.trips, fleet_data)


class TestReportRequest:
    @pytest.mark.parametrize("mode", ["general", "holistic_ranking", "detailed", "best_worst"])
    def test_fixed_modes_need_no_parameters(self, mode):
        assert ReportRequest(mode).user_request()

    def test_specific_requires_vehicle(self):
        with pytest.raises(ReportRequestError):
            ReportRequest("specific").user_request()
        assert "V7" in ReportRequest("specific", vehicle_id="V7").user_request()

    def test_comparison_requires_two_distinct_vehicles(self):
        with pytest.raises(ReportRequestError):
            ReportRequest("comparison", vehicle_ids=("V1",)).user_request()
        with pytest.raises(ReportRequestError):
            ReportRequest("comparison", vehicle_ids=("V1", "V1", " ")).user_request()
        text = ReportRequest("comparison", vehicle_ids=("V1", "V2")).user_request()
        assert "V1, V2" in text

    def test_custom_requires_text(self):
        with pytest.raises(ReportRequestError):
            ReportRequest("custom", custom_prompt="   ").user_request()
        assert ReportRequest("custom", custom_prompt=" which zone? ").user_request() == "which zone?"

    def test_unknown_mode(self):
        with pytest.raises(ReportRequestError):
            ReportRequest("forecast").user_request()

    def test_all_modes_listed(self):
        assert len(ANALYSIS_MODES) == 7


class TestPrompt:
    def test_prompt_embeds_table_and_request(self, rows):
        prompt = build_prompt(rows, ReportRequest("best_worst"))
        start = prompt.index("[")
        end = prompt.index("**USER REQUEST:**")
        table = json.loads(prompt[start:end])
        assert [r["veh"] for r in table] == ["V1", "V2", "V3"]
        assert "top 3 best-performing" in prompt
        assert "formal Arabic" in prompt


class TestGenerateFleetReport:
    def test_returns_model_text(self, rows, make_model):
        model = make_model(text="  report body \n")
        assert generate_fleet_report(rows, ReportRequest("general"), model) == "report body"
        assert len(model.prompts) == 1

    def test_invalid_request_never_calls_model(self, rows, fake_model):
        with pytest.raises(ReportRequestError):
            generate_fleet_report(rows, ReportRequest("comparison", vehicle_ids=("V1",)), fake_model)
        assert fake_model.prompts == []

    def test_empty_response_is_an_error(self, rows, make_model):
        with pytest.raises(ReportGenerationError):
            generate_fleet_report(rows, ReportRequest("general"), make_model(text="  "))


class _BrokenModel:
    def __init__(self, name):
        self.name = name

    def generate_content(self, prompt):
        raise RuntimeError("quota exceeded")


class _EchoModel:
    def __init__(self, name):
        self.name = name

    def generate_content(self, prompt):
        return type("Response", (), {"text": f"{self.name}: ok"})()


class TestGeminiReportClient:
    def test_missing_api_key(self, monkeypatch):
        for name in fleet_report.REPORT_API_KEY_ENV:
            monkeypatch.delenv(name, raising=False)
        with pytest.raises(ReportGenerationError, match="API key"):
            GeminiReportClient().generate("hello")

    def test_failure_wrapped_with_message(self, monkeypatch):
        monkeypatch.setattr(fleet_report.genai, "configure", lambda **kwargs: None)
        monkeypatch.setattr(fleet_report.genai, "GenerativeModel", _BrokenModel)
        with pytest.raises(ReportGenerationError, match="quota exceeded"):
            GeminiReportClient(api_key="k").generate("hello")

    def test_returns_text(self, monkeypatch):
        monkeypatch.setattr(fleet_report.genai, "configure", lambda **kwargs: None)
        monkeypatch.setattr(fleet_report.genai, "GenerativeModel", _EchoModel)
        client = GeminiReportClient(api_key="k", model_name="m1")
        assert client.generate("hello") == "m1: ok"

    def test_key_from_environment(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("API_KEY", "from-env")
        assert GeminiReportClient().api_key == "from-env"
