"""Narrative fleet report generated by a Gemini model from the vehicle table.

Requests are validated before anything is sent to the model; a rejected
request never reaches the network.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Tuple

import google.generativeai as genai

from src.config.constants import REPORT_API_KEY_ENV, REPORT_MODEL
from src.config.schema import VehicleTableRow

logger = logging.getLogger(__name__)

ANALYSIS_MODES = (
    "general",
    "holistic_ranking",
    "detailed",
    "specific",
    "comparison",
    "best_worst",
    "custom",
)

_FIXED_REQUESTS = {
    "general": (
        "Provide a general fleet-wide analysis, including the holistic ranking of all vehicles "
        "as specified in the critical instructions. Conclude with an overall assessment of the "
        "fleet's health and provide high-level strategic recommendations."
    ),
    "holistic_ranking": (
        "Perform a holistic ranking of all vehicles from best to worst, as specified in the "
        "critical instructions. The ranking must be the primary focus of the report. Provide a "
        "detailed justification for each vehicle's position, explaining its strengths and "
        "weaknesses based on the provided data."
    ),
    "detailed": (
        "Provide a detailed report for each vehicle individually. Analyze its performance, "
        "costs, and efficiency, and provide specific recommendations for each one."
    ),
    "best_worst": (
        "Identify the top 3 best-performing and bottom 3 worst-performing vehicles. Base your "
        "evaluation on a combination of key metrics, primarily cost per ton and total tons "
        "collected. Justify your selections with data and provide clear reasons."
    ),
}

ANALYST_INSTRUCTIONS = """\
You are an expert fleet management analyst. Your task is to analyze waste management vehicle data for the Mu'tah and Al-Mazar Municipality.

**CRITICAL INSTRUCTIONS:**
1. All responses MUST be in formal Arabic.
2. All numbers in your response MUST be English numerals (e.g., 123, 45.6, 2024).
3. **Holistic Ranking:** When requested to perform a general analysis or ranking, you MUST rank all vehicles from best to worst. This ranking must be holistic, considering a combination of all provided variables, not just one. Key factors to weigh include cost-effectiveness (cost_ton, cost_trip), productivity (tons, trips), and manufacturing year (year). Present the ranking clearly (e.g., a numbered list) and provide a justification for each vehicle's position, explaining its strengths and weaknesses.
4. Provide specific, testable, and actionable recommendations. For example, suggest reassigning specific vehicles to different zones if data supports it.
5. The data provides total costs. When you mention costs, clarify they are totals for the entire period covered by the data.
6. The data columns are: veh (vehicle number), area (work zone), drivers, year (year of manufacture), cap_m3 (capacity in cubic meters), cap_ton (theoretical capacity in tons), trips (total trips), tons (total tons collected), fuel (total fuel cost), maint (total maintenance cost), cost_trip (average cost per trip), cost_ton (average cost per ton)."""


class ReportRequestError(ValueError):
    """The report request is incomplete for its mode."""


class ReportGenerationError(RuntimeError):
    """The model call failed or returned nothing."""


@dataclass(frozen=True)
class ReportRequest:
    mode: str = "general"
    vehicle_id: Optional[str] = None
    vehicle_ids: Tuple[str, ...] = ()
    custom_prompt: str = ""

    def user_request(self) -> str:
        """Mode-specific instruction text. Raises ReportRequestError if parameters are missing."""
        if self.mode in _FIXED_REQUESTS:
            return _FIXED_REQUESTS[self.mode]

        if self.mode == "specific":
            if not self.vehicle_id or not self.vehicle_id.strip():
                raise ReportRequestError("A vehicle id is required for a single-vehicle report.")
            return (
                f"Provide a detailed performance and cost analysis exclusively for vehicle number "
                f"{self.vehicle_id.strip()}. Compare its performance to the fleet average if possible."
            )

        if self.mode == "comparison":
            ids = list(dict.fromkeys(v.strip() for v in self.vehicle_ids if v and v.strip()))
            if len(ids) < 2:
                raise ReportRequestError("At least two vehicle ids are required for comparison.")
            return (
                f"Directly compare the performance, costs, and efficiency of the following vehicles: "
                f"{', '.join(ids)}. Highlight the key differences and declare a winner for different "
                f"categories (e.g., most cost-effective, highest workload)."
            )

        if self.mode == "custom":
            if not self.custom_prompt.strip():
                raise ReportRequestError("A custom request text is required.")
            return self.custom_prompt.strip()

        raise ReportRequestError(
            f"Invalid analysis mode {self.mode!r}; expected one of {', '.join(ANALYSIS_MODES)}"
        )


def build_prompt(rows: Sequence[VehicleTableRow], request: ReportRequest) -> str:
    """Full model prompt: analyst instructions, vehicle table as JSON, user request."""
    user_request = request.user_request()
    table_json = json.dumps([row.to_dict() for row in rows], ensure_ascii=False, indent=2)
    return (
        f"{ANALYST_INSTRUCTIONS}\n\n"
        f"**VEHICLE DATA (in JSON format):**\n{table_json}\n\n"
        f"**USER REQUEST:**\n{user_request}\n"
    )


class TextModel(Protocol):
    def generate(self, prompt: str) -> str: ...


class GeminiReportClient:
    """Thin wrapper over google.generativeai returning plain text."""

    def __init__(self, api_key: Optional[str] = None, model_name: str = REPORT_MODEL):
        self.api_key = api_key or _api_key_from_env()
        self.model_name = model_name

    def generate(self, prompt: str) -> str:
        if not self.api_key:
            raise ReportGenerationError(
                f"No API key configured; set {' or '.join(REPORT_API_KEY_ENV)}."
            )
        genai.configure(api_key=self.api_key)
        model = genai.GenerativeModel(self.model_name)
        try:
            response = model.generate_content(prompt)
            text = response.text
        except Exception as exc:
            logger.error(f"Report generation failed: {exc}")
            raise ReportGenerationError(f"Report generation failed: {exc}") from exc
        return text


def _api_key_from_env() -> Optional[str]:
    for name in REPORT_API_KEY_ENV:
        value = os.environ.get(name)
        if value:
            return value
    return None


def generate_fleet_report(
    rows: Sequence[VehicleTableRow],
    request: ReportRequest,
    client: Optional[TextModel] = None,
) -> str:
    """Validate the request, build the prompt and return the model's narrative.

    Raises:
        ReportRequestError: request is invalid for its mode (no model call made).
        ReportGenerationError: the model call failed or returned empty text.
    """
    prompt = build_prompt(rows, request)
    client = client or GeminiReportClient()
    logger.info(f"Requesting {request.mode} report ({len(rows)} vehicles, {len(prompt)} chars)")

    text = client.generate(prompt)
    if not text or not text.strip():
        raise ReportGenerationError("The model returned an empty report.")
    return text.strip()
