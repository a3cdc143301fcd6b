"""
Instruction templates and prompt builders for the rain-risk model call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Sequence

from ..config import Destination, Itinerary
from ..forecast import DayForecast
from ..risk import describe_bands
from .schema import MODEL_VERSION, RESPONSE_SCHEMA


@dataclass(frozen=True)
class RiskPrompt:
    """
    Everything the model client needs for one request.

    Attributes:
        instruction: Natural-language task description including the risk bands.
        input: Structured facts (destination, trip dates, trimmed forecasts).
        response_schema: JSON schema the output must conform to.
    """
    instruction: str
    input: Dict[str, Any]
    response_schema: Dict[str, Any]


RAIN_RISK_INSTRUCTION = """
You are a travel rain-risk analyst. Analyze the weather forecast and return a JSON risk assessment.

IMPORTANT: Return ONLY valid JSON. No markdown, no code fences, no extra text.

Analyze dates from {start_date} to {end_date} for {destination_name}.

Risk levels based on precipitation probability:
{risk_bands}

Return this exact JSON structure:
{{
  "modelVersion": "{model_version}",
  "timezone": "{timezone}",
  "days": [
    {{
      "date": "YYYY-MM-DD",
      "riskLevel": "LOW",
      "expectedRainMmRange": {{"min": 0, "max": 0}},
      "confidence": 0.95,
      "advice": "Short practical advice",
      "rationale": "Brief explanation",
      "flags": []
    }}
  ]
}}

Rules:
- One entry per day in the trip range
- riskLevel must be: LOW, MEDIUM, HIGH, or EXTREME
- confidence: number between 0 and 1
- expectedRainMmRange: object with min/max or null if unknown
- flags: array of lowercase snake_case strings like "monsoon_season", "flash_flood_risk"
- Keep advice and rationale concise
""".strip()


SCHEMA_REQUIREMENTS = """
The schema requires:
- modelVersion: string
- timezone: string
- days: array of objects with:
  - date: YYYY-MM-DD format
  - riskLevel: one of LOW, MEDIUM, HIGH, EXTREME
  - expectedRainMmRange: { min: number, max: number } or null
  - confidence: number between 0 and 1
  - advice: non-empty string
  - rationale: non-empty string
  - flags: array of strings
""".strip()


def build_rain_risk_prompt(
    destination: Destination,
    itinerary: Itinerary,
    forecasts: Sequence[DayForecast],
) -> RiskPrompt:
    """
    Assemble instruction, structured input and response schema for one trip.

    Only derived forecast fields are restated in the input; provider payloads and
    wind/condition details are left out to keep the prompt small.
    """
    instruction = RAIN_RISK_INSTRUCTION.format(
        start_date=itinerary.start_date,
        end_date=itinerary.end_date,
        destination_name=destination.display_name,
        risk_bands="\n".join(f"- {line}" for line in describe_bands()),
        model_version=MODEL_VERSION,
        timezone=destination.timezone,
    )
    prompt_input = {
        "destination": {
            "name": destination.display_name,
            "countryCode": destination.country_code,
            "timezone": destination.timezone,
        },
        "tripDates": {
            "start": itinerary.start_date,
            "end": itinerary.end_date,
        },
        "forecasts": [
            {
                "date": item.date,
                "precipProbDay": item.precip_probability_day,
                "precipProbNight": item.precip_probability_night,
                "precipMmDay": item.precip_amount_mm_day,
                "precipMmNight": item.precip_amount_mm_night,
                "tempMin": item.temp_min_c,
                "tempMax": item.temp_max_c,
            }
            for item in forecasts
        ],
    }
    return RiskPrompt(instruction=instruction, input=prompt_input, response_schema=RESPONSE_SCHEMA)


def build_repair_prompt(bad_output: str) -> str:
    """
    Build a corrective instruction asking the model to fix a previous bad output.

    The caller decides whether to send it; nothing in the pipeline does so automatically.
    """
    return "\n".join(
        [
            "Return JSON only. Do not use markdown. Do not add extra text.",
            "Fix the following output so it matches the required schema exactly.",
            "",
            SCHEMA_REQUIREMENTS,
            "",
            "Output to fix:",
            bad_output,
        ]
    ).strip()
