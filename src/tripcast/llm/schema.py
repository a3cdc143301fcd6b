"""
Typed report models and the JSON schema handed to the model.

Field names on the wire are camelCase; Python attributes are snake_case.
Model output is validated strictly: numbers must be JSON numbers, strings must
be JSON strings, and nothing is coerced.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, StringConstraints, model_validator
from pydantic.alias_generators import to_camel

from ..risk import RiskLevel

MODEL_VERSION = "travel_rain_risk_v1"
ISO_DATE_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$"

# json.loads accepts NaN and Infinity; the report JSON must not contain them.
StrictNumber = Annotated[float, Field(strict=True, allow_inf_nan=False)]
RainMillimeters = Annotated[float, Field(strict=True, allow_inf_nan=False, ge=0)]
NonEmptyText = Annotated[str, StringConstraints(strict=True, min_length=1)]


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, frozen=True, protected_namespaces=())


class RainRange(_WireModel):
    """Expected rainfall for a day in millimeters."""

    min: RainMillimeters
    max: RainMillimeters

    @model_validator(mode="after")
    def _ordered(self) -> "RainRange":
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        return self


class DayRisk(_WireModel):
    """
    One day's analyzed risk.

    Attributes:
        date: Calendar date (YYYY-MM-DD) matching a forecast day.
        risk_level: Severity band.
        expected_rain_mm_range: Expected rainfall range, or None when unknown.
        confidence: Model confidence between 0 and 1.
        advice: Practical advice for the traveller.
        rationale: Why the level was chosen.
        flags: Lowercase snake_case warning tags (e.g., "flash_flood_risk").
    """

    date: Annotated[str, StringConstraints(strict=True, pattern=ISO_DATE_PATTERN)]
    risk_level: RiskLevel
    expected_rain_mm_range: Optional[RainRange] = None
    confidence: Annotated[StrictNumber, Field(ge=0, le=1)]
    advice: NonEmptyText
    rationale: NonEmptyText
    flags: List[StrictStr]


class ValidatedReport(_WireModel):
    """Schema-conformant model output, before correction."""

    model_version: StrictStr
    timezone: StrictStr
    days: List[DayRisk]


class TravelRiskReport(_WireModel):
    """
    The orchestrator's output. Never mutated once assembled.

    Attributes:
        itinerary_id: Id of the itinerary the report covers.
        generated_at: ISO 8601 UTC generation time.
        model_version: Version string reported by the model.
        timezone: Destination timezone reported by the model.
        days: Corrected day risks ordered by date.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, frozen=True, populate_by_name=True, protected_namespaces=()
    )

    itinerary_id: str
    generated_at: str
    model_version: str
    timezone: str
    days: List[DayRisk]

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, *, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "modelVersion": {"type": "string"},
        "timezone": {"type": "string"},
        "days": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "date": {"type": "string", "description": "YYYY-MM-DD"},
                    "riskLevel": {"type": "string", "enum": [level.value for level in RiskLevel]},
                    "expectedRainMmRange": {
                        "type": "object",
                        "nullable": True,
                        "properties": {
                            "min": {"type": "number", "minimum": 0},
                            "max": {"type": "number", "minimum": 0},
                        },
                        "required": ["min", "max"],
                    },
                    "confidence": {"type": "number", "minimum": 0, "maximum": 1},
                    "advice": {"type": "string"},
                    "rationale": {"type": "string"},
                    "flags": {"type": "array", "items": {"type": "string"}},
                },
                "required": ["date", "riskLevel", "confidence", "advice", "rationale", "flags"],
            },
        },
    },
    "required": ["modelVersion", "timezone", "days"],
}
