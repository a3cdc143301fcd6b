import json
from typing import Callable, Dict, List, Optional

import pytest
from typer.testing import CliRunner

from tripcast.config import Itinerary, get_destination
from tripcast.llm import LLMSettings


def _accu_day(
    date: str,
    *,
    day_prob: Optional[int] = None,
    night_prob: Optional[int] = None,
    day_liquid: float = 0.0,
    night_liquid: float = 0.0,
    liquid_unit: str = "mm",
    t_min: float = 18.0,
    t_max: float = 26.0,
    temp_unit: str = "C",
) -> dict:
    day: Dict[str, object] = {
        "IconPhrase": "Sunny",
        "TotalLiquid": {"Value": day_liquid, "Unit": liquid_unit},
        "Wind": {"Speed": {"Value": 14.8, "Unit": "km/h"}, "Direction": {"Degrees": 315, "English": "NW"}},
        "WindGust": {"Speed": {"Value": 27.8, "Unit": "km/h"}},
    }
    night: Dict[str, object] = {
        "IconPhrase": "Clear",
        "TotalLiquid": {"Value": night_liquid, "Unit": liquid_unit},
    }
    if day_prob is not None:
        day["RainProbability"] = day_prob
    if night_prob is not None:
        night["RainProbability"] = night_prob
    return {
        "Date": f"{date}T07:00:00+04:00",
        "Temperature": {
            "Minimum": {"Value": t_min, "Unit": temp_unit},
            "Maximum": {"Value": t_max, "Unit": temp_unit},
        },
        "Day": day,
        "Night": night,
    }


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def accu_day() -> Callable[..., dict]:
    """Factory for a single AccuWeather DailyForecasts entry."""
    return _accu_day


@pytest.fixture
def dubai_payload() -> dict:
    """Three-day AccuWeather payload for the Dubai trip scenario."""
    return {
        "DailyForecasts": [
            _accu_day("2024-01-09", day_prob=0, night_prob=0),
            _accu_day("2024-01-10", day_prob=10, night_prob=5),
            _accu_day("2024-01-11", day_prob=65, night_prob=30, day_liquid=3.2, night_liquid=0.8),
            _accu_day("2024-01-12", day_prob=90, night_prob=85, day_liquid=12.5, night_liquid=6.0),
            _accu_day("2024-01-13", day_prob=40, night_prob=20),
        ]
    }


@pytest.fixture
def dubai():
    return get_destination("dubai")


@pytest.fixture
def dubai_itinerary() -> Itinerary:
    return Itinerary(id="trip-1", destination_id="dubai", start_date="2024-01-10", end_date="2024-01-12")


@pytest.fixture
def model_output() -> Callable[..., str]:
    """Factory producing model JSON text for a list of (date, riskLevel, advice) tuples."""

    def _build(days: List[tuple], *, timezone: str = "Asia/Dubai") -> str:
        return json.dumps(
            {
                "modelVersion": "travel_rain_risk_v1",
                "timezone": timezone,
                "days": [
                    {
                        "date": date,
                        "riskLevel": level,
                        "expectedRainMmRange": {"min": 0, "max": 2},
                        "confidence": 0.8,
                        "advice": advice,
                        "rationale": "Based on forecast probabilities.",
                        "flags": [],
                    }
                    for date, level, advice in days
                ],
            }
        )

    return _build


@pytest.fixture
def mock_llm_settings() -> LLMSettings:
    return LLMSettings(model="mock-model", api_key="test", provider="mock")
