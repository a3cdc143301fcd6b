from tripcast.forecast import DayForecast
from tripcast.llm import build_rain_risk_prompt, build_repair_prompt
from tripcast.llm.schema import MODEL_VERSION, RESPONSE_SCHEMA


def _forecasts():
    return [
        DayForecast(
            date="2024-01-10",
            precip_probability_day=10,
            precip_probability_night=5,
            precip_amount_mm_day=0.0,
            precip_amount_mm_night=0.0,
            temp_min_c=18.0,
            temp_max_c=26.0,
            wind_speed_kmh=14.8,
            icon_phrase_day="Sunny",
        )
    ]


def test_instruction_lists_risk_bands_and_trip(dubai, dubai_itinerary) -> None:
    prompt = build_rain_risk_prompt(dubai, dubai_itinerary, _forecasts())

    for band in ("LOW: <20%", "MEDIUM: 20-50%", "HIGH: 50-80%", "EXTREME: >80%"):
        assert band in prompt.instruction
    assert "2024-01-10 to 2024-01-12" in prompt.instruction
    assert "Dubai" in prompt.instruction
    assert MODEL_VERSION in prompt.instruction
    assert "Return ONLY valid JSON" in prompt.instruction


def test_input_carries_only_derived_forecast_fields(dubai, dubai_itinerary) -> None:
    prompt = build_rain_risk_prompt(dubai, dubai_itinerary, _forecasts())

    assert prompt.input["destination"] == {"name": "Dubai", "countryCode": "AE", "timezone": "Asia/Dubai"}
    assert prompt.input["tripDates"] == {"start": "2024-01-10", "end": "2024-01-12"}
    [day] = prompt.input["forecasts"]
    assert day == {
        "date": "2024-01-10",
        "precipProbDay": 10,
        "precipProbNight": 5,
        "precipMmDay": 0.0,
        "precipMmNight": 0.0,
        "tempMin": 18.0,
        "tempMax": 26.0,
    }


def test_response_schema_requires_day_fields(dubai, dubai_itinerary) -> None:
    prompt = build_rain_risk_prompt(dubai, dubai_itinerary, _forecasts())

    assert prompt.response_schema is RESPONSE_SCHEMA
    day_schema = RESPONSE_SCHEMA["properties"]["days"]["items"]
    assert set(day_schema["required"]) == {"date", "riskLevel", "confidence", "advice", "rationale", "flags"}
    assert day_schema["properties"]["riskLevel"]["enum"] == ["LOW", "MEDIUM", "HIGH", "EXTREME"]


def test_repair_prompt_wraps_bad_output() -> None:
    prompt = build_repair_prompt('{"days": "oops"}')

    assert prompt.startswith("Return JSON only. Do not use markdown. Do not add extra text.")
    assert "Fix the following output so it matches the required schema exactly." in prompt
    assert "riskLevel: one of LOW, MEDIUM, HIGH, EXTREME" in prompt
    assert prompt.endswith('Output to fix:\n{"days": "oops"}')
