import json
from pathlib import Path

from rich.console import Console

from tripcast import __version__, cli
from tripcast.errors import NetworkError, SchemaValidationError
from tripcast.forecast import DayForecast
from tripcast.llm import DaySummaryFacts, LLMSettings, TravelRiskReport
from tripcast.llm.schema import DayRisk
from tripcast.pipeline import DaySummaryResult, RiskReportResult


def _fake_result(itinerary_id: str) -> RiskReportResult:
    day = DayRisk.model_validate(
        {
            "date": "2024-01-10",
            "riskLevel": "LOW",
            "expectedRainMmRange": None,
            "confidence": 0.9,
            "advice": "Sunscreen.",
            "rationale": "Dry season.",
            "flags": [],
        }
    )
    report = TravelRiskReport(
        itinerary_id=itinerary_id,
        generated_at="2024-01-09T10:00:00.000Z",
        model_version="travel_rain_risk_v1",
        timezone="Asia/Dubai",
        days=[day],
    )
    forecast = DayForecast(date="2024-01-10", precip_probability_day=5, temp_min_c=18.0, temp_max_c=26.0)
    return RiskReportResult(forecast_days=[forecast], report=report)


def test_version_flag(runner) -> None:
    result = runner.invoke(cli.app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_destinations_lists_builtins(runner, monkeypatch) -> None:
    monkeypatch.setattr(cli, "console", Console(width=200))
    result = runner.invoke(cli.app, ["destinations"])

    assert result.exit_code == 0
    assert "dubai" in result.stdout
    assert "323091" in result.stdout


def test_report_json(runner, monkeypatch) -> None:
    seen = {}

    def fake_generate(destination, itinerary, *, config, include_hourly):
        seen["destination"] = destination.id
        seen["dates"] = (itinerary.start_date, itinerary.end_date)
        seen["include_hourly"] = include_hourly
        return _fake_result(itinerary.id)

    monkeypatch.setattr(cli, "generate_travel_risk_report", fake_generate)

    result = runner.invoke(cli.app, ["report", "Dubai", "2024-01-10", "2024-01-10", "--json", "--no-hourly"])

    assert result.exit_code == 0, result.stdout
    payload = json.loads(result.stdout)
    assert payload["report"]["days"][0]["riskLevel"] == "LOW"
    assert payload["report"]["timezone"] == "Asia/Dubai"
    assert payload["forecastDays"][0]["date"] == "2024-01-10"
    assert payload["forecastDays"][0]["precipProbabilityDay"] == 5
    assert payload["hourly"] == []
    assert payload["corrections"] == []
    assert seen == {"destination": "dubai", "dates": ("2024-01-10", "2024-01-10"), "include_hourly": False}


def test_report_table_output(runner, monkeypatch) -> None:
    monkeypatch.setattr(cli, "console", Console(width=200))
    monkeypatch.setattr(
        cli,
        "generate_travel_risk_report",
        lambda destination, itinerary, **kwargs: _fake_result(itinerary.id),
    )

    result = runner.invoke(cli.app, ["report", "dubai", "2024-01-10", "2024-01-10"])

    assert result.exit_code == 0
    assert "2024-01-10" in result.stdout
    assert "LOW" in result.stdout


def test_report_unknown_destination(runner) -> None:
    result = runner.invoke(cli.app, ["report", "atlantis", "2024-01-10", "2024-01-12"])

    assert result.exit_code == 1
    assert "Unknown destination" in result.stdout


def test_report_rejects_inverted_dates(runner) -> None:
    result = runner.invoke(cli.app, ["report", "dubai", "2024-01-12", "2024-01-10"])

    assert result.exit_code != 0


def test_report_pipeline_error_exits_nonzero(runner, monkeypatch) -> None:
    def failing(destination, itinerary, **kwargs):
        raise NetworkError("AccuWeather", 503, "Service Unavailable")

    monkeypatch.setattr(cli, "generate_travel_risk_report", failing)

    result = runner.invoke(cli.app, ["report", "dubai", "2024-01-10", "2024-01-12"])

    assert result.exit_code == 1
    assert "503" in result.stdout


def test_invalid_output_saved_for_repair(runner, monkeypatch, tmp_path: Path) -> None:
    raw_path = tmp_path / "bad.json"

    def failing(destination, itinerary, **kwargs):
        raise SchemaValidationError(["days.0.confidence: too large"], raw_text='{"days": [{"confidence": 2}]}')

    monkeypatch.setattr(cli, "generate_travel_risk_report", failing)

    result = runner.invoke(
        cli.app, ["report", "dubai", "2024-01-10", "2024-01-12", "--raw-output", str(raw_path)]
    )

    assert result.exit_code == 1
    assert raw_path.read_text(encoding="utf-8") == '{"days": [{"confidence": 2}]}'

    repair = runner.invoke(cli.app, ["repair-prompt", str(raw_path)])

    assert repair.exit_code == 0
    assert "Output to fix:" in repair.stdout
    assert '"confidence": 2' in repair.stdout


def test_summary_command_prints_summary(runner, monkeypatch) -> None:
    seen = {}

    def fake_summarize(destination, day, *, config):
        seen["call"] = (destination.id, day)
        facts = DaySummaryFacts(date=day, location_name=destination.display_name, rain_window="14:00 - 17:00")
        return DaySummaryResult(facts=facts, summary="Warm and dry until a shower mid-afternoon.", forecast=None)

    monkeypatch.setattr(cli, "summarize_day", fake_summarize)

    result = runner.invoke(cli.app, ["summary", "dubai", "2024-01-10"])

    assert result.exit_code == 0, result.stdout
    assert seen["call"] == ("dubai", "2024-01-10")
    assert "Warm and dry until a shower mid-afternoon." in result.stdout
    assert "14:00 - 17:00" in result.stdout


def test_summary_command_rejects_bad_date(runner) -> None:
    result = runner.invoke(cli.app, ["summary", "dubai", "10/01/2024"])

    assert result.exit_code != 0


def test_summary_command_error_exits_nonzero(runner, monkeypatch) -> None:
    def failing(destination, day, **kwargs):
        raise NetworkError("Gemini", None, "Request timed out after 15.0s")

    monkeypatch.setattr(cli, "summarize_day", failing)

    result = runner.invoke(cli.app, ["summary", "dubai", "2024-01-10"])

    assert result.exit_code == 1
    assert "timed out" in result.stdout


def test_chat_command_answers_scripted_questions(runner, monkeypatch) -> None:
    calls = []

    def fake_generate(destination, itinerary, *, config, include_hourly):
        assert (itinerary.start_date, itinerary.end_date) == ("2024-01-10", "2024-01-10")
        assert include_hourly is False
        return _fake_result(itinerary.id)

    def fake_send(message, context, history, settings):
        calls.append((message, context.risk_level, [turn.content for turn in history]))
        return f"Answer {len(calls)}"

    monkeypatch.setattr(cli, "generate_travel_risk_report", fake_generate)
    monkeypatch.setattr(cli, "resolve_llm_settings", lambda config: LLMSettings(model="m", api_key="k", provider="mock"))
    monkeypatch.setattr(cli, "send_chat_message", fake_send)

    result = runner.invoke(
        cli.app, ["chat", "dubai", "2024-01-10", "-q", "Beach day?", "-q", "What about the evening?"]
    )

    assert result.exit_code == 0, result.stdout
    assert calls == [
        ("Beach day?", "LOW", []),
        ("What about the evening?", "LOW", ["Beach day?", "Answer 1"]),
    ]
    assert "Answer 2" in result.stdout


def test_chat_command_prompts_until_exit(runner, monkeypatch) -> None:
    asked = []
    monkeypatch.setattr(cli, "generate_travel_risk_report", lambda destination, itinerary, **kwargs: _fake_result(itinerary.id))
    monkeypatch.setattr(cli, "resolve_llm_settings", lambda config: LLMSettings(model="m", api_key="k", provider="mock"))
    monkeypatch.setattr(cli, "send_chat_message", lambda message, *args: asked.append(message) or "Sure.")

    result = runner.invoke(cli.app, ["chat", "dubai", "2024-01-10"], input="Umbrella?\nexit\n")

    assert result.exit_code == 0, result.stdout
    assert asked == ["Umbrella?"]
