"""
Main orchestration for producing a travel rain-risk report.

One call runs one linear chain: fetch forecasts, filter to the trip, build the
prompt, call the model once, validate, correct, assemble. Errors from any step
propagate unchanged; there is no fallback report and no automatic retry.
Concurrent calls for the same itinerary are not de-duplicated.

The single-day summary reuses the forecast steps and makes one free-text model call.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..api import DailyForecastResponse, ForecastRequest, fetch_daily_forecast, fetch_hourly_forecast, resolve_api_key
from ..config import AppConfig, Destination, Itinerary, get_secrets
from ..errors import NetworkError
from ..forecast import DayForecast, HourlyForecast, build_hourly_forecasts, normalize_daily_forecast
from ..llm import (
    DaySummaryFacts,
    LLMSettings,
    RiskPrompt,
    TravelRiskReport,
    build_rain_risk_prompt,
    compute_day_summary_facts,
    generate_chat_text,
    generate_day_summary,
    generate_model_text,
    parse_and_validate_report,
    resolve_llm_settings,
)
from ..util import in_range, utc_now_iso
from .correction import Correction, correct_report

logger = logging.getLogger(__name__)

DailyFetcher = Callable[[ForecastRequest], DailyForecastResponse]
HourlyFetcher = Callable[[ForecastRequest], List[Dict[str, Any]]]
ModelCall = Callable[[RiskPrompt, LLMSettings], str]
ChatCall = Callable[..., str]


@dataclass
class RiskReportResult:
    """
    Normalized inputs next to the corrected output so callers can cross-reference.

    Attributes:
        forecast_days: Trip-range DayForecast records the report was built from.
        report: The corrected TravelRiskReport.
        hourly: Hourly forecasts falling on trip dates (may be empty).
        corrections: Rewrites the corrector applied to the model output.
    """
    forecast_days: List[DayForecast]
    report: TravelRiskReport
    hourly: List[HourlyForecast] = field(default_factory=list)
    corrections: List[Correction] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Canonical report plus the forecast data behind it, camelCase throughout."""
        return {
            "report": self.report.to_dict(),
            "forecastDays": [item.to_dict() for item in self.forecast_days],
            "hourly": [item.to_dict() for item in self.hourly],
            "corrections": [asdict(item) for item in self.corrections],
        }


@dataclass
class DaySummaryResult:
    """
    A model-written summary of one day and the facts it was written from.

    Attributes:
        facts: Numbers computed from the forecasts.
        summary: The model's 2-3 sentence summary, trimmed to complete sentences.
        forecast: The daily record for that day.
        hourly: Hourly forecasts on that day (empty beyond the 12-hour window).
    """
    facts: DaySummaryFacts
    summary: str
    forecast: DayForecast
    hourly: List[HourlyForecast] = field(default_factory=list)


def generate_travel_risk_report(
    destination: Destination,
    itinerary: Itinerary,
    *,
    config: Optional[AppConfig] = None,
    llm_settings: Optional[LLMSettings] = None,
    api_key: Optional[str] = None,
    include_hourly: Optional[bool] = None,
    fetch_daily: DailyFetcher = fetch_daily_forecast,
    fetch_hourly: HourlyFetcher = fetch_hourly_forecast,
    model_call: ModelCall = generate_model_text,
) -> RiskReportResult:
    """
    Produce a corrected rain-risk report for one itinerary.

    Args:
        destination: Where the trip goes.
        itinerary: Trip dates and id.
        config: App configuration (defaults when omitted).
        llm_settings: Pre-resolved model settings; resolved from config when omitted.
        api_key: AccuWeather key; read from the environment when omitted.
        include_hourly: Override config.include_hourly.
        fetch_daily: Daily forecast fetcher.
        fetch_hourly: Hourly forecast fetcher.
        model_call: Function sending a RiskPrompt to the model and returning raw text.

    Returns:
        A RiskReportResult.

    Raises:
        NetworkError: Forecast or model API failure.
        EmptyForecastError: Trip dates outside the forecast horizon.
        EmptyModelResponseError: Model returned no text.
        MalformedJsonError: Model output is not JSON.
        SchemaValidationError: Model output does not match the schema.
    """
    config = config or AppConfig()
    if itinerary.destination_id != destination.id:
        logger.warning(
            "Itinerary %s targets '%s' but destination '%s' was supplied",
            itinerary.id,
            itinerary.destination_id,
            destination.id,
        )
    logger.info(
        "Generating risk report for %s (%s..%s, itinerary %s)",
        destination.display_name,
        itinerary.start_date,
        itinerary.end_date,
        itinerary.id,
    )

    request = _forecast_request(destination, config, api_key)
    daily = fetch_daily(request)
    trip_days = normalize_daily_forecast(
        daily.raw,
        itinerary.start_date,
        itinerary.end_date,
        horizon_days=daily.horizon_days,
    )
    forecast_dates = {item.date for item in trip_days}
    uncovered = [value for value in itinerary.enumerate_dates() if value not in forecast_dates]
    if uncovered:
        logger.info("No forecast data for trip dates %s; they are left out of the report", ", ".join(uncovered))

    want_hourly = config.include_hourly if include_hourly is None else include_hourly
    hourly = (
        _collect_hourly(request, destination, itinerary.start_date, itinerary.end_date, fetch_hourly)
        if want_hourly
        else []
    )

    prompt = build_rain_risk_prompt(destination, itinerary, trip_days)
    settings = llm_settings or resolve_llm_settings(config)
    raw_text = model_call(prompt, settings)
    logger.debug("Raw model output (%s chars): %s", len(raw_text), raw_text[:2000])

    validated = parse_and_validate_report(raw_text)
    corrected, corrections = correct_report(validated, trip_days)

    kept = []
    for day in corrected.days:
        if day.date in forecast_dates:
            kept.append(day)
        else:
            logger.warning("Dropping model day %s: no forecast for that date in the trip", day.date)
    missing = sorted(forecast_dates - {day.date for day in kept})
    if missing:
        logger.warning("Model report omits forecast days: %s", ", ".join(missing))
    logger.info(
        "Risk report for %s ready: %s days, %s corrections",
        destination.display_name,
        len(kept),
        len(corrections),
    )

    report = TravelRiskReport(
        itinerary_id=itinerary.id,
        generated_at=utc_now_iso(),
        model_version=corrected.model_version,
        timezone=corrected.timezone,
        days=sorted(kept, key=lambda day: day.date),
    )
    return RiskReportResult(forecast_days=trip_days, report=report, hourly=hourly, corrections=corrections)


def refresh_travel_risk_report(
    destination: Destination,
    itinerary: Itinerary,
    **kwargs: Any,
) -> RiskReportResult:
    """Build a fresh report for an itinerary; nothing from earlier runs is reused."""
    logger.info("Refreshing risk report for itinerary %s", itinerary.id)
    return generate_travel_risk_report(destination, itinerary, **kwargs)


def summarize_day(
    destination: Destination,
    day: str,
    *,
    config: Optional[AppConfig] = None,
    llm_settings: Optional[LLMSettings] = None,
    api_key: Optional[str] = None,
    fetch_daily: DailyFetcher = fetch_daily_forecast,
    fetch_hourly: HourlyFetcher = fetch_hourly_forecast,
    chat_call: ChatCall = generate_chat_text,
) -> DaySummaryResult:
    """
    Write a short plain-language forecast summary for one day.

    Hourly data only reaches 12 hours ahead; later days are summarized from the
    daily record alone.

    Raises:
        NetworkError: Forecast or model API failure.
        EmptyForecastError: The day is outside the forecast horizon.
        EmptyModelResponseError: Model returned no text.
    """
    config = config or AppConfig()
    logger.info("Summarizing %s for %s", day, destination.display_name)
    request = _forecast_request(destination, config, api_key)
    daily = fetch_daily(request)
    [forecast] = normalize_daily_forecast(daily.raw, day, day, horizon_days=daily.horizon_days)
    hourly = _collect_hourly(request, destination, day, day, fetch_hourly)

    facts = compute_day_summary_facts(day, destination.display_name, hourly, forecast)
    settings = llm_settings or resolve_llm_settings(config)
    summary = generate_day_summary(facts, settings, chat_call=chat_call)
    return DaySummaryResult(facts=facts, summary=summary, forecast=forecast, hourly=hourly)


def _forecast_request(destination: Destination, config: AppConfig, api_key: Optional[str]) -> ForecastRequest:
    return ForecastRequest(
        location_key=destination.location_key,
        api_key=resolve_api_key(api_key, get_secrets().accuweather_api_key),
        days=config.forecast_days,
        base_url=config.accuweather_base_url,
        timeout_seconds=config.request_timeout_seconds,
    )


def _collect_hourly(
    request: ForecastRequest,
    destination: Destination,
    start: str,
    end: str,
    fetch_hourly: HourlyFetcher,
) -> List[HourlyForecast]:
    """Hourly data is display-only; a failed fetch is logged and yields an empty list."""
    try:
        raw = fetch_hourly(request)
    except NetworkError as exc:
        logger.warning("Hourly forecast unavailable for %s: %s", destination.display_name, exc)
        return []
    hours = build_hourly_forecasts(raw, destination.timezone)
    return [hour for hour in hours if in_range(hour.date, start, end)]
