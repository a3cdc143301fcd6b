"""
Client for the AccuWeather daily and hourly forecast endpoints.

Requests always ask for metric, detailed payloads. Normalization of the returned
JSON lives in `tripcast.forecast.dataset`; this module only moves bytes.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from ..errors import ConfigError, NetworkError
from ..util import format_request_exception

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://dataservice.accuweather.com"
SERVICE_NAME = "AccuWeather"
SUPPORTED_DAILY_HORIZONS = (5, 15)
FALLBACK_HORIZON = 5
HOURLY_HORIZON_HOURS = 12

# Plans without 15-day access answer with these statuses.
_PLAN_RESTRICTED_STATUSES = {401, 403}


@dataclass(frozen=True)
class ForecastRequest:
    """
    Parameters for an AccuWeather forecast request.

    Attributes:
        location_key: AccuWeather location key of the destination.
        api_key: AccuWeather API key.
        days: Daily horizon to request (5 or 15).
        base_url: API base URL.
        timeout_seconds: Deadline for each HTTP call.
    """
    location_key: str
    api_key: str
    days: int = FALLBACK_HORIZON
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 15.0

    def __post_init__(self) -> None:
        if self.days not in SUPPORTED_DAILY_HORIZONS:
            logger.warning(
                "Unsupported daily horizon %s; using %s days.", self.days, FALLBACK_HORIZON
            )
            object.__setattr__(self, "days", FALLBACK_HORIZON)


@dataclass
class DailyForecastResponse:
    """
    Raw daily payload plus the horizon it was actually fetched with.

    Attributes:
        raw: The JSON object returned by AccuWeather ({"DailyForecasts": [...]}).
        horizon_days: Number of days the provider was asked for.
    """
    raw: Dict[str, Any]
    horizon_days: int


def fetch_daily_forecast(request: ForecastRequest) -> DailyForecastResponse:
    """
    Fetch the daily forecast for a location.

    A 15-day request that is refused because of the API plan (401/403) or fails
    outright is retried once as a 5-day request.

    Raises:
        NetworkError: If the (final) request does not succeed.
    """
    if request.days != FALLBACK_HORIZON:
        try:
            raw = _get_json(_daily_url(request, request.days), request)
            _validate_daily(raw)
            return DailyForecastResponse(raw=raw, horizon_days=request.days)
        except NetworkError as exc:
            if exc.status_code in _PLAN_RESTRICTED_STATUSES:
                logger.warning("%s-day forecast not available, falling back to %s-day", request.days, FALLBACK_HORIZON)
            else:
                logger.warning(
                    "%s-day forecast failed (%s); falling back to %s-day", request.days, exc, FALLBACK_HORIZON
                )

    raw = _get_json(_daily_url(request, FALLBACK_HORIZON), request)
    _validate_daily(raw)
    return DailyForecastResponse(raw=raw, horizon_days=FALLBACK_HORIZON)


def fetch_hourly_forecast(request: ForecastRequest) -> List[Dict[str, Any]]:
    """
    Fetch the next 12 hours of hourly forecasts for a location.

    Raises:
        NetworkError: If the request does not succeed.
    """
    url = f"{request.base_url.rstrip('/')}/forecasts/v1/hourly/{HOURLY_HORIZON_HOURS}hour/{request.location_key}"
    raw = _get_json(url, request)
    if not isinstance(raw, list):
        raise NetworkError(SERVICE_NAME, 200, "Hourly forecast response must be a JSON array.")
    return raw


def _daily_url(request: ForecastRequest, days: int) -> str:
    return f"{request.base_url.rstrip('/')}/forecasts/v1/daily/{days}day/{request.location_key}"


def _get_json(url: str, request: ForecastRequest) -> Any:
    """GET a metric/detailed AccuWeather resource and decode it, mapping failures to NetworkError."""
    params = {"apikey": request.api_key, "metric": "true", "details": "true"}
    try:
        response = requests.get(url, params=params, timeout=request.timeout_seconds)
    except requests.Timeout as exc:
        logger.warning("AccuWeather request timed out after %ss (%s)", request.timeout_seconds, url)
        raise NetworkError(
            SERVICE_NAME, None, f"Request timed out after {request.timeout_seconds}s"
        ) from exc
    except requests.RequestException as exc:
        logger.warning("AccuWeather request failed: %s", format_request_exception(exc))
        raise NetworkError(SERVICE_NAME, None, format_request_exception(exc)) from exc

    if not response.ok:
        raise NetworkError(SERVICE_NAME, response.status_code, response.text)

    try:
        data = response.json()
    except (json.JSONDecodeError, ValueError) as exc:
        raise NetworkError(SERVICE_NAME, response.status_code, f"Invalid JSON from AccuWeather: {exc}") from exc
    logger.info("Fetched AccuWeather resource %s", url)
    return data


def _validate_daily(data: Any) -> None:
    """Ensure the daily payload contains the expected structure."""
    if not isinstance(data, dict) or not isinstance(data.get("DailyForecasts"), list):
        raise NetworkError(SERVICE_NAME, 200, "Daily forecast response missing 'DailyForecasts' array.")


def resolve_api_key(explicit: Optional[str], env_value: Optional[str]) -> str:
    """Pick the explicit key over the environment one, failing loudly when neither is set."""
    key = explicit or env_value
    if not key:
        raise ConfigError("Environment variable ACCUWEATHER_API_KEY is required for forecast requests.")
    return key
