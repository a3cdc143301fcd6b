"""
External forecast API clients used by the risk pipeline.
"""

from .accuweather import (
    ForecastRequest,
    DailyForecastResponse,
    fetch_daily_forecast,
    fetch_hourly_forecast,
    resolve_api_key,
    SUPPORTED_DAILY_HORIZONS,
)

__all__ = [
    "ForecastRequest",
    "DailyForecastResponse",
    "fetch_daily_forecast",
    "fetch_hourly_forecast",
    "resolve_api_key",
    "SUPPORTED_DAILY_HORIZONS",
]
