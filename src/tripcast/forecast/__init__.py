"""
Forecast normalization: provider payloads to canonical day/hour records.
"""

from .dataset import (
    DayForecast,
    HourlyForecast,
    build_day_forecasts,
    build_hourly_forecasts,
    filter_to_range,
    normalize_daily_forecast,
)

__all__ = [
    "DayForecast",
    "HourlyForecast",
    "build_day_forecasts",
    "build_hourly_forecasts",
    "filter_to_range",
    "normalize_daily_forecast",
]
