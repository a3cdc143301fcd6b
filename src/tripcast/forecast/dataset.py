"""
Transform AccuWeather daily/hourly payloads into canonical per-day and per-hour records.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..errors import EmptyForecastError
from ..util import in_range, local_time_label, to_celsius, to_kmh, to_millimeters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DayForecast:
    """
    One calendar day of normalized weather for a destination.

    Attributes:
        date: Calendar date (YYYY-MM-DD), unique within a forecast set.
        precip_probability_day: Daytime precipitation probability (0-100).
        precip_probability_night: Night-time precipitation probability (0-100).
        precip_amount_mm_day: Daytime liquid total in millimeters.
        precip_amount_mm_night: Night-time liquid total in millimeters.
        temp_min_c: Daily minimum in Celsius.
        temp_max_c: Daily maximum in Celsius.
        wind_speed_kmh: Sustained wind in km/h.
        wind_gust_kmh: Gusts in km/h.
        wind_direction: Compass label (e.g., "NW").
        icon_phrase_day: Provider condition text for the day.
        icon_phrase_night: Provider condition text for the night.
    """
    date: str
    precip_probability_day: Optional[int] = None
    precip_probability_night: Optional[int] = None
    precip_amount_mm_day: Optional[float] = None
    precip_amount_mm_night: Optional[float] = None
    temp_min_c: Optional[float] = None
    temp_max_c: Optional[float] = None
    wind_speed_kmh: Optional[float] = None
    wind_gust_kmh: Optional[float] = None
    wind_direction: Optional[str] = None
    icon_phrase_day: Optional[str] = None
    icon_phrase_night: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """camelCase representation matching the report JSON conventions."""
        return {_camel(key): value for key, value in asdict(self).items()}


@dataclass(frozen=True)
class HourlyForecast:
    """
    One hour of normalized weather.

    Attributes:
        date_time: ISO timestamp as reported by the provider.
        local_time: HH:MM in the destination timezone.
        temperature_c: Temperature in Celsius.
        precip_probability: Precipitation probability (0-100).
        icon_phrase: Provider condition text.
    """
    date_time: str
    local_time: str
    temperature_c: Optional[float]
    precip_probability: Optional[int]
    icon_phrase: Optional[str] = None

    @property
    def date(self) -> str:
        return self.date_time[:10]

    def to_dict(self) -> Dict[str, Any]:
        return {_camel(key): value for key, value in asdict(self).items()}


def build_day_forecasts(payload: Mapping[str, Any]) -> List[DayForecast]:
    """
    Convert an AccuWeather daily payload into DayForecast records ordered by date.

    Entries without a parseable date are skipped; when the provider repeats a date
    the first entry wins.

    Args:
        payload: The JSON object returned by the daily endpoint.

    Returns:
        DayForecast records sorted ascending by date.
    """
    by_date: Dict[str, DayForecast] = {}
    for entry in payload.get("DailyForecasts") or []:
        if not isinstance(entry, dict):
            continue
        record = _map_day(entry)
        if record is None:
            continue
        if record.date in by_date:
            logger.debug("Duplicate forecast entry for %s ignored", record.date)
            continue
        by_date[record.date] = record
    return [by_date[key] for key in sorted(by_date)]


def filter_to_range(forecasts: Iterable[DayForecast], start: str, end: str) -> List[DayForecast]:
    """Keep the forecasts with start <= date <= end, ascending by date."""
    return sorted((item for item in forecasts if in_range(item.date, start, end)), key=lambda item: item.date)


def normalize_daily_forecast(
    payload: Mapping[str, Any],
    start: str,
    end: str,
    *,
    horizon_days: int,
) -> List[DayForecast]:
    """
    Build and range-filter daily forecasts for a trip.

    Raises:
        EmptyForecastError: If no forecast day falls inside [start, end].
    """
    all_days = build_day_forecasts(payload)
    trip_days = filter_to_range(all_days, start, end)
    logger.info(
        "Normalized %s forecast days, %s inside trip range %s..%s",
        len(all_days),
        len(trip_days),
        start,
        end,
    )
    if not trip_days:
        raise EmptyForecastError(horizon_days, start, end)
    return trip_days


def build_hourly_forecasts(payload: Iterable[Any], timezone_name: str) -> List[HourlyForecast]:
    """
    Convert an AccuWeather hourly payload into HourlyForecast records.

    Args:
        payload: The JSON array returned by the hourly endpoint.
        timezone_name: Destination timezone for the HH:MM labels.
    """
    hours: List[HourlyForecast] = []
    for entry in payload or []:
        if not isinstance(entry, dict):
            continue
        stamp = entry.get("DateTime")
        if not isinstance(stamp, str):
            continue
        try:
            label = local_time_label(stamp, timezone_name)
        except ValueError:
            logger.debug("Skipping hourly entry with unparseable DateTime %r", stamp)
            continue
        temperature = entry.get("Temperature") or {}
        hours.append(
            HourlyForecast(
                date_time=stamp,
                local_time=label,
                temperature_c=_round(to_celsius(temperature.get("Value"), temperature.get("Unit"))),
                precip_probability=_probability(entry.get("PrecipitationProbability")),
                icon_phrase=entry.get("IconPhrase"),
            )
        )
    return hours


def _map_day(entry: Mapping[str, Any]) -> Optional[DayForecast]:
    raw_date = entry.get("Date")
    if not isinstance(raw_date, str) or len(raw_date) < 10:
        return None
    date = raw_date[:10]

    temperature = entry.get("Temperature") or {}
    day = entry.get("Day") or {}
    night = entry.get("Night") or {}

    temp_min = _measure(temperature.get("Minimum"), to_celsius)
    temp_max = _measure(temperature.get("Maximum"), to_celsius)
    if temp_min is not None and temp_max is not None and temp_min > temp_max:
        temp_min, temp_max = temp_max, temp_min

    return DayForecast(
        date=date,
        precip_probability_day=_half_day_probability(day),
        precip_probability_night=_half_day_probability(night),
        precip_amount_mm_day=_non_negative(_measure(day.get("TotalLiquid"), to_millimeters)),
        precip_amount_mm_night=_non_negative(_measure(night.get("TotalLiquid"), to_millimeters)),
        temp_min_c=temp_min,
        temp_max_c=temp_max,
        wind_speed_kmh=_first_present(
            _measure(_speed(day.get("Wind")), to_kmh),
            _measure(_speed(night.get("Wind")), to_kmh),
        ),
        wind_gust_kmh=_first_present(
            _measure(_speed(day.get("WindGust")), to_kmh),
            _measure(_speed(night.get("WindGust")), to_kmh),
        ),
        wind_direction=_first_present(_direction(day.get("Wind")), _direction(night.get("Wind"))),
        icon_phrase_day=day.get("IconPhrase"),
        icon_phrase_night=night.get("IconPhrase"),
    )


def _half_day_probability(section: Mapping[str, Any]) -> Optional[int]:
    # RainProbability is the rain-specific figure; the generic one covers snow/ice too.
    return _first_present(
        _probability(section.get("RainProbability")),
        _probability(section.get("PrecipitationProbability")),
    )


def _measure(value: Any, convert) -> Optional[float]:
    """Convert an AccuWeather {"Value": x, "Unit": u} block, rounding to 0.1."""
    if not isinstance(value, dict):
        return None
    return _round(convert(value.get("Value"), value.get("Unit")))


def _speed(wind: Any) -> Optional[dict]:
    if not isinstance(wind, dict):
        return None
    speed = wind.get("Speed")
    return speed if isinstance(speed, dict) else None


def _direction(wind: Any) -> Optional[str]:
    if not isinstance(wind, dict):
        return None
    direction = wind.get("Direction")
    if not isinstance(direction, dict):
        return None
    return direction.get("English") or direction.get("Localized") or None


def _probability(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return max(0, min(100, int(round(value))))


def _non_negative(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return max(0.0, value)


def _round(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return round(value, 1)


def _first_present(*values):
    for value in values:
        if value is not None:
            return value
    return None


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)
