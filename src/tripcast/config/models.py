"""
Pydantic models for destinations, itineraries and the optional TOML config file.
"""

from __future__ import annotations

import tomllib
import uuid
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..errors import ConfigError, UnknownDestinationError
from ..util import utc_now

ISO_DATE_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$"


class Destination(BaseModel):
    """
    A travel destination the forecast provider knows about.

    Attributes:
        id: Short identifier used on the command line (e.g., "dubai").
        display_name: Human-readable name (e.g., "Hong Kong").
        country_code: ISO 3166-1 alpha-2 country code.
        timezone: IANA timezone of the destination.
        location_key: AccuWeather location key.
        lat: Latitude.
        lon: Longitude.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    display_name: str
    country_code: str
    timezone: str
    location_key: str
    lat: Optional[float] = None
    lon: Optional[float] = None

    @field_validator("id")
    @classmethod
    def _normalize_id(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError("destination id must not be empty")
        return normalized


DEFAULT_DESTINATIONS: tuple[Destination, ...] = (
    Destination(id="dubai", display_name="Dubai", country_code="AE", timezone="Asia/Dubai",
                location_key="323091", lat=25.2048, lon=55.2708),
    Destination(id="paris", display_name="Paris", country_code="FR", timezone="Europe/Paris",
                location_key="623", lat=48.8566, lon=2.3522),
    Destination(id="tokyo", display_name="Tokyo", country_code="JP", timezone="Asia/Tokyo",
                location_key="226396", lat=35.6762, lon=139.6503),
    Destination(id="hongkong", display_name="Hong Kong", country_code="HK", timezone="Asia/Hong_Kong",
                location_key="1123655", lat=22.3193, lon=114.1694),
    Destination(id="london", display_name="London", country_code="GB", timezone="Europe/London",
                location_key="328328", lat=51.5074, lon=-0.1278),
    Destination(id="newyork", display_name="New York", country_code="US", timezone="America/New_York",
                location_key="349727", lat=40.7128, lon=-74.006),
    Destination(id="losangeles", display_name="Los Angeles", country_code="US", timezone="America/Los_Angeles",
                location_key="347625", lat=34.0522, lon=-118.2437),
    Destination(id="sydney", display_name="Sydney", country_code="AU", timezone="Australia/Sydney",
                location_key="22889", lat=-33.8688, lon=151.2093),
    Destination(id="manila", display_name="Manila", country_code="PH", timezone="Asia/Manila",
                location_key="264885", lat=14.5995, lon=120.9842),
)


def _generate_itinerary_id() -> str:
    return uuid.uuid4().hex


class Itinerary(BaseModel):
    """
    A trip to one destination over an inclusive date range.

    Itineraries are immutable once created. The id is opaque; one is generated
    when the caller does not supply it.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    destination_id: str
    start_date: str = Field(pattern=ISO_DATE_PATTERN)
    end_date: str = Field(pattern=ISO_DATE_PATTERN)
    id: str = Field(default_factory=_generate_itinerary_id)
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("start_date", "end_date")
    @classmethod
    def _real_calendar_date(cls, value: str) -> str:
        try:
            date.fromisoformat(value)
        except ValueError as exc:
            raise ValueError(f"not a calendar date: {value}") from exc
        return value

    @model_validator(mode="after")
    def _ordered_range(self) -> "Itinerary":
        if self.start_date > self.end_date:
            raise ValueError(f"start_date {self.start_date} is after end_date {self.end_date}")
        return self

    def enumerate_dates(self) -> List[str]:
        """Every date of the trip, first to last."""
        current = date.fromisoformat(self.start_date)
        last = date.fromisoformat(self.end_date)
        dates: List[str] = []
        while current <= last:
            dates.append(current.isoformat())
            current += timedelta(days=1)
        return dates


class AppConfig(BaseModel):
    """
    Top-level configuration for the tripcast CLI and pipeline.

    Attributes:
        destinations: Extra or overriding destinations ([[destination]] blocks).
        llm: LLM model identifier (e.g., "gemini-3-flash-preview").
        forecast_days: Provider daily horizon to request, 5 or 15.
        include_hourly: Also fetch the 12-hour hourly forecast for display.
        schema_enforcement: Send the JSON response schema to the model.
        request_timeout_seconds: Deadline applied to every HTTP call.
        accuweather_base_url: Base URL of the forecast provider.
    """
    model_config = ConfigDict(extra="forbid")

    destinations: List[Destination] = Field(default_factory=list)
    llm: Optional[str] = None
    forecast_days: Literal[5, 15] = 5
    include_hourly: bool = True
    schema_enforcement: bool = True
    request_timeout_seconds: float = Field(default=15.0, gt=0)
    accuweather_base_url: str = "https://dataservice.accuweather.com"

    def all_destinations(self) -> List[Destination]:
        """Built-in destinations merged with configured ones (config wins on id clashes)."""
        merged: Dict[str, Destination] = {item.id: item for item in DEFAULT_DESTINATIONS}
        for item in self.destinations:
            merged[item.id] = item
        return list(merged.values())


def get_destination(destination_id: str, config: Optional[AppConfig] = None) -> Destination:
    """
    Resolve a destination id against the configured set.

    Raises:
        UnknownDestinationError: If no destination has that id.
    """
    wanted = (destination_id or "").strip().lower()
    for item in (config or AppConfig()).all_destinations():
        if item.id == wanted:
            return item
    raise UnknownDestinationError(destination_id)


def load_config(path: Path | str) -> AppConfig:
    """
    Load and validate a TOML config file into an AppConfig instance.

    Args:
        path: Path to the TOML configuration file.

    Returns:
        A validated AppConfig object.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open("rb") as handle:
            raw_data: Dict[str, Any] = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Unable to read configuration file: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in configuration file: {exc}") from exc

    raw_data = _normalize_toml_schema(raw_data)

    try:
        return AppConfig.model_validate(raw_data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def _normalize_toml_schema(data: Any) -> Dict[str, Any]:
    """
    Map the singular [[destination]] table array onto the plural model field.
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a TOML table/object.")

    if "destinations" in data:
        raise ConfigError("Use [[destination]] blocks (singular) instead of [[destinations]].")

    normalized = dict(data)
    normalized["destinations"] = _coerce_table_array(normalized.pop("destination", None), "destination")
    return normalized


def _coerce_table_array(value: Any, label: str) -> list[dict]:
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list):
        if not all(isinstance(item, dict) for item in value):
            raise ConfigError(f"Each [[{label}]] entry must be a table/object.")
        return value
    raise ConfigError(f"Invalid [{label}] block; expected a table or array of tables.")
