"""
Exception taxonomy shared by the forecast, model and pipeline layers.
"""

from __future__ import annotations

from typing import List, Optional, Sequence


class TripcastError(RuntimeError):
    """Base class for every error the risk pipeline surfaces to its caller."""


class ConfigError(TripcastError):
    """Raised when configuration files cannot be loaded or validated."""


class NetworkError(TripcastError):
    """
    Raised when an upstream HTTP API does not answer successfully.

    Attributes:
        service: Human label of the upstream ("AccuWeather", "Gemini", ...).
        status_code: HTTP status, or None for transport failures and timeouts.
        body: Response body text as returned by the upstream.
    """

    def __init__(self, service: str, status_code: Optional[int], body: str = "") -> None:
        self.service = service
        self.status_code = status_code
        self.body = body
        status = status_code if status_code is not None else "no response"
        message = f"{service} error {status}"
        if body:
            message = f"{message}: {body}"
        super().__init__(message)


class EmptyForecastError(TripcastError):
    """Raised when the trip dates do not overlap the provider's forecast horizon."""

    def __init__(self, horizon_days: int, start_date: str, end_date: str) -> None:
        self.horizon_days = horizon_days
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"No forecast data available for {start_date} to {end_date}. "
            f"Forecasts are only available for the next {horizon_days} days."
        )


class EmptyModelResponseError(TripcastError):
    """Raised when the generative model returns no usable text."""


class MalformedJsonError(TripcastError):
    """Raised when model output cannot be parsed as JSON after fence stripping."""

    def __init__(self, message: str, raw_text: str = "") -> None:
        self.raw_text = raw_text
        super().__init__(message)


class SchemaValidationError(TripcastError):
    """
    Raised when parsed model output does not match the report schema.

    Attributes:
        violations: One "path: message" entry per violated field.
    """

    def __init__(self, violations: Sequence[str], raw_text: str = "") -> None:
        self.violations: List[str] = list(violations)
        self.raw_text = raw_text
        summary = "; ".join(self.violations) or "unknown violation"
        super().__init__(f"Model output failed schema validation: {summary}")

    @property
    def fields(self) -> List[str]:
        """Dotted paths of the offending fields."""
        return [violation.split(":", 1)[0] for violation in self.violations]


class UnknownDestinationError(TripcastError):
    """Raised when a destination id is not in the configured set."""

    def __init__(self, destination_id: str) -> None:
        self.destination_id = destination_id
        super().__init__(f"Unknown destination: {destination_id}")
