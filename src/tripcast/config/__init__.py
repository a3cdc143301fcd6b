"""
Configuration helpers for destinations, itineraries and secrets.
"""

from ..errors import ConfigError
from .models import AppConfig, Destination, Itinerary, DEFAULT_DESTINATIONS, get_destination, load_config
from .settings import Secrets, get_secrets

__all__ = [
    "AppConfig",
    "Destination",
    "Itinerary",
    "DEFAULT_DESTINATIONS",
    "ConfigError",
    "get_destination",
    "load_config",
    "Secrets",
    "get_secrets",
]
