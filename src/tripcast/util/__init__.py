"""
Shared utility helpers for units, dates and HTTP error formatting.
"""

from .time import utc_now, utc_now_iso, local_time_label, in_range
from .units import to_celsius, to_millimeters, to_kmh
from .http import format_request_exception

__all__ = [
    "utc_now",
    "utc_now_iso",
    "local_time_label",
    "in_range",
    "to_celsius",
    "to_millimeters",
    "to_kmh",
    "format_request_exception",
]
