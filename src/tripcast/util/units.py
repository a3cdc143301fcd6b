"""
Unit normalization to Celsius, millimeters and km/h.

Every converter is a no-op for values already in the target unit and passes
values with an unrecognized unit tag through unchanged.
"""

from __future__ import annotations

from typing import Any

_FAHRENHEIT_UNITS = {"f", "fahrenheit"}
_CM_UNITS = {"cm", "centimeter", "centimeters"}
_INCH_UNITS = {"in", "inch", "inches"}

_KMH_FACTORS = {
    "km/h": 1.0,
    "kmh": 1.0,
    "kph": 1.0,
    "mi/h": 1.609344,
    "mph": 1.609344,
    "kt": 1.852,
    "kts": 1.852,
    "kn": 1.852,
    "knots": 1.852,
    "m/s": 3.6,
    "mps": 3.6,
    "ms": 3.6,
}


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def to_celsius(value: Any, unit: str | None) -> float | None:
    number = _as_number(value)
    if number is None:
        return None
    unit = (unit or "").strip().lower()
    if unit in _FAHRENHEIT_UNITS:
        return (number - 32.0) * 5.0 / 9.0
    return number


def to_millimeters(value: Any, unit: str | None) -> float | None:
    number = _as_number(value)
    if number is None:
        return None
    unit = (unit or "").strip().lower()
    if unit in _INCH_UNITS:
        return number * 25.4
    if unit in _CM_UNITS:
        return number * 10.0
    return number


def to_kmh(value: Any, unit: str | None) -> float | None:
    number = _as_number(value)
    if number is None:
        return None
    factor = _KMH_FACTORS.get((unit or "").strip().lower())
    if factor is None:
        return number
    return number * factor
