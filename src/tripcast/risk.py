"""
Risk levels and the precipitation-probability bands that define them.

The prompt given to the model and the corrector that overrides it both read
RISK_BANDS, so the thresholds cannot drift apart.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .forecast import DayForecast


class RiskLevel(str, Enum):
    """Daily rain-risk severity, ordered LOW < MEDIUM < HIGH < EXTREME."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    EXTREME = "EXTREME"

    @property
    def severity(self) -> int:
        return _SEVERITY[self.value]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.severity < other.severity

    def __le__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.severity <= other.severity

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.severity > other.severity

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.severity >= other.severity

    def __str__(self) -> str:
        return self.value


_SEVERITY = {"LOW": 0, "MEDIUM": 1, "HIGH": 2, "EXTREME": 3}

# (lower bound in percent, level), highest band first.
RISK_BANDS: Tuple[Tuple[int, RiskLevel], ...] = (
    (80, RiskLevel.EXTREME),
    (50, RiskLevel.HIGH),
    (20, RiskLevel.MEDIUM),
    (0, RiskLevel.LOW),
)


def risk_level_for_probability(probability: float) -> RiskLevel:
    """Map a precipitation probability (percent) onto its risk band."""
    for lower_bound, level in RISK_BANDS:
        if probability >= lower_bound:
            return level
    return RiskLevel.LOW


def max_precip_probability(forecast: "DayForecast") -> int:
    """Larger of the day and night probabilities, treating missing values as 0."""
    return max(forecast.precip_probability_day or 0, forecast.precip_probability_night or 0)


def describe_bands() -> List[str]:
    """
    Human-readable band lines, lowest first (e.g., "LOW: <20%", "MEDIUM: 20-50%").
    """
    ascending = list(reversed(RISK_BANDS))
    lines: List[str] = []
    for index, (lower_bound, level) in enumerate(ascending):
        upper_bound: Optional[int] = ascending[index + 1][0] if index + 1 < len(ascending) else None
        if index == 0:
            lines.append(f"{level.value}: <{upper_bound}%")
        elif upper_bound is None:
            lines.append(f"{level.value}: >{lower_bound}%")
        else:
            lines.append(f"{level.value}: {lower_bound}-{upper_bound}%")
    return lines
