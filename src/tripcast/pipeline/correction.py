"""
Deterministic post-validation pass that makes model output agree with the forecast.

Numeric forecast data always wins: every day with a matching forecast gets the
risk level its precipitation probability implies. Advice on days corrected to
LOW is scrubbed of rain wording with a fixed substitution table. The scrub is
best effort and will miss phrasings outside the table.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, TypeVar

from ..forecast import DayForecast
from ..llm.schema import DayRisk
from ..risk import RiskLevel, max_precip_probability, risk_level_for_probability

logger = logging.getLogger(__name__)

_ReportT = TypeVar("_ReportT")

# Ordered: longer phrases before the single words they contain.
ADVICE_SUBSTITUTIONS: Tuple[Tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\b(?:bring|pack|carry|take) an umbrella\b", re.IGNORECASE), "enjoy the clear weather"),
    (re.compile(r"\bexpect (?:some |light |heavy )?rain\b", re.IGNORECASE), "expect dry conditions"),
    (re.compile(r"\brain (?:is )?(?:likely|expected)\b", re.IGNORECASE), "dry weather expected"),
    (re.compile(r"\b(?:rain ?coat|rain jacket|raincoat)s?\b", re.IGNORECASE), "light layer"),
    (re.compile(r"\bwet weather\b", re.IGNORECASE), "clear weather"),
    (re.compile(r"\bshowers?\b", re.IGNORECASE), "clear skies"),
    (re.compile(r"\bumbrellas?\b", re.IGNORECASE), "sunglasses"),
    (re.compile(r"\brainy\b", re.IGNORECASE), "clear"),
    (re.compile(r"\brain\b", re.IGNORECASE), "sunshine"),
    (re.compile(r"\bwet\b", re.IGNORECASE), "dry"),
)

_RAIN_MENTION = re.compile(r"umbrella|rain|wet|shower", re.IGNORECASE)


@dataclass(frozen=True)
class Correction:
    """
    One field rewritten by the corrector.

    Attributes:
        date: Day the correction applies to.
        field: "riskLevel" or "advice".
        before: Value produced by the model.
        after: Value written by the corrector.
    """
    date: str
    field: str
    before: str
    after: str


def rewrite_rain_advice(advice: str) -> str:
    """Replace rain/umbrella/wet/shower phrases with clear-weather equivalents."""
    rewritten = advice
    for pattern, replacement in ADVICE_SUBSTITUTIONS:
        rewritten = pattern.sub(lambda match: _match_case(match.group(0), replacement), rewritten)
    return rewritten


def correct_day(day: DayRisk, forecast: Optional[DayForecast]) -> Tuple[DayRisk, List[Correction]]:
    """
    Correct a single day against its forecast.

    Days without a forecast are returned untouched.
    """
    if forecast is None:
        return day, []

    corrections: List[Correction] = []
    updates: Dict[str, object] = {}
    probability = max_precip_probability(forecast)
    expected = risk_level_for_probability(probability)

    if day.risk_level != expected:
        updates["risk_level"] = expected
        corrections.append(Correction(day.date, "riskLevel", day.risk_level.value, expected.value))

    if expected is RiskLevel.LOW and _RAIN_MENTION.search(day.advice):
        advice = rewrite_rain_advice(day.advice)
        if advice != day.advice:
            updates["advice"] = advice
            corrections.append(Correction(day.date, "advice", day.advice, advice))

    if not updates:
        return day, []
    return day.model_copy(update=updates), corrections


def correct_report(report: _ReportT, forecasts: Sequence[DayForecast]) -> Tuple[_ReportT, List[Correction]]:
    """
    Return a corrected copy of a validated report and the list of rewrites made.

    Only `riskLevel` and `advice` may change; no day is added, removed or reordered.
    Never raises.

    Args:
        report: A ValidatedReport or TravelRiskReport (anything with a `days` list of DayRisk).
        forecasts: The DayForecast records the report was derived from.
    """
    by_date = {item.date: item for item in forecasts}
    days: List[DayRisk] = []
    corrections: List[Correction] = []
    for day in report.days:
        fixed, changes = correct_day(day, by_date.get(day.date))
        days.append(fixed)
        corrections.extend(changes)

    for change in corrections:
        logger.warning(
            "Corrected %s on %s: %r -> %r", change.field, change.date, change.before, change.after
        )
    if not corrections:
        return report, corrections
    return report.model_copy(update={"days": days}), corrections


def _match_case(original: str, replacement: str) -> str:
    if original.isupper() and len(original) > 1:
        return replacement.upper()
    if original[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement
