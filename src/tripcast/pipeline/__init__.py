"""
Risk pipeline orchestration and post-validation correction.
"""

from .correction import Correction, correct_day, correct_report, rewrite_rain_advice
from .executor import (
    DaySummaryResult,
    RiskReportResult,
    generate_travel_risk_report,
    refresh_travel_risk_report,
    summarize_day,
)

__all__ = [
    "Correction",
    "correct_day",
    "correct_report",
    "rewrite_rain_advice",
    "DaySummaryResult",
    "RiskReportResult",
    "generate_travel_risk_report",
    "refresh_travel_risk_report",
    "summarize_day",
]
