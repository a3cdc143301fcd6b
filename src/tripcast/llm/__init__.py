"""
Prompt construction, model calls and response validation for rain-risk analysis.
"""

from .schema import DayRisk, RainRange, TravelRiskReport, ValidatedReport, RESPONSE_SCHEMA, MODEL_VERSION
from .prompts import RiskPrompt, build_rain_risk_prompt, build_repair_prompt
from .validation import (
    ValidationErr,
    ValidationOk,
    ValidationResult,
    parse_and_validate_report,
    strip_code_fences,
    validate_report,
)
from .settings import LLMSettings, resolve_llm_settings
from .client import ChatTurn, generate_chat_text, generate_model_text
from .summary import DaySummaryFacts, compute_day_summary_facts, generate_day_summary, trim_incomplete_sentence
from .chat import DayContext, build_day_context, send_chat_message

__all__ = [
    "DayRisk",
    "RainRange",
    "TravelRiskReport",
    "ValidatedReport",
    "RESPONSE_SCHEMA",
    "MODEL_VERSION",
    "RiskPrompt",
    "build_rain_risk_prompt",
    "build_repair_prompt",
    "ValidationErr",
    "ValidationOk",
    "ValidationResult",
    "parse_and_validate_report",
    "strip_code_fences",
    "validate_report",
    "LLMSettings",
    "resolve_llm_settings",
    "ChatTurn",
    "generate_chat_text",
    "generate_model_text",
    "DaySummaryFacts",
    "compute_day_summary_facts",
    "generate_day_summary",
    "trim_incomplete_sentence",
    "DayContext",
    "build_day_context",
    "send_chat_message",
]
