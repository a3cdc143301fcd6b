"""
Follow-up questions about one trip day, answered with the day's assessment as context.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from ..forecast import DayForecast
from .client import ChatTurn, generate_chat_text
from .schema import DayRisk
from .settings import LLMSettings

logger = logging.getLogger(__name__)

CHAT_HISTORY_LIMIT = 10
CHAT_TEMPERATURE = 0.7
CHAT_MAX_TOKENS = 1024


@dataclass(frozen=True)
class DayContext:
    """The assessed day a conversation is about."""

    date: str
    destination: str
    risk_level: str
    advice: str
    rationale: str
    forecast: Optional[DayForecast] = None


def build_day_context(destination_name: str, day: DayRisk, forecast: Optional[DayForecast]) -> DayContext:
    return DayContext(
        date=day.date,
        destination=destination_name,
        risk_level=day.risk_level.value,
        advice=day.advice,
        rationale=day.rationale,
        forecast=forecast,
    )


def build_chat_system_prompt(context: DayContext) -> str:
    lines = [
        f"You are a helpful travel weather assistant. The user is asking about their trip to "
        f"{context.destination} on {context.date}.",
        "",
        "Current weather assessment for this date:",
        f"- Risk Level: {context.risk_level}",
        f"- Advice: {context.advice}",
        f"- Rationale: {context.rationale}",
    ]
    forecast = context.forecast
    if forecast is not None:
        lines += [
            "",
            "Weather Forecast:",
            f"- Day precipitation probability: {_or_na(forecast.precip_probability_day)}%",
            f"- Night precipitation probability: {_or_na(forecast.precip_probability_night)}%",
            f"- Temperature: {_or_na(forecast.temp_min_c)}°C to {_or_na(forecast.temp_max_c)}°C",
        ]
    lines += [
        "",
        "Answer the user's questions helpfully and concisely. Focus on practical travel advice "
        "related to weather. If asked about activities, suggest weather-appropriate options. "
        "Keep responses brief and friendly.",
    ]
    return "\n".join(lines)


def send_chat_message(
    message: str,
    context: DayContext,
    history: Sequence[ChatTurn],
    settings: LLMSettings,
    *,
    chat_call: Callable[..., str] = generate_chat_text,
) -> str:
    """
    Answer one user message; only the last CHAT_HISTORY_LIMIT earlier turns are sent.

    The caller owns the history and appends both the question and the answer.
    """
    turns: List[ChatTurn] = list(history)[-CHAT_HISTORY_LIMIT:]
    turns.append(ChatTurn(role="user", content=message))
    logger.debug("Sending chat message for %s with %s earlier turns", context.date, len(turns) - 1)
    answer = chat_call(
        build_chat_system_prompt(context),
        turns,
        settings,
        temperature=CHAT_TEMPERATURE,
        max_tokens=CHAT_MAX_TOKENS,
    )
    return answer.strip()


def _or_na(value: object) -> str:
    return "N/A" if value is None else str(value)
