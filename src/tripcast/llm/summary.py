"""
Per-day plain-language forecast summary.

Facts are computed here from the normalized forecasts; the model only phrases
them. Its answer is trimmed back to the last complete sentence when the output
was cut off.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from ..forecast import DayForecast, HourlyForecast
from .client import ChatTurn, generate_chat_text
from .settings import LLMSettings

logger = logging.getLogger(__name__)

RAIN_WINDOW_THRESHOLD = 30
SUMMARY_TEMPERATURE = 0.7
SUMMARY_MAX_TOKENS = 512

SUMMARY_SYSTEM_INSTRUCTION = (
    "You are a concise weather assistant for travellers. Write brief, practical daily forecast "
    "summaries. Never use emojis, markdown, or bullet points. Focus on temperature, rain timing, "
    "and one actionable tip. Always write complete sentences that end with proper punctuation."
)

SUMMARY_INSTRUCTION = """
Using the forecast facts below, write 2-3 sentences in English. Mention the temperature range and when rain is most likely or heaviest. Add one practical tip for the day. No emojis, no bullet points, no markdown formatting.

Forecast facts:
{facts}
""".strip()

ChatCall = Callable[..., str]


@dataclass(frozen=True)
class DaySummaryFacts:
    """
    Numbers the summary is allowed to talk about.

    Attributes:
        date: Calendar date (YYYY-MM-DD).
        location_name: Destination display name.
        temp_min_c: Minimum temperature; the daily forecast wins over hourly values.
        temp_max_c: Maximum temperature; the daily forecast wins over hourly values.
        peak_precip_time: HH:MM of the first hour with the highest rain chance.
        peak_precip_probability: That hour's probability, None when no hour exceeds 0%.
        rain_window: "HH:MM - HH:MM" spanning hours at or above 30%, or "around HH:MM".
        total_precip_mm: Day plus night liquid total, None when both are zero or unknown.
        condition: Daytime condition text from the provider.
    """
    date: str
    location_name: str
    temp_min_c: Optional[float] = None
    temp_max_c: Optional[float] = None
    peak_precip_time: Optional[str] = None
    peak_precip_probability: Optional[int] = None
    rain_window: Optional[str] = None
    total_precip_mm: Optional[float] = None
    condition: Optional[str] = None

    def to_prompt_facts(self) -> dict:
        """Render the facts as the human-readable strings placed in the prompt."""
        if self.temp_min_c is not None and self.temp_max_c is not None:
            temperature = f"{round(self.temp_min_c)}°C to {round(self.temp_max_c)}°C"
        else:
            temperature = "unavailable"
        return {
            "date": self.date,
            "location": self.location_name,
            "temperatureRange": temperature,
            "peakRainTime": self.peak_precip_time or "none expected",
            "peakRainProbability": f"{self.peak_precip_probability or 0}%",
            "rainWindow": self.rain_window or "no significant rain expected",
            "totalPrecipitation": (
                f"{self.total_precip_mm:.1f} mm" if self.total_precip_mm is not None else "minimal"
            ),
            "condition": self.condition or "fair",
        }


def compute_day_summary_facts(
    date: str,
    location_name: str,
    hourly: Sequence[HourlyForecast],
    day_forecast: Optional[DayForecast] = None,
) -> DaySummaryFacts:
    """
    Derive summary facts for one day.

    Args:
        date: The day being summarized.
        location_name: Destination display name.
        hourly: Hourly forecasts on that day, in time order (may be empty).
        day_forecast: The daily record for that day, when available.
    """
    temps = [hour.temperature_c for hour in hourly if hour.temperature_c is not None]
    temp_min = min(temps) if temps else None
    temp_max = max(temps) if temps else None

    peak_time: Optional[str] = None
    peak_probability: Optional[int] = None
    if hourly:
        peak = max(hourly, key=lambda hour: hour.precip_probability or 0)
        if (peak.precip_probability or 0) > 0:
            peak_time = peak.local_time
            peak_probability = peak.precip_probability

    rainy = [hour for hour in hourly if (hour.precip_probability or 0) >= RAIN_WINDOW_THRESHOLD]
    rain_window: Optional[str] = None
    if len(rainy) >= 2:
        rain_window = f"{rainy[0].local_time} - {rainy[-1].local_time}"
    elif rainy:
        rain_window = f"around {rainy[0].local_time}"

    total: Optional[float] = None
    condition: Optional[str] = None
    if day_forecast is not None:
        if day_forecast.temp_min_c is not None:
            temp_min = day_forecast.temp_min_c
        if day_forecast.temp_max_c is not None:
            temp_max = day_forecast.temp_max_c
        day_mm = day_forecast.precip_amount_mm_day or 0.0
        night_mm = day_forecast.precip_amount_mm_night or 0.0
        if day_mm > 0 or night_mm > 0:
            total = round(day_mm + night_mm, 1)
        condition = day_forecast.icon_phrase_day

    return DaySummaryFacts(
        date=date,
        location_name=location_name,
        temp_min_c=temp_min,
        temp_max_c=temp_max,
        peak_precip_time=peak_time,
        peak_precip_probability=peak_probability,
        rain_window=rain_window,
        total_precip_mm=total,
        condition=condition,
    )


def build_summary_prompt(facts: DaySummaryFacts) -> str:
    return SUMMARY_INSTRUCTION.format(facts=json.dumps(facts.to_prompt_facts(), indent=2, ensure_ascii=False))


def trim_incomplete_sentence(text: str) -> str:
    """
    Cut a truncated answer back to its last sentence end.

    Only applied when that sentence end lies past the middle of the text;
    otherwise the text is returned as is.
    """
    trimmed = (text or "").strip()
    if not trimmed or re.search(r"[.!?]$", trimmed):
        return trimmed
    last_end = max(trimmed.rfind(mark) for mark in ".!?")
    if last_end > len(trimmed) * 0.5:
        return trimmed[: last_end + 1]
    return trimmed


def generate_day_summary(
    facts: DaySummaryFacts,
    settings: LLMSettings,
    *,
    chat_call: ChatCall = generate_chat_text,
) -> str:
    """
    Ask the model for a 2-3 sentence summary of the facts.

    Raises:
        NetworkError: If the model API fails.
        EmptyModelResponseError: If the model returns no text.
    """
    text = chat_call(
        SUMMARY_SYSTEM_INSTRUCTION,
        [ChatTurn(role="user", content=build_summary_prompt(facts))],
        settings,
        temperature=SUMMARY_TEMPERATURE,
        max_tokens=SUMMARY_MAX_TOKENS,
    )
    summary = trim_incomplete_sentence(text)
    if summary != text.strip():
        logger.info("Trimmed incomplete trailing sentence from summary for %s", facts.date)
    return summary
