"""
Helpers to determine which LLM/provider to use based on config.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from ..config import AppConfig
from ..errors import ConfigError

DEFAULT_LLM = "gemini-3-flash-preview"


@dataclass
class LLMSettings:
    """
    Configuration for an LLM provider.

    Attributes:
        model: Model identifier (e.g., "gemini-3-flash-preview").
        api_key: API key for authentication.
        provider: "gemini", "openai", or "openrouter".
        base_url: Optional custom API base URL.
        is_google: True if using the Google Gen AI SDK.
        temperature: Sampling temperature.
        max_tokens: Maximum output tokens.
        schema_enforcement: Send the response schema along with the request.
        timeout_seconds: Deadline for the model call.
    """
    model: str
    api_key: str
    provider: str
    base_url: Optional[str] = None
    is_google: bool = False
    temperature: float = 0.2
    max_tokens: int = 2048
    schema_enforcement: bool = True
    timeout_seconds: float = 60.0


def resolve_llm_settings(config: AppConfig, override_choice: Optional[str] = None) -> LLMSettings:
    """
    Inspect the app config and environment variables to determine which LLM to use.

    Prioritizes `override_choice`, then `config.llm`, then the `TRIPCAST_DEFAULT_LLM`
    env var, and finally defaults to Gemini.

    Raises:
        ConfigError: If the model name is unknown or a required API key is missing.
    """
    base_choice = (
        override_choice
        or config.llm
        or os.environ.get("TRIPCAST_DEFAULT_LLM")
        or DEFAULT_LLM
    )
    choice = base_choice.strip()
    choice_lower = choice.lower()
    common = {
        "schema_enforcement": config.schema_enforcement,
        "timeout_seconds": config.request_timeout_seconds,
    }

    # Accept OpenRouter-style "google/gemini-*" and map it down to "gemini-*".
    if choice_lower.startswith("gemini-") or choice_lower.startswith("google/gemini-"):
        model_name = choice
        if choice_lower.startswith("google/gemini-"):
            model_name = choice.split("/", 1)[1]
        return LLMSettings(
            model=model_name,
            api_key=_require_env("GEMINI_API_KEY"),
            provider="gemini",
            is_google=True,
            **common,
        )

    if choice_lower.startswith("or:"):
        return LLMSettings(
            model=choice[3:],
            api_key=_require_env("OPENROUTER_API_KEY"),
            provider="openrouter",
            base_url="https://openrouter.ai/api/v1",
            **common,
        )

    if choice_lower.startswith("gpt-") or (choice_lower.startswith("o") and len(choice_lower) > 1 and choice_lower[1].isdigit()):
        return LLMSettings(
            model=choice,
            api_key=_require_env("OPENAI_API_KEY"),
            provider="openai",
            **common,
        )

    raise ConfigError(
        f"Unknown LLM '{choice}'. Use gemini-* for Gemini, gpt-*/o* for OpenAI, or prefix OpenRouter models with 'or:'."
    )


def _require_env(name: str) -> str:
    """Fetch an environment variable or raise a descriptive error."""
    value = os.getenv(name)
    if not value:
        raise ConfigError(f"Environment variable {name} is required for the selected LLM.")
    return value
