"""
Wrappers around Google Gemini and OpenAI-compatible APIs.

One request per call: no retries or backoff happen here. Callers decide whether
to try again.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

import httpx
import openai
from openai import OpenAI

from ..errors import EmptyModelResponseError, NetworkError
from .prompts import RiskPrompt
from .settings import LLMSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatTurn:
    """One message of a plain-text conversation; role is "user" or "assistant"."""

    role: str
    content: str


def generate_model_text(prompt: RiskPrompt, settings: LLMSettings) -> str:
    """
    Send instruction + input (+ schema) to the configured model and return its raw text.

    Dispatches to either the Google Gemini client or the generic OpenAI-compatible
    client based on the settings.

    Raises:
        NetworkError: If the API answers with an error status or cannot be reached.
        EmptyModelResponseError: If the response carries no text.
    """
    logger.info("Requesting rain-risk analysis from %s (%s)", settings.model, settings.provider)
    if settings.is_google:
        text = _call_gemini(prompt, settings)
    else:
        text = _call_openai_compatible(prompt, settings)
    if not text:
        raise EmptyModelResponseError(f"{settings.provider} model {settings.model} returned empty content")
    return text


def generate_chat_text(
    system_instruction: str,
    turns: Sequence[ChatTurn],
    settings: LLMSettings,
    *,
    temperature: float = 0.7,
    max_tokens: int = 512,
) -> str:
    """
    Free-text completion used by the day summary and the day chat.

    No response schema or JSON mode is requested.

    Raises:
        NetworkError: If the API answers with an error status or cannot be reached.
        EmptyModelResponseError: If the response carries no text.
    """
    logger.info("Requesting free-text completion from %s (%s)", settings.model, settings.provider)
    if settings.is_google:
        from google.genai import types

        contents = [
            types.Content(
                role="model" if turn.role == "assistant" else "user",
                parts=[types.Part(text=turn.content)],
            )
            for turn in turns
        ]
        config = types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
            system_instruction=system_instruction,
        )
        text = _gemini_generate(settings, contents, config)
    else:
        messages = [{"role": "system", "content": system_instruction}]
        messages.extend({"role": turn.role, "content": turn.content} for turn in turns)
        text = _openai_chat(settings, messages, temperature=temperature, max_tokens=max_tokens)
    if not text:
        raise EmptyModelResponseError(f"{settings.provider} model {settings.model} returned empty content")
    return text


def _call_gemini(prompt: RiskPrompt, settings: LLMSettings) -> str:
    """Invoke the Google Gen AI SDK with the risk prompt and return cleaned text."""
    from google.genai import types

    config = types.GenerateContentConfig(
        temperature=settings.temperature,
        max_output_tokens=settings.max_tokens,
        response_mime_type="application/json",
        response_schema=prompt.response_schema if settings.schema_enforcement else None,
    )
    contents = [
        types.Content(
            role="user",
            parts=[
                types.Part(text=prompt.instruction),
                types.Part(text=json.dumps(prompt.input)),
            ],
        )
    ]
    return _gemini_generate(settings, contents, config)


def _gemini_generate(settings: LLMSettings, contents: List[Any], config: Any) -> str:
    from google import genai
    from google.genai import errors as genai_errors
    from google.genai import types

    client = genai.Client(
        api_key=settings.api_key,
        http_options=types.HttpOptions(timeout=int(settings.timeout_seconds * 1000)),
    )
    try:
        response = client.models.generate_content(
            model=settings.model,
            contents=contents,
            config=config,
        )
    except genai_errors.APIError as exc:
        raise NetworkError("Gemini", getattr(exc, "code", None), str(getattr(exc, "message", None) or exc)) from exc
    except httpx.TimeoutException as exc:
        raise NetworkError("Gemini", None, f"Request timed out after {settings.timeout_seconds}s") from exc
    except httpx.HTTPError as exc:
        raise NetworkError("Gemini", None, f"{type(exc).__name__}: {exc}") from exc

    _log_gemini_usage(settings.model, getattr(response, "usage_metadata", None))
    return _clean_llm_output(_extract_gemini_text(response))


def _extract_gemini_text(response: Any) -> str:
    """Join the text parts of the first candidate, tolerating missing pieces."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        logger.warning(
            "Gemini response had no candidates (prompt_feedback=%s)",
            getattr(response, "prompt_feedback", None),
        )
        return ""
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) if content is not None else None
    return "".join(getattr(part, "text", None) or "" for part in parts or [])


def _call_openai_compatible(prompt: RiskPrompt, settings: LLMSettings) -> str:
    """Call an OpenAI-compatible Chat Completions endpoint with the risk prompt."""
    messages = [
        {"role": "system", "content": prompt.instruction},
        {"role": "user", "content": json.dumps(prompt.input)},
    ]
    extra: Dict[str, Any] = {}
    if settings.schema_enforcement:
        extra["response_format"] = {"type": "json_object"}
    return _openai_chat(
        settings, messages, temperature=settings.temperature, max_tokens=settings.max_tokens, **extra
    )


def _openai_chat(settings: LLMSettings, messages: List[Dict[str, str]], **kwargs: Any) -> str:
    client = OpenAI(api_key=settings.api_key, base_url=settings.base_url, timeout=settings.timeout_seconds)
    service = "OpenRouter" if settings.provider == "openrouter" else "OpenAI"
    try:
        response = client.chat.completions.create(
            model=settings.model,
            messages=messages,
            stream=False,
            **kwargs,
        )
    except openai.APIStatusError as exc:
        raise NetworkError(service, exc.status_code, exc.message) from exc
    except openai.APIConnectionError as exc:
        raise NetworkError(service, None, str(exc)) from exc

    _log_usage(settings.model, getattr(response, "usage", None))
    choice = response.choices[0] if response.choices else None
    raw_text = _coerce_message_content(getattr(getattr(choice, "message", None), "content", None))
    if not raw_text:
        logger.warning(
            "LLM response for model %s contained no usable text (finish_reason=%s).",
            settings.model,
            getattr(choice, "finish_reason", None),
        )
    return _clean_llm_output(raw_text)


def _clean_llm_output(text: str) -> str:
    """
    Strip <think>...</think> blocks some reasoning models emit before the answer.
    """
    if not text:
        return ""
    text = re.sub(r"<think>.*?</think>", "", text, flags=re.DOTALL)
    return text.strip()


def _coerce_message_content(content: Any) -> str:
    """OpenRouter models may answer with a list of content parts instead of a string."""
    if not content:
        return ""
    if isinstance(content, str):
        return content
    texts = [item.get("text") if isinstance(item, dict) else getattr(item, "text", None) for item in content]
    return "\n".join(text for text in texts if text).strip()


def _log_gemini_usage(model_name: str, usage: Any) -> None:
    logger.info(
        "LLM usage – model=%s prompt_tokens=%s completion_tokens=%s total_tokens=%s",
        model_name,
        getattr(usage, "prompt_token_count", "n/a"),
        getattr(usage, "candidates_token_count", "n/a"),
        getattr(usage, "total_token_count", "n/a"),
    )


def _log_usage(model_name: str, usage: Any) -> None:
    details = getattr(usage, "prompt_tokens_details", None)
    logger.info(
        "LLM usage – model=%s prompt_tokens=%s cached_prompt_tokens=%s completion_tokens=%s total_tokens=%s",
        model_name,
        getattr(usage, "prompt_tokens", "n/a"),
        getattr(details, "cached_tokens", 0) or 0,
        getattr(usage, "completion_tokens", "n/a"),
        getattr(usage, "total_tokens", "n/a"),
    )
