import pytest

from tripcast.config import AppConfig
from tripcast.errors import ConfigError
from tripcast.llm.settings import DEFAULT_LLM, resolve_llm_settings


@pytest.fixture(autouse=True)
def _clear_llm_env(monkeypatch) -> None:
    for name in ("TRIPCAST_DEFAULT_LLM", "GEMINI_API_KEY", "OPENAI_API_KEY", "OPENROUTER_API_KEY"):
        monkeypatch.delenv(name, raising=False)


def test_defaults_to_gemini(monkeypatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")

    settings = resolve_llm_settings(AppConfig())

    assert settings.model == DEFAULT_LLM
    assert settings.provider == "gemini"
    assert settings.is_google is True
    assert settings.api_key == "gemini-key"
    assert settings.schema_enforcement is True


def test_openrouter_gemini_name_maps_to_direct_gemini(monkeypatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")

    settings = resolve_llm_settings(AppConfig(llm="google/gemini-2.5-flash"))

    assert settings.model == "gemini-2.5-flash"
    assert settings.is_google is True


def test_openrouter_prefix(monkeypatch) -> None:
    monkeypatch.setenv("OPENROUTER_API_KEY", "or-key")

    settings = resolve_llm_settings(AppConfig(llm="or:anthropic/claude-sonnet-4"))

    assert settings.provider == "openrouter"
    assert settings.model == "anthropic/claude-sonnet-4"
    assert settings.base_url == "https://openrouter.ai/api/v1"


def test_openai_models_and_env_default(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "oa-key")
    monkeypatch.setenv("TRIPCAST_DEFAULT_LLM", "o4-mini")

    settings = resolve_llm_settings(AppConfig(schema_enforcement=False, request_timeout_seconds=90))

    assert settings.provider == "openai"
    assert settings.model == "o4-mini"
    assert settings.schema_enforcement is False
    assert settings.timeout_seconds == 90


def test_override_choice_wins(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "oa-key")

    settings = resolve_llm_settings(AppConfig(llm="gemini-2.5-flash"), override_choice="gpt-4o-mini")

    assert settings.model == "gpt-4o-mini"


def test_missing_key_raises_config_error() -> None:
    with pytest.raises(ConfigError, match="GEMINI_API_KEY"):
        resolve_llm_settings(AppConfig())


def test_unknown_model_raises_config_error() -> None:
    with pytest.raises(ConfigError, match="Unknown LLM"):
        resolve_llm_settings(AppConfig(llm="llama-3"))


def test_configured_timeout_is_used_as_is(monkeypatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")

    settings = resolve_llm_settings(AppConfig(request_timeout_seconds=10))

    assert settings.timeout_seconds == 10
