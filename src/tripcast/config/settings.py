"""
Settings/secret loading helpers.
"""

from __future__ import annotations

import os
from pathlib import Path
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from dotenv import load_dotenv


def _load_dotenv() -> None:
    cwd_env = Path.cwd() / ".env"
    if cwd_env.exists():
        load_dotenv(dotenv_path=cwd_env, override=True)


_load_dotenv()


class Secrets(BaseModel):
    """
    API keys read from the environment once the project .env has been applied.

    Field aliases are the environment variable names; other variables are ignored.
    """
    model_config = ConfigDict(frozen=True)

    accuweather_api_key: Optional[str] = Field(default=None, alias="ACCUWEATHER_API_KEY")
    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    openrouter_api_key: Optional[str] = Field(default=None, alias="OPENROUTER_API_KEY")


@lru_cache(maxsize=1)
def get_secrets() -> Secrets:
    """Snapshot of the API keys, taken on first use."""
    return Secrets.model_validate(dict(os.environ))
