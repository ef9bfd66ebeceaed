# canvaschat/config.py
from __future__ import annotations
import os
from typing import Any, Dict

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "CANVAS_CHAT_"


class Settings(BaseModel):
    """
    Immutable configuration for one chat invocation.
    Build a new value (or call load_settings again) to change anything.
    """
    model_config = ConfigDict(frozen=True)

    api_url: str = "http://localhost:11434"
    model: str = "llama3.2"
    system_prompt: str = "You are a helpful assistant."
    max_tokens: int = Field(2048, gt=0)
    api_token: str = ""
    user_highlight_color: str = "#FF5582A6"
    assistant_highlight_color: str = "#82FF55A6"
    debug: bool = False

    # sampling
    temperature: float = Field(0.8, ge=0)
    top_k: int = Field(20, ge=0)
    top_p: float = Field(0.9, ge=0, le=1)
    repeat_penalty: float = Field(1.2, ge=0)
    presence_penalty: float = 1.5
    frequency_penalty: float = 1.0
    seed: int = 42

    # transport only; the engine itself never times out
    timeout_s: float = Field(120.0, gt=0)


def _from_env() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for name in Settings.model_fields:
        raw = os.getenv(ENV_PREFIX + name.upper())
        if raw is not None:
            out[name] = raw  # pydantic coerces "2048" -> 2048, "true" -> True
    return out


def load_settings(**overrides: Any) -> Settings:
    """
    Read .env + CANVAS_CHAT_* environment variables, then apply explicit overrides.
    """
    load_dotenv()
    values = _from_env()
    values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**values)
