from __future__ import annotations
import logging
from typing import Any, Dict, Sequence

import httpx

from canvaschat.config import Settings
from canvaschat.errors import CompletionBackendError
from canvaschat.services.context import Message

log = logging.getLogger("canvas-chat.llm")


def build_payload(messages: Sequence[Message], settings: Settings) -> Dict[str, Any]:
    return {
        "model": settings.model,
        "messages": [m.as_dict() for m in messages],
        "options": {
            "num_ctx": settings.max_tokens,
            "num_predict": -1,
            "seed": settings.seed,
            "temperature": settings.temperature,
            "top_k": settings.top_k,
            "top_p": settings.top_p,
            "repeat_penalty": settings.repeat_penalty,
            "presence_penalty": settings.presence_penalty,
            "frequency_penalty": settings.frequency_penalty,
        },
    }


def build_headers(settings: Settings) -> Dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if settings.api_token and settings.api_token.strip():
        headers["Authorization"] = f"Bearer {settings.api_token}"
    return headers


def parse_response(data: Any) -> str:
    if not isinstance(data, dict):
        raise CompletionBackendError(f"Unexpected response from completion backend: {data!r}")
    err = data.get("error")
    if err:
        msg = err.get("message") if isinstance(err, dict) else str(err)
        raise CompletionBackendError(msg or "Completion backend returned an error.")
    try:
        return data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise CompletionBackendError(f"Malformed completion response: missing {e}") from e


class CompletionClient:
    """
    OpenAI-compatible /v1/chat/completions client (vLLM, Ollama, LiteLLM proxy).
    One request per call; no retries.
    """
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.url = f"{settings.api_url.rstrip('/')}/v1/chat/completions"
        self._timeout = httpx.Timeout(settings.timeout_s, connect=5.0)

    async def complete(self, messages: Sequence[Message]) -> str:
        payload = build_payload(messages, self.settings)
        if self.settings.debug:
            log.debug("calling %s with request body: %s", self.url, payload)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                r = await client.post(self.url, json=payload, headers=build_headers(self.settings))
                data = r.json()
        except httpx.HTTPError as e:
            raise CompletionBackendError(f"Completion backend HTTP error: {e}") from e
        except ValueError as e:
            raise CompletionBackendError(f"Completion backend returned non-JSON body: {e}") from e
        if self.settings.debug:
            log.debug("received response: %s", data)
        return parse_response(data)
