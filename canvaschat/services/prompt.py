from __future__ import annotations
import logging

from canvaschat.errors import LengthExceeded
from canvaschat.services.content import USER_LABEL, clean

log = logging.getLogger("canvas-chat.prompt")

# rough chars-per-token for llama-family tokenizers; no tokenizer is consulted
CHARS_PER_TOKEN = 3.6

CONTEXT_HEADER = "Given the following information:"


def max_characters(max_tokens: int) -> float:
    return max_tokens * CHARS_PER_TOKEN


def build_prompt(user_prompt: str, context_text: str, max_tokens: int) -> str:
    """
    Frame the background context (if any) ahead of the user's question and enforce
    the character budget on the combined result.
    """
    prompt = ""
    if context_text and context_text.strip():
        prompt += f"{CONTEXT_HEADER}\n{context_text}\n\n"
    prompt += clean(user_prompt, USER_LABEL)

    limit = max_characters(max_tokens)
    if len(prompt) > limit:
        raise LengthExceeded(len(prompt), limit)
    log.debug("constructed prompt (%d/%g chars)", len(prompt), limit)
    return prompt
