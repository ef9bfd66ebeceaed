from __future__ import annotations
from typing import Iterable, List, Optional

from canvaschat.errors import NonAlternatingConversation
from canvaschat.services.context import ContextBundle, Message


def is_alternating(messages: Iterable[Message]) -> bool:
    """
    System messages are ignored; the rest must open with a user turn and never repeat
    a role twice in a row.
    """
    last: Optional[str] = None
    for m in messages:
        if m.role == "system":
            continue
        if last is None and m.role != "user":
            return False
        if m.role == last:
            return False
        last = m.role
    return True


def build_messages(system_prompt: str, bundle: ContextBundle, prompt: str) -> List[Message]:
    """[system] + upstream turns + the new user prompt, checked for turn order."""
    messages = [
        Message("system", system_prompt),
        *bundle.conversation_messages,
        Message("user", prompt),
    ]
    if not is_alternating(messages):
        raise NonAlternatingConversation()
    return messages
