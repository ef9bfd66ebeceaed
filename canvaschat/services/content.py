from __future__ import annotations
import re
from enum import Enum
from typing import Optional

from canvaschat.services.graph import Node

USER_LABEL = "User:"
ASSISTANT_LABEL = "Assistant:"

_MARK_OPEN = re.compile(r"<mark[^>]*>")
_MARK_CLOSE = re.compile(r"</mark>")

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "bmp", "svg", "webp"}


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    ASSISTANT_PLACEHOLDER = "assistant_placeholder"
    PLAIN_CONTEXT = "context"


def strip_markup(text: str) -> str:
    # repeat until stable: removing one tag can splice the halves of another together
    prev = None
    while prev != text:
        prev = text
        text = _MARK_CLOSE.sub("", _MARK_OPEN.sub("", text))
    return text


def clean(text: str, prefix: str = "") -> str:
    """
    Remove highlight markup, then an optional leading literal prefix, then surrounding
    whitespace. clean(clean(s)) == clean(s).
    """
    out = strip_markup(text).strip()
    if prefix and out.startswith(prefix):
        out = out[len(prefix):].strip()
    return out


def classify(text: str) -> Role:
    cleaned = clean(text)
    if cleaned == ASSISTANT_LABEL:
        return Role.ASSISTANT_PLACEHOLDER
    if cleaned.startswith(USER_LABEL):
        return Role.USER
    if cleaned.startswith(ASSISTANT_LABEL):
        return Role.ASSISTANT
    return Role.PLAIN_CONTEXT


def message_body(text: str, role: Role) -> str:
    """Cleaned text with its role label removed."""
    if role is Role.USER:
        return clean(text, USER_LABEL)
    if role in (Role.ASSISTANT, Role.ASSISTANT_PLACEHOLDER):
        return clean(text, ASSISTANT_LABEL)
    return clean(text)


def label(text: str, role: Role, color: str) -> str:
    """
    Render text with a highlighted role label. Any existing label of the same role is
    replaced, so labeling twice gives the same result as labeling once.
    """
    if role is Role.USER:
        tag = USER_LABEL
    elif role in (Role.ASSISTANT, Role.ASSISTANT_PLACEHOLDER):
        tag = ASSISTANT_LABEL
    else:
        raise ValueError(f"cannot label {role.value} text")
    body = clean(text, tag)
    return f'<mark style="background: {color};">{tag}</mark> {body}'


def node_type(node: Node) -> str:
    if not node.file:
        return "text"
    ext = node.file.rsplit(".", 1)[-1].lower()
    if ext == "pdf":
        return "pdf"
    if ext in IMAGE_EXTENSIONS:
        return "image"
    return "text"


def node_content(node: Node) -> Optional[str]:
    """Text of a text-bearing node; None for pdf/image nodes or nodes without text."""
    if node_type(node) != "text":
        return None
    return node.text
