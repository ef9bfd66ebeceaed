from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Collection, Dict, List, Literal

from canvaschat.services.content import Role, classify, clean, message_body, node_content
from canvaschat.services.graph import GraphStore, Node
from canvaschat.services.paths import inbound_walk

log = logging.getLogger("canvas-chat.context")

MessageRole = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class Message:
    role: MessageRole
    content: str

    def as_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class ContextBundle:
    """Conversation turns found upstream of a node, plus the free-text background."""
    conversation_messages: List[Message] = field(default_factory=list)
    context_text: str = ""


def upstream_nodes(
    store: GraphStore,
    start: Node,
    exclude: Collection[Node | str] = (),
) -> List[Node]:
    """Predecessors of `start` (start itself dropped), oldest first."""
    walked = inbound_walk(store, start, exclude)
    return [n for n in walked if n.id != start.id][::-1]


def partition(
    store: GraphStore,
    start: Node,
    exclude: Collection[Node | str] = (),
) -> ContextBundle:
    """
    Split everything upstream of `start` into conversation turns (User/Assistant
    labelled nodes) and joined context text (everything else). An unresolved assistant
    placeholder becomes an empty assistant turn; unreadable nodes are skipped.
    """
    messages: List[Message] = []
    parts: List[str] = []

    for node in upstream_nodes(store, start, exclude):
        content = node_content(node)
        if content is None:
            continue
        role = classify(content)
        if role is Role.USER:
            messages.append(Message("user", message_body(content, role)))
        elif role in (Role.ASSISTANT, Role.ASSISTANT_PLACEHOLDER):
            messages.append(Message("assistant", message_body(content, role)))
        elif role is Role.PLAIN_CONTEXT:
            text = clean(content)
            # empty notes are left out of the joined context
            if text:
                parts.append(text)

    bundle = ContextBundle(conversation_messages=messages, context_text="\n\n".join(parts))
    log.debug("built context for %s: %d messages, %d context chars",
              start.id, len(messages), len(bundle.context_text))
    return bundle
