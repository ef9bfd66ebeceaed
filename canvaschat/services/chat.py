from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence

from canvaschat.config import Settings
from canvaschat.errors import (
    AmbiguousPlaceholder,
    ChatError,
    DirectlyConnectedSelection,
    EmptySelection,
    NodeContentUnreadable,
)
from canvaschat.services.content import Role, classify, clean, label, node_content
from canvaschat.services.context import Message, partition, upstream_nodes
from canvaschat.services.conversation import build_messages
from canvaschat.services.graph import GraphStore, Node
from canvaschat.services.llm import CompletionClient
from canvaschat.services.paths import directly_connected, inbound_edges
from canvaschat.services.prompt import build_prompt

log = logging.getLogger("canvas-chat.chat")

CompleteFn = Callable[[Sequence[Message]], Awaitable[str]]

RESPONSE_GAP = 100


@dataclass
class NodeOutcome:
    node_id: str
    ok: bool
    error: Optional[str] = None
    response_node_id: Optional[str] = None
    resolved_placeholders: int = 0


class ChatOrchestrator:
    """
    Drives one chat action over the current canvas selection.

    Each selected node is treated as a user turn: it is labelled, any unresolved
    assistant placeholders upstream of it are answered first, then the node itself is
    answered with a new assistant node placed below it. Nodes are processed one after
    the other; a failure stops only the node it happened on.
    """
    def __init__(
        self,
        store: GraphStore,
        settings: Settings,
        complete: Optional[CompleteFn] = None,
    ) -> None:
        self.store = store
        self.settings = settings
        self.complete: CompleteFn = complete or CompletionClient(settings).complete

    # ---------- public API ----------
    async def handle_chat(self) -> List[NodeOutcome]:
        selection = self.store.get_selection()
        if not selection:
            raise EmptySelection()
        if directly_connected(self.store, selection):
            raise DirectlyConnectedSelection()

        outcomes: List[NodeOutcome] = []
        for node in selection:
            outcome = NodeOutcome(node_id=node.id, ok=False)
            try:
                await self.process_selected_node(node, selection, outcome)
                outcome.ok = True
            except ChatError as e:
                outcome.error = str(e)
                log.warning("chat failed for node %s: %s", node.id, e)
            outcomes.append(outcome)
        return outcomes

    async def process_selected_node(
        self,
        node: Node,
        selection: Sequence[Node],
        outcome: Optional[NodeOutcome] = None,
    ) -> Node:
        """Label, resolve upstream placeholders, answer. Returns the new response node."""
        outcome = outcome or NodeOutcome(node_id=node.id, ok=False)
        node = self.label_user_node(node)

        for upstream in upstream_nodes(self.store, node, selection):
            # placeholders may have been filled in by an earlier iteration
            current = self.store.get_node(upstream.id)
            content = node_content(current)
            if content is not None and classify(content) is Role.ASSISTANT_PLACEHOLDER:
                if await self.resolve_placeholder(current, selection):
                    outcome.resolved_placeholders += 1

        response_node = await self.generate_response(node, selection)
        outcome.response_node_id = response_node.id
        return response_node

    # ---------- steps ----------
    def label_user_node(self, node: Node) -> Node:
        content = node_content(self.store.get_node(node.id))
        if content is None:
            raise NodeContentUnreadable()
        text = label(content, Role.USER, self.settings.user_highlight_color)
        updated = self.store.set_node_text(node.id, text)
        if self.settings.debug:
            log.debug("labelled user node %s", node.id)
        return updated

    async def resolve_placeholder(self, placeholder: Node, selection: Sequence[Node]) -> bool:
        """
        Fill an empty assistant node from its single user predecessor.
        Returns False (leaving it alone) when nothing user-labelled feeds it.
        """
        users: List[Node] = []
        for edge in inbound_edges(self.store, placeholder):
            pred = self.store.get_node(edge.from_node)
            content = node_content(pred)
            if content and classify(content) is Role.USER and pred.id not in {u.id for u in users}:
                users.append(pred)

        if not users:
            return False
        if len(users) > 1:
            raise AmbiguousPlaceholder(placeholder.id)

        user_node = users[0]
        try:
            user_node = self.label_user_node(user_node)
        except NodeContentUnreadable as e:
            raise NodeContentUnreadable("Error reading user's input in user node.") from e

        response = await self._ask(user_node, [*selection, placeholder])
        text = label(clean(response), Role.ASSISTANT, self.settings.assistant_highlight_color)
        self.store.set_node_text(placeholder.id, text)
        if self.settings.debug:
            log.debug("updated assistant placeholder %s with response", placeholder.id)
        return True

    async def generate_response(self, node: Node, selection: Sequence[Node]) -> Node:
        response = await self._ask(node, selection)
        return self.append_response(node, response)

    def append_response(self, node: Node, response: str) -> Node:
        """Create an assistant node directly below `node` and connect the two."""
        text = label(clean(response), Role.ASSISTANT, self.settings.assistant_highlight_color)
        new_node = self.store.create_text_node(
            pos=(node.x, node.y + node.height + RESPONSE_GAP),
            text=text,
            size=(node.width, node.height),
        )
        self.store.add_edge(node.id, new_node.id, from_side="bottom", to_side="top")
        if self.settings.debug:
            log.debug("appended assistant response as node %s below %s", new_node.id, node.id)
        return new_node

    async def _ask(self, user_node: Node, exclude: Sequence[Node]) -> str:
        bundle = partition(self.store, user_node, exclude)
        if self.settings.debug:
            log.debug("context for %s: %s", user_node.id, bundle)
        prompt = build_prompt(user_node.text or "", bundle.context_text, self.settings.max_tokens)
        messages = build_messages(self.settings.system_prompt, bundle, prompt)
        return await self.complete(messages)


async def handle_chat(
    store: GraphStore,
    settings: Settings,
    complete: Optional[CompleteFn] = None,
) -> List[NodeOutcome]:
    return await ChatOrchestrator(store, settings, complete).handle_chat()
