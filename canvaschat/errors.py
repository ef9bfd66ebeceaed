from __future__ import annotations


class ChatError(RuntimeError):
    """Base class for every failure surfaced to the user as a one-line message."""


class EmptySelection(ChatError):
    def __init__(self) -> None:
        super().__init__("No node selected.")


class NodeContentUnreadable(ChatError):
    def __init__(self, message: str = "Error reading user's input, make sure to select a textual node.") -> None:
        super().__init__(message)


class DirectlyConnectedSelection(ChatError):
    def __init__(self) -> None:
        super().__init__("Selected nodes are directly connected.")


class AmbiguousPlaceholder(ChatError):
    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__("Assistant node has multiple incoming User nodes.")


class NonAlternatingConversation(ChatError):
    def __init__(self) -> None:
        super().__init__(
            "Conversation history is not in alternating order of user and assistant messages."
        )


class LengthExceeded(ChatError):
    def __init__(self, length: int, limit: float) -> None:
        self.length = length
        self.limit = limit
        super().__init__(
            f"The total length of the prompt exceeds the maximum allowed characters ({limit:g}). "
            "Please reduce the context or the user's question."
        )


class CompletionBackendError(ChatError):
    pass
