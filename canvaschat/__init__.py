"""Canvas chat: rebuild a model conversation from a graph of canvas nodes."""

__version__ = "0.1.0"
