import sys
from pathlib import Path

# Add repo root to sys.path (works locally and in CI)
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import pytest

from canvaschat.config import Settings
from canvaschat.services.graph import GraphStore, Node


class FakeComplete:
    """Stands in for the completion backend; records every conversation it is sent."""
    def __init__(self, replies=None, error=None):
        self.replies = list(replies or [])
        self.error = error
        self.calls = []

    async def __call__(self, messages):
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        if self.replies:
            return self.replies.pop(0)
        return f"reply {len(self.calls)}"


@pytest.fixture
def settings():
    return Settings(
        system_prompt="SYS",
        user_highlight_color="#U",
        assistant_highlight_color="#A",
    )


@pytest.fixture
def fake_complete():
    return FakeComplete()


@pytest.fixture
def make_store():
    """make_store({"a": "text", ...}, [("a", "b"), ...]) -> GraphStore"""
    def _make(nodes, edges=(), selection=()):
        store = GraphStore()
        for i, (nid, text) in enumerate(nodes.items()):
            if isinstance(text, Node):
                store.add_node(text)
            else:
                store.add_node(Node(id=nid, text=text, x=0, y=i * 200, width=300, height=80))
        for src, dst in edges:
            store.add_edge(src, dst)
        if selection:
            store.set_selection(selection)
        return store
    return _make
