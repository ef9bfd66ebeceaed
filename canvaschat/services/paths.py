from __future__ import annotations
from collections import deque
from typing import Collection, Deque, Iterable, List, Set

from canvaschat.services.graph import Edge, GraphStore, Node


def _ids(nodes: Iterable[Node | str]) -> Set[str]:
    return {n if isinstance(n, str) else n.id for n in nodes}


def inbound_edges(store: GraphStore, node: Node) -> List[Edge]:
    """All edges pointing at `node`, in edge order."""
    return store.in_edges(node.id)


def inbound_walk(
    store: GraphStore,
    start: Node,
    exclude: Collection[Node | str] = (),
) -> List[Node]:
    """
    Breadth-first walk backwards along inbound edges, nearest predecessors first.

    `start` is always the first element, even when it appears in `exclude`; every
    other excluded node is never enqueued. Each node appears at most once, so the
    walk terminates on cyclic graphs. Reverse the result (minus `start`) to get
    chronological order.
    """
    skip = _ids(exclude)
    visited: Set[str] = {start.id}
    queue: Deque[Node] = deque([start])
    ordered: List[Node] = []

    while queue:
        current = queue.popleft()
        ordered.append(current)
        # re-read edges on every step; the canvas may change underneath us
        for edge in store.in_edges(current.id):
            pred = edge.from_node
            if pred in visited or pred in skip:
                continue
            visited.add(pred)
            queue.append(store.get_node(pred))
    return ordered


def directly_connected(store: GraphStore, nodes: Iterable[Node | str]) -> bool:
    """True if any edge joins two members of `nodes`."""
    members = _ids(nodes)
    return any(e.from_node in members and e.to_node in members for e in store.get_edges())
