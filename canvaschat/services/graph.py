# canvaschat/services/graph.py
from __future__ import annotations
import itertools
import json
import pathlib
import threading
import uuid
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

import networkx as nx

Position = Tuple[float, float]
Size = Tuple[float, float]


@dataclass(frozen=True)
class Node:
    id: str
    type: str = "text"
    text: Optional[str] = None
    file: Optional[str] = None
    x: float = 0
    y: float = 0
    width: float = 250
    height: float = 60


@dataclass(frozen=True)
class Edge:
    id: str
    from_node: str
    to_node: str
    from_side: str = "bottom"
    to_side: str = "top"


class GraphStore:
    """
    In-memory canvas: the live node/edge collection the chat engine reads.
      - nodes: str ids, attr {'node': Node}
      - edges: (from, to, edge_id) with attrs {'edge': Edge, 'seq': int}
    The engine never caches what it reads here; every call sees the current graph.
    Safe for concurrent reads; writes are serialized.
    """
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._g: nx.MultiDiGraph = nx.MultiDiGraph()
        self._selection: List[str] = []
        self._seq = itertools.count()

    # ---------- loading / saving ----------
    def reload(self, canvas_path: str | pathlib.Path) -> Dict[str, int]:
        """
        Replace the graph with the contents of a JSON Canvas file. Returns basic stats.
        """
        path = _as_path(canvas_path)
        with path.open("r", encoding="utf-8") as f:
            try:
                doc = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"{path}: invalid JSON: {e}") from e
        self.load_document(doc)
        return self.stats()

    def load_document(self, doc: Dict[str, Any]) -> None:
        nodes = [_node_from_json(obj) for obj in doc.get("nodes") or []]
        edges = [_edge_from_json(obj) for obj in doc.get("edges") or []]
        with self._lock:
            self._g = nx.MultiDiGraph()
            self._selection = []
            self._seq = itertools.count()
            for n in nodes:
                self._g.add_node(n.id, node=n)
            for e in edges:
                self._insert_edge(e)

    def save(self, canvas_path: str | pathlib.Path) -> None:
        path = _as_path(canvas_path)
        path.write_text(json.dumps(self.to_document(), indent="\t"), encoding="utf-8")

    def to_document(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "nodes": [_node_to_json(n) for n in self.nodes()],
                "edges": [_edge_to_json(e) for e in self.get_edges()],
            }

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "nodes": self._g.number_of_nodes(),
                "edges": self._g.number_of_edges(),
                "selected": len(self._selection),
            }

    # ---------- reads ----------
    def nodes(self) -> List[Node]:
        with self._lock:
            return [d["node"] for _n, d in self._g.nodes(data=True)]

    def get_node(self, node_id: str) -> Node:
        with self._lock:
            if node_id not in self._g:
                raise KeyError(f"unknown node: {node_id}")
            return self._g.nodes[node_id]["node"]

    def in_edges(self, node_id: str) -> List[Edge]:
        """Edges pointing at `node_id`, in the order they were added."""
        with self._lock:
            if node_id not in self._g:
                return []
            rows = sorted(self._g.in_edges(node_id, data=True), key=lambda e: e[2]["seq"])
            return [d["edge"] for _u, _v, d in rows]

    def get_edges(self) -> List[Edge]:
        """All edges, in the order they were added."""
        with self._lock:
            rows = sorted(self._g.edges(data=True), key=lambda e: e[2]["seq"])
            return [d["edge"] for _u, _v, d in rows]

    def get_selection(self) -> List[Node]:
        """Selected nodes in selection order."""
        with self._lock:
            return [self.get_node(nid) for nid in self._selection if nid in self._g]

    # ---------- writes ----------
    def set_selection(self, node_ids: Iterable[str]) -> None:
        ids = list(dict.fromkeys(node_ids))
        with self._lock:
            missing = [nid for nid in ids if nid not in self._g]
            if missing:
                raise KeyError(f"unknown node(s): {', '.join(missing)}")
            self._selection = ids

    def add_node(self, node: Node) -> Node:
        with self._lock:
            if node.id in self._g:
                raise ValueError(f"duplicate node id: {node.id}")
            self._g.add_node(node.id, node=node)
        return node

    def create_text_node(self, pos: Position, text: str, size: Size) -> Node:
        x, y = pos
        width, height = size
        node = Node(id=_new_id(), type="text", text=text, x=x, y=y, width=width, height=height)
        return self.add_node(node)

    def set_node_text(self, node_id: str, text: str) -> Node:
        with self._lock:
            node = replace(self.get_node(node_id), text=text)
            self._g.nodes[node_id]["node"] = node
            return node

    def add_edge(
        self,
        from_node: str,
        to_node: str,
        from_side: str = "bottom",
        to_side: str = "top",
    ) -> Edge:
        edge = Edge(id=_new_id(), from_node=from_node, to_node=to_node,
                    from_side=from_side, to_side=to_side)
        with self._lock:
            for nid in (from_node, to_node):
                if nid not in self._g:
                    raise KeyError(f"unknown node: {nid}")
            self._insert_edge(edge)
        return edge

    def _insert_edge(self, edge: Edge) -> None:
        # ensure endpoints exist so dangling edges in hand-edited files still load
        for nid in (edge.from_node, edge.to_node):
            if nid not in self._g:
                self._g.add_node(nid, node=Node(id=nid))
        self._g.add_edge(edge.from_node, edge.to_node, key=edge.id, edge=edge, seq=next(self._seq))


# --------- helpers (pure functions) ----------
def _as_path(p: str | pathlib.Path | None) -> pathlib.Path:
    if p is None:
        raise ValueError("Path is None")
    return pathlib.Path(p).expanduser().resolve()


def _new_id() -> str:
    return uuid.uuid4().hex[:16]


def _node_from_json(obj: Dict[str, Any]) -> Node:
    nid = str(obj.get("id") or "").strip()
    if not nid:
        raise ValueError(f"canvas node without id: {obj!r}")
    return Node(
        id=nid,
        type=obj.get("type") or "text",
        text=obj.get("text"),
        file=obj.get("file"),
        x=obj.get("x", 0),
        y=obj.get("y", 0),
        width=obj.get("width", 250),
        height=obj.get("height", 60),
    )


def _edge_from_json(obj: Dict[str, Any]) -> Edge:
    src = obj.get("fromNode")
    dst = obj.get("toNode")
    if not src or not dst:
        raise ValueError(f"canvas edge without endpoints: {obj!r}")
    return Edge(
        id=str(obj.get("id") or _new_id()),
        from_node=src,
        to_node=dst,
        from_side=obj.get("fromSide", "bottom"),
        to_side=obj.get("toSide", "top"),
    )


def _node_to_json(n: Node) -> Dict[str, Any]:
    out: Dict[str, Any] = {"id": n.id, "type": n.type, "x": n.x, "y": n.y,
                           "width": n.width, "height": n.height}
    if n.text is not None:
        out["text"] = n.text
    if n.file is not None:
        out["file"] = n.file
    return out


def _edge_to_json(e: Edge) -> Dict[str, Any]:
    return {"id": e.id, "fromNode": e.from_node, "fromSide": e.from_side,
            "toNode": e.to_node, "toSide": e.to_side}


# Singleton instance used by the app
graph_store = GraphStore()
