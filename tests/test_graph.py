import json

import pytest

from canvaschat.services.graph import GraphStore, Node

CANVAS = {
    "nodes": [
        {"id": "n1", "type": "text", "text": "User: hi", "x": 0, "y": 0, "width": 300, "height": 80},
        {"id": "n2", "type": "file", "file": "paper.pdf", "x": 400, "y": 0, "width": 300, "height": 400},
    ],
    "edges": [
        {"id": "e1", "fromNode": "n2", "fromSide": "right", "toNode": "n1", "toSide": "left"},
    ],
}


def test_reload_and_save(tmp_path):
    path = tmp_path / "board.canvas"
    path.write_text(json.dumps(CANVAS), encoding="utf-8")

    store = GraphStore()
    assert store.reload(str(path)) == {"nodes": 2, "edges": 1, "selected": 0}
    assert store.get_node("n2").file == "paper.pdf"
    edge = store.get_edges()[0]
    assert (edge.from_node, edge.from_side, edge.to_node, edge.to_side) == ("n2", "right", "n1", "left")

    store.set_node_text("n1", "User: changed")
    store.save(path)
    doc = json.loads(path.read_text(encoding="utf-8"))
    assert doc["nodes"][0]["text"] == "User: changed"
    assert doc["edges"][0]["fromNode"] == "n2"


def test_reload_rejects_bad_json(tmp_path):
    path = tmp_path / "broken.canvas"
    path.write_text("{nope", encoding="utf-8")
    with pytest.raises(ValueError):
        GraphStore().reload(path)


def test_create_text_node_and_edges_keep_order():
    store = GraphStore()
    store.add_node(Node(id="a", text="A"))
    b = store.create_text_node((10, 20), "B", (100, 50))
    assert (b.x, b.y, b.width, b.height, b.text) == (10, 20, 100, 50, "B")

    store.add_edge("a", b.id)
    store.add_edge(b.id, "a")
    store.add_edge("a", b.id)
    assert [(e.from_node, e.to_node) for e in store.get_edges()] == [("a", b.id), (b.id, "a"), ("a", b.id)]
    with pytest.raises(KeyError):
        store.add_edge("a", "missing")


def test_selection_keeps_order_and_checks_ids():
    store = GraphStore()
    for nid in "xyz":
        store.add_node(Node(id=nid, text=nid))
    store.set_selection(["z", "x", "z"])
    assert [n.id for n in store.get_selection()] == ["z", "x"]
    with pytest.raises(KeyError):
        store.set_selection(["nope"])


def test_set_node_text_is_visible_immediately():
    store = GraphStore()
    store.add_node(Node(id="a", text="old"))
    store.set_node_text("a", "new")
    assert store.get_node("a").text == "new"


def test_in_edges_follow_insertion_order():
    store = GraphStore()
    for nid in "abcd":
        store.add_node(Node(id=nid, text=nid))
    store.add_edge("c", "d")
    store.add_edge("a", "b")
    store.add_edge("b", "d")
    store.add_edge("c", "d")
    store.add_edge("a", "d")
    assert [e.from_node for e in store.in_edges("d")] == ["c", "b", "c", "a"]
    assert store.in_edges("a") == []
    assert store.in_edges("missing") == []
