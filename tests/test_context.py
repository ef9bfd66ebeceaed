from canvaschat.services.context import Message, partition, upstream_nodes
from canvaschat.services.graph import Node


def test_linear_chain_yields_alternating_messages(make_store):
    store = make_store(
        {"a": "User: what is 2+2?", "b": "Assistant: 4", "c": "User: and 3+3?"},
        [("a", "b"), ("b", "c")],
    )
    c = store.get_node("c")
    bundle = partition(store, c, {c})
    assert bundle.conversation_messages == [
        Message("user", "what is 2+2?"),
        Message("assistant", "4"),
    ]
    assert bundle.context_text == ""


def test_plain_nodes_become_context_in_chronological_order(make_store):
    store = make_store(
        {
            "doc1": "The sky is blue.",
            "doc2": '<mark style="background: x;">Grass</mark> is green.',
            "q": "User: colours?",
        },
        [("doc1", "doc2"), ("doc2", "q")],
    )
    bundle = partition(store, store.get_node("q"))
    assert bundle.conversation_messages == []
    assert bundle.context_text == "The sky is blue.\n\nGrass is green."


def test_markup_is_removed_from_messages(make_store):
    store = make_store(
        {
            "u": '<mark style="background: #FF5582A6;">User:</mark> hi',
            "a": '<mark style="background: #82FF55A6;">Assistant:</mark> hello',
            "q": "User: next",
        },
        [("u", "a"), ("a", "q")],
    )
    msgs = partition(store, store.get_node("q")).conversation_messages
    assert [m.as_dict() for m in msgs] == [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
    ]


def test_placeholder_becomes_empty_assistant_turn_and_unreadable_nodes_are_skipped(make_store):
    store = make_store(
        {
            "pdf": Node(id="pdf", type="file", file="paper.pdf"),
            "ph": "Assistant:",
            "note": "background",
            "q": "User: go",
        },
        [("pdf", "q"), ("ph", "q"), ("note", "q")],
    )
    bundle = partition(store, store.get_node("q"))
    assert bundle.conversation_messages == [Message("assistant", "")]
    assert bundle.context_text == "background"


def test_empty_context_notes_are_left_out(make_store):
    store = make_store(
        {"a": "first", "blank": "  <mark></mark> ", "b": "second", "q": "User: go"},
        [("a", "q"), ("blank", "q"), ("b", "q")],
    )
    assert partition(store, store.get_node("q")).context_text == "second\n\nfirst"


def test_excluded_nodes_are_left_out(make_store):
    store = make_store(
        {"other": "User: selected elsewhere", "note": "fact", "q": "User: go"},
        [("other", "q"), ("note", "q")],
    )
    bundle = partition(store, store.get_node("q"), {"other", "q"})
    assert bundle.conversation_messages == []
    assert bundle.context_text == "fact"


def test_upstream_nodes_drops_start_and_reverses(make_store):
    store = make_store({k: k for k in "abc"}, [("a", "b"), ("b", "c")])
    assert [n.id for n in upstream_nodes(store, store.get_node("c"))] == ["a", "b"]
