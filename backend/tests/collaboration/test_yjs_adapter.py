from collaboration.infrastructure.yjs_adapter import (
    EMPTY_UPDATE,
    apply_update,
    create_doc,
    encode_state_as_update,
    get_text,
    observe_updates,
    restore_doc,
)


def test_create_doc():
    doc = create_doc()
    assert get_text(doc) == ""


def test_create_doc_with_custom_key():
    doc = create_doc("body")
    doc["body"] += "text"
    assert get_text(doc, "body") == "text"


def test_encode_and_restore():
    doc1 = create_doc()
    with doc1.transaction():
        doc1["content"] += "Some text"

    state = encode_state_as_update(doc1)
    assert isinstance(state, bytes)
    assert len(state) > 0

    doc2 = restore_doc(state)
    assert get_text(doc2) == "Some text"


def test_restore_without_state_is_empty():
    assert get_text(restore_doc()) == ""
    assert get_text(restore_doc(b"")) == ""


def test_observe_updates_yields_replayable_deltas():
    doc = create_doc()
    updates = []
    unobserve = observe_updates(doc, updates.append)

    doc["content"] += "Hello"
    doc["content"] += " World"
    unobserve()
    doc["content"] += " ignored"

    assert len(updates) == 2
    assert all(update != EMPTY_UPDATE for update in updates)

    replica = create_doc()
    for update in updates:
        apply_update(replica, update)
    assert get_text(replica) == "Hello World"


def test_one_delta_per_transaction():
    doc = create_doc()
    updates = []
    observe_updates(doc, updates.append)

    with doc.transaction():
        doc["content"] += "a"
        doc["content"] += "b"

    assert len(updates) == 1


def test_concurrent_edits_merge():
    """Two independent docs editing concurrently merge without conflict."""
    doc_a = create_doc()
    doc_b = create_doc()

    with doc_a.transaction():
        doc_a["content"] += "A"
    update_a = encode_state_as_update(doc_a)

    with doc_b.transaction():
        doc_b["content"] += "B"
    update_b = encode_state_as_update(doc_b)

    apply_update(doc_a, update_b)
    apply_update(doc_b, update_a)

    text_a = get_text(doc_a)
    assert text_a == get_text(doc_b)
    assert "A" in text_a
    assert "B" in text_a
