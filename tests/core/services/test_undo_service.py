from otzaria_toolkit.core.models import Document, DocumentStore
from otzaria_toolkit.core.services.undo_service import UndoService


def _store(*bodies: str) -> DocumentStore:
    return DocumentStore(tuple(Document(f"d{i}", b) for i, b in enumerate(bodies)))


def test_undo_restores_exact_previous_state():
    store = _store("<h1>a</h1>", "<p>b</p>")
    before = store.documents
    svc = UndoService()
    svc.push_snapshot(store, "merge")
    store.replace_all([Document("other", "x")])
    assert svc.undo(store) is True
    assert store.documents == before


def test_snapshot_unaffected_by_later_edits():
    store = _store("<h1>a</h1>")
    svc = UndoService()
    svc.push_snapshot(store)
    store.replace_all([store[0].with_body("<h1>changed</h1>")])
    svc.undo(store)
    assert store[0].body == "<h1>a</h1>"


def test_undo_on_empty_history_returns_false():
    store = _store("<p>a</p>")
    svc = UndoService()
    assert svc.can_undo() is False
    assert svc.undo(store) is False
    assert store[0].body == "<p>a</p>"


def test_push_enforces_max_history():
    store = _store("v0")
    svc = UndoService(max_history=3)
    for version in range(1, 5):
        svc.push_snapshot(store, f"step{version}")
        store.replace_all([Document("d0", f"v{version}")])

    assert len(svc) == 3
    assert svc.peek_label() == "step4"
    for expected in ("v3", "v2", "v1"):
        assert svc.undo(store) is True
        assert store[0].body == expected
    # Oldest state (v0) was evicted.
    assert svc.undo(store) is False
    assert store[0].body == "v1"


def test_capacity_coerced_to_one():
    svc = UndoService(max_history=0)
    store = _store("a")
    svc.push_snapshot(store, "first")
    svc.push_snapshot(store, "second")
    assert len(svc) == 1
    assert svc.peek_label() == "second"
    svc.undo(store)
    assert svc.can_undo() is False
    assert svc.peek_label() is None
