from otzaria_toolkit.core.models import Document
from otzaria_toolkit.core.services.hierarchy_service import (
    compute_level_map,
    normalize_hierarchy,
    normalize_skip_levels,
)


def test_compute_level_map_is_dense():
    assert compute_level_map(["h5", "h2", "h4", "h2"]) == {"h2": "h1", "h4": "h2", "h5": "h3"}
    assert compute_level_map(["h2", "h3"], skip=["h2"]) == {"h3": "h1"}
    assert compute_level_map([]) == {}


def test_sparse_levels_renumbered():
    docs = (Document("d", "<h2>a</h2><h4>b</h4><h5>c</h5>"),)
    result = normalize_hierarchy(docs)
    assert result.documents[0].body == "<h1>a</h1><h2>b</h2><h3>c</h3>"
    assert result.files_normalized == 1


def test_normalizing_twice_is_noop():
    once = normalize_hierarchy((Document("d", "<h3>a</h3><h6>b</h6>"),))
    twice = normalize_hierarchy(once.documents)
    assert twice.files_normalized == 0
    assert twice.documents[0] is once.documents[0]


def test_content_and_attributes_preserved():
    docs = (Document("d", '<h3 class="x">a <i>b</i></h3>'),)
    result = normalize_hierarchy(docs)
    assert result.documents[0].body == '<h1 class="x">a <i>b</i></h1>'


def test_skipped_level_left_alone():
    docs = (Document("d", "<h2>a</h2><h4>b</h4>"),)
    result = normalize_hierarchy(docs, skip=["h2"])
    assert result.documents[0].body == "<h2>a</h2><h1>b</h1>"
    assert result.skipped == ("h2",)


def test_each_document_uses_its_own_levels():
    docs = (Document("a", "<h3>x</h3>"), Document("b", "<h1>y</h1><h4>z</h4>"))
    result = normalize_hierarchy(docs)
    assert [d.body for d in result.documents] == ["<h1>x</h1>", "<h1>y</h1><h2>z</h2>"]
    assert result.files_normalized == 2


def test_only_h1_to_h3_can_be_skipped():
    assert normalize_skip_levels(["h5", "H1", "h1", "h3"]) == ("h1", "h3")
    assert normalize_skip_levels(None) == ()
