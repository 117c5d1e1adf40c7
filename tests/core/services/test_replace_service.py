import re

import pytest

from otzaria_toolkit.core.models import Document
from otzaria_toolkit.core.services.replace_service import (
    global_replace,
    replace_in_headings,
    resolve_scope,
)


def _docs(*bodies):
    return tuple(Document(f"d{i}", b) for i, b in enumerate(bodies))


class TestGlobalReplace:

    def test_only_leaf_elements_are_touched(self):
        result = global_replace(_docs('<div title="foo"><p>foo</p></div>'), "foo", "bar")
        assert result.documents[0].body == '<div title="foo"><p>bar</p></div>'
        assert (result.replacements, result.files_affected) == (1, 1)

    def test_find_is_literal(self):
        result = global_replace(_docs("<p>abc a.c</p>"), "a.c", "X")
        assert result.documents[0].body == "<p>abc X</p>"
        assert result.replacements == 1

    def test_replacement_inserted_verbatim(self):
        result = global_replace(_docs("<p>note</p>"), "note", "<b>note</b>")
        assert result.documents[0].body == "<p><b>note</b></p>"

    def test_backreference_syntax_not_expanded(self):
        result = global_replace(_docs("<p>a</p>"), "a", "\\1")
        assert result.documents[0].body == "<p>\\1</p>"

    def test_counts_occurrences_and_files_once(self):
        result = global_replace(_docs("<p>x x</p><p>x</p>", "<p>y</p>"), "x", "z")
        assert result.replacements == 3
        assert result.files_affected == 1
        assert result.documents[1].body == "<p>y</p>"

    def test_empty_find_is_noop(self):
        docs = _docs("<p>a</p>")
        result = global_replace(docs, "", "b")
        assert result.documents == docs
        assert result.replacements == 0


class TestReplaceInHeadings:

    def test_regex_with_template(self):
        docs = _docs("<h2>Chapter 12</h2><p>Chapter 3</p>")
        result = replace_in_headings(docs, "all", r"^Chapter (\d+)", r"Ch. \1")
        assert result.documents[0].body == "<h2>Ch. 12</h2><p>Chapter 3</p>"
        assert result.headings_updated == 1
        assert result.files_affected == 1

    def test_scope_limits_tag(self):
        result = replace_in_headings(_docs("<h2>foo</h2><h3>foo</h3>"), "h3", "foo", "bar")
        assert result.documents[0].body == "<h2>foo</h2><h3>bar</h3>"
        assert result.scope == "h3"

    def test_regex_and_literal_asymmetry(self):
        heading = replace_in_headings(_docs("<h1>ab</h1>"), "all", ".", "x")
        assert heading.documents[0].body == "<h1>xx</h1>"
        plain = global_replace(_docs("<p>ab</p>"), ".", "x")
        assert plain.documents[0].body == "<p>ab</p>"
        assert plain.replacements == 0

    def test_untouched_document_is_same_object(self):
        docs = _docs("<h1>keep</h1>")
        result = replace_in_headings(docs, "all", "zzz", "y")
        assert result.documents[0] is docs[0]
        assert result.files_affected == 0

    def test_invalid_regex_raises(self):
        with pytest.raises(re.error):
            replace_in_headings(_docs("<h1>a</h1>"), "all", "(", "x")

    def test_invalid_scope_raises(self):
        with pytest.raises(ValueError):
            replace_in_headings(_docs("<h1>a</h1>"), "p", "a", "x")


def test_resolve_scope():
    assert resolve_scope("ALL") == ("h1", "h2", "h3", "h4", "h5", "h6")
    assert resolve_scope(" h4 ") == ("h4",)
