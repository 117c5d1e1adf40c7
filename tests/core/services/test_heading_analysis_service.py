from otzaria_toolkit.core.markup import parse_body
from otzaria_toolkit.core.services.heading_analysis_service import (
    find_pattern_matches,
    heading_outline,
    iter_headings,
    iter_leaf_elements,
    locate_heading,
    matches_exclusion,
    parse_exclusions,
)


def test_parse_exclusions_trims_and_lowercases():
    assert parse_exclusions(" Intro , PREFACE,, ") == ["intro", "preface"]
    assert parse_exclusions("") == []
    assert parse_exclusions(" , ") == []


def test_matches_exclusion_is_substring_and_case_insensitive():
    assert matches_exclusion("Hello World", "foo, WORLD") is True
    assert matches_exclusion("Hello World", "planet") is False
    assert matches_exclusion("Hello World", "") is False
    assert matches_exclusion("Hello World", None) is False


def test_iter_headings_document_order_and_tag_filter():
    body = parse_body("<h2>a</h2><div><h3>b</h3></div><h2>c</h2><p>d</p>")
    assert [h.text for h in iter_headings(body)] == ["a", "b", "c"]
    assert [h.text for h in iter_headings(body, ["H2"])] == ["a", "c"]
    assert list(iter_headings(body, ["p"])) == []


def test_iter_leaf_elements_skips_parents_and_blank_text():
    body = parse_body("<div><p>a</p><p> </p><span>b</span></div>")
    assert [el.tag for el in iter_leaf_elements(body)] == ["p", "span"]


def test_find_pattern_matches_is_literal():
    matches = find_pattern_matches("a.b axb", ".")
    assert [(m.start, m.end) for m in matches] == [(1, 2)]


def test_find_pattern_matches_offsets_and_context():
    raw = "x" * 30 + "***" + "y" * 30
    (match,) = find_pattern_matches(raw, "***")
    assert (match.start, match.end) == (30, 33)
    assert match.context == "x" * 20 + "***" + "y" * 17


def test_find_pattern_matches_short_body_context():
    matches = find_pattern_matches("aa*bb*cc", "*")
    assert [m.start for m in matches] == [2, 5]
    assert matches[0].context == "aa*bb*cc"


def test_find_pattern_matches_empty_pattern():
    assert find_pattern_matches("anything", "") == []


def test_heading_outline_levels_and_markup():
    body = parse_body("<h1>T</h1><p>x</p><h2>S <i>i</i></h2><h5>deep</h5>")
    outline = heading_outline(body)
    assert [(e.level, e.text) for e in outline] == [(1, "T"), (2, "S i")]
    assert outline[0].markup == "<h1>T</h1>"


def test_heading_outline_offsets_follow_document_order():
    raw = "<h1>T</h1><p>x</p><h1>T</h1><h2 CLASS=a>S</h2>"
    outline = heading_outline(parse_body(raw), raw=raw)
    assert [e.offset for e in outline] == [0, 18, -1]
    assert [e.offset for e in heading_outline(parse_body(raw))] == [-1, -1, -1]


def test_locate_heading():
    raw = "<p>x</p><h2>S</h2>"
    assert locate_heading(raw, "<h2>S</h2>") == 8
    assert locate_heading(raw, "<h2>S</h2>", 9) == -1
    assert locate_heading(raw, "<h3>S</h3>") == -1
    assert locate_heading(raw, "") == -1
