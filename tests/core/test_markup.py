from otzaria_toolkit.core.markup import (
    has_child_elements,
    inner_markup,
    iter_elements,
    parse_body,
    remove_element,
    serialize_body,
    set_inner_markup,
    text_of,
)


def test_roundtrip_keeps_fragment_markup():
    src = "<h1>T</h1><p>a &amp; b</p>"
    assert serialize_body(parse_body(src)) == src


def test_roundtrip_keeps_leading_text_and_hebrew():
    src = "intro<h1>שלום</h1>"
    body = parse_body(src)
    assert body.text == "intro"
    assert serialize_body(body) == src


def test_empty_body():
    body = parse_body("")
    assert serialize_body(body) == ""


def test_inner_markup_and_text():
    body = parse_body("<p>x<b>y</b>z</p>")
    p = body[0]
    assert inner_markup(p) == "x<b>y</b>z"
    assert text_of(p) == "xyz"
    assert has_child_elements(p) is True
    assert has_child_elements(p[0]) is False


def test_set_inner_markup_replaces_children():
    body = parse_body("<h2><i>old</i> tail</h2>")
    set_inner_markup(body[0], "new <b>bold</b>")
    assert serialize_body(body) == "<h2>new <b>bold</b></h2>"


def test_iter_elements_filters_tags_and_comments():
    body = parse_body("<!-- c --><h1>a</h1><div><h2>b</h2></div>")
    assert [el.tag for el in iter_elements(body)] == ["h1", "div", "h2"]
    assert [el.tag for el in iter_elements(body, "H2")] == ["h2"]


def test_remove_element_drops_blank_tail():
    body = parse_body("<h4>A</h4>\n<h5>X</h5>")
    remove_element(body[0])
    assert serialize_body(body) == "<h5>X</h5>"


def test_remove_element_keeps_meaningful_tail():
    body = parse_body("<h4>A</h4>tail<h5>X</h5>")
    remove_element(body[0])
    assert serialize_body(body) == "tail<h5>X</h5>"
