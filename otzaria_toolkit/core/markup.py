from __future__ import annotations

"""lxml.html helpers for reading and rewriting document bodies.

A document body is a fragment of HTML-like markup (no ``<html>``/``<body>``
wrapper). :func:`parse_body` returns the ``<body>`` element of a parsed
document so that callers can traverse and mutate an owned tree;
:func:`serialize_body` turns it back into fragment markup.

``inner_markup``/``set_inner_markup`` mirror the DOM ``innerHTML`` property
for a single element. Only element/text traversal is relied upon; libxml2's
HTML parser recovers from malformed input instead of raising.
"""

from html import escape
from typing import Iterator, List

import lxml.html
from lxml.html import HtmlElement

__all__ = [
    "parse_body",
    "serialize_body",
    "inner_markup",
    "set_inner_markup",
    "text_of",
    "iter_elements",
    "has_child_elements",
    "remove_element",
]


def parse_body(markup: str) -> HtmlElement:
    """Parse fragment *markup* and return the enclosing ``<body>`` element."""
    doc = lxml.html.document_fromstring(f"<html><body>{markup or ''}</body></html>")
    body = doc.find("body")
    if body is None:
        # libxml2 always creates a body for this wrapper, but keep a usable tree
        body = lxml.html.Element("body")
        doc.append(body)
    return body


def inner_markup(element: HtmlElement) -> str:
    """Return the serialized children of *element* (its ``innerHTML``)."""
    parts: List[str] = [escape(element.text or "", quote=False)]
    for child in element:
        parts.append(lxml.html.tostring(child, encoding="unicode", with_tail=True))
    return "".join(parts)


def serialize_body(body: HtmlElement) -> str:
    """Inverse of :func:`parse_body`."""
    return inner_markup(body)


def set_inner_markup(element: HtmlElement, markup: str) -> None:
    """Replace every child of *element* with the parsed *markup*."""
    for child in list(element):
        element.remove(child)
    fragment = parse_body(markup)
    element.text = fragment.text
    for child in list(fragment):
        element.append(child)


def text_of(element: HtmlElement) -> str:
    """Concatenated text of *element* and its descendants (``textContent``)."""
    return element.text_content()


def iter_elements(root: HtmlElement, *tags: str) -> Iterator[HtmlElement]:
    """Yield descendant elements of *root* in document order.

    Comments and processing instructions are skipped. When *tags* are given
    only elements with those (lower-case) tag names are yielded.
    """
    wanted = {t.lower() for t in tags}
    for el in root.iterdescendants():
        if not isinstance(el.tag, str):
            continue
        if wanted and el.tag.lower() not in wanted:
            continue
        yield el


def has_child_elements(element: HtmlElement) -> bool:
    return any(isinstance(child.tag, str) for child in element)


def remove_element(element: HtmlElement, drop_blank_tail: bool = True) -> None:
    """Detach *element* from its parent, keeping any meaningful tail text.

    A whitespace-only tail (the text node that immediately follows the
    element) is dropped with it when *drop_blank_tail* is set.
    """
    if element.getparent() is None:
        return
    if drop_blank_tail and element.tail is not None and not element.tail.strip():
        element.tail = None
    element.drop_tree()
