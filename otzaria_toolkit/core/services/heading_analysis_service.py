from __future__ import annotations

"""Heading analysis helpers for document bodies (UI-agnostic).

This module centralizes the read-only traversal utilities the transforms are
built on: heading enumeration by tag, leaf-element enumeration, the exclusion
predicate, literal pattern matching with display context, and the heading
outline used for navigation.

Functions never mutate their input. Parsed trees handed out by
:func:`iter_headings`/:func:`iter_leaf_elements` belong to the caller.
"""

from dataclasses import dataclass
import re
from typing import Iterable, Iterator, List, Optional, Sequence

import lxml.html
from lxml.html import HtmlElement

from otzaria_toolkit.core.markup import has_child_elements, iter_elements, text_of
from otzaria_toolkit.core.models import HEADING_TAGS
from otzaria_toolkit.core.utils import escape_literal, heading_level

__all__ = [
    "PatternMatch",
    "OutlineEntry",
    "parse_exclusions",
    "matches_exclusion",
    "iter_headings",
    "iter_leaf_elements",
    "find_pattern_matches",
    "heading_outline",
    "locate_heading",
]

OUTLINE_TAGS = ("h1", "h2", "h3", "h4")


@dataclass(frozen=True)
class PatternMatch:
    """One literal occurrence inside a raw body."""
    start: int
    end: int
    context: str


@dataclass(frozen=True)
class OutlineEntry:
    level: int
    text: str
    markup: str
    offset: int = -1


def parse_exclusions(phrases: Optional[str]) -> List[str]:
    """Split a comma-separated phrase list into trimmed, lower-cased phrases."""
    if not phrases or not phrases.strip():
        return []
    return [w.strip().lower() for w in phrases.split(",") if w.strip()]


def matches_exclusion(text: str, phrases: Optional[str]) -> bool:
    """Return True if any phrase of *phrases* occurs in *text* (case-insensitive)."""
    words = parse_exclusions(phrases)
    if not words:
        return False
    haystack = (text or "").lower()
    return any(w in haystack for w in words)


def iter_headings(body: HtmlElement, tags: Iterable[str] = HEADING_TAGS) -> Iterator[HtmlElement]:
    """Yield heading elements of *body* whose tag is in *tags*, in document order."""
    wanted = [t.lower() for t in tags if heading_level(t) is not None]
    if not wanted:
        return iter(())
    return iter_elements(body, *wanted)


def iter_leaf_elements(body: HtmlElement) -> Iterator[HtmlElement]:
    """Yield elements without child elements whose text is not blank."""
    for el in iter_elements(body):
        if has_child_elements(el):
            continue
        if not text_of(el).strip():
            continue
        yield el


def find_pattern_matches(raw: str, pattern: str, context_chars: int = 20) -> List[PatternMatch]:
    """Return every non-overlapping literal occurrence of *pattern* in *raw*.

    The context window runs from ``context_chars`` before the match start to
    ``context_chars`` after it, trimmed of surrounding whitespace.
    """
    if not pattern:
        return []
    regex = re.compile(escape_literal(pattern))
    found: List[PatternMatch] = []
    for m in regex.finditer(raw or ""):
        lo = max(0, m.start() - context_chars)
        hi = min(len(raw), m.start() + context_chars)
        found.append(PatternMatch(m.start(), m.end(), raw[lo:hi].strip()))
    return found


def heading_outline(body: HtmlElement, tags: Sequence[str] = OUTLINE_TAGS,
                    raw: Optional[str] = None) -> List[OutlineEntry]:
    """Return the navigation outline (h1–h4 by default) of a parsed body.

    When the *raw* body text is given, each entry records where its heading
    starts in it. Repeated headings are located in document order.
    """
    outline: List[OutlineEntry] = []
    cursor = 0
    for el in iter_headings(body, tags):
        markup = lxml.html.tostring(el, encoding="unicode", with_tail=False)
        offset = -1
        if raw is not None:
            offset = locate_heading(raw, markup, cursor)
            if offset >= 0:
                cursor = offset + len(markup)
        outline.append(OutlineEntry(heading_level(el.tag) or 0, text_of(el), markup, offset))
    return outline


def locate_heading(raw: str, markup: str, start: int = 0) -> int:
    """Return the offset of *markup* in *raw* at or after *start*, or -1."""
    if not markup:
        return -1
    return (raw or "").find(markup, start)
