from __future__ import annotations

"""Heading merge helper – folds a source heading into the following targets.

This module is UI-agnostic and works on :class:`Document` values only.
It must not perform any file I/O so that it can be reused by CLI, GUI and tests.

Semantics
---------
Elements are visited in document order. A source-tag heading sets the
*pending* text (its trimmed text) and is scheduled for removal. Every
following target-tag heading whose text does not hit the exclusion list gets
``"<pending> "`` prepended to its content. The pending text is kept after a
merge: one source heading feeds every later target until the next source
heading replaces it.

Traversal is read-only; mutations are applied in a second pass.
"""

from dataclasses import dataclass
from html import escape
import logging
from typing import List, Sequence, Tuple

from lxml.html import HtmlElement

from otzaria_toolkit.core.markup import (
    inner_markup,
    iter_elements,
    parse_body,
    remove_element,
    serialize_body,
    set_inner_markup,
    text_of,
)
from otzaria_toolkit.core.models import Document
from otzaria_toolkit.core.services.heading_analysis_service import matches_exclusion

__all__ = ["MergeResult", "merge_headings", "merge_headings_in_body"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeResult:
    documents: Tuple[Document, ...]
    merged: int
    source_tag: str
    target_tag: str


def _plan(body: HtmlElement, source_tag: str, target_tag: str, exclude: str
          ) -> Tuple[List[Tuple[HtmlElement, str]], List[HtmlElement]]:
    """Collect (target, pending text) pairs and the source headings to drop."""
    pending = ""
    merges: List[Tuple[HtmlElement, str]] = []
    sources: List[HtmlElement] = []
    for el in iter_elements(body):
        tag = el.tag.lower()
        if tag == source_tag:
            pending = text_of(el).strip()
            sources.append(el)
        elif tag == target_tag:
            if pending and not matches_exclusion(text_of(el), exclude):
                merges.append((el, pending))
    return merges, sources


def merge_headings_in_body(body_markup: str, source_tag: str, target_tag: str,
                           exclude: str = "") -> Tuple[str, int]:
    """Merge within one body. Returns ``(new_body, merged_count)``.

    A body without any source heading is returned unchanged.
    """
    source_tag = source_tag.lower()
    target_tag = target_tag.lower()
    body = parse_body(body_markup)
    merges, sources = _plan(body, source_tag, target_tag, exclude)
    if not sources:
        return body_markup, 0

    for target, pending in merges:
        set_inner_markup(target, f"{escape(pending, quote=False)} {inner_markup(target)}")
    for el in sources:
        remove_element(el)
    return serialize_body(body), len(merges)


def merge_headings(documents: Sequence[Document], source_tag: str, target_tag: str,
                   exclude: str = "") -> MergeResult:
    """Apply :func:`merge_headings_in_body` to every document."""
    total = 0
    out: List[Document] = []
    for doc in documents:
        new_body, merged = merge_headings_in_body(doc.body, source_tag, target_tag, exclude)
        total += merged
        out.append(doc if new_body == doc.body else doc.with_body(new_body))
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Merge: source=%s target=%s docs=%d merged=%d",
                     source_tag, target_tag, len(out), total)
    return MergeResult(tuple(out), total, source_tag.lower(), target_tag.lower())
