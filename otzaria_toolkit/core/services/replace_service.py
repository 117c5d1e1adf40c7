from __future__ import annotations

"""Text substitution over document bodies.

Two variants with deliberately different matching rules:

- :func:`global_replace` treats the find string literally and only touches
  leaf elements (no child elements, non-blank text). The replacement is
  inserted verbatim, so it may introduce markup of its own.
- :func:`replace_in_headings` takes a regular expression as written
  (Python :mod:`re` syntax) and applies it to the inner markup of every
  heading in scope. The replacement is an ``re`` template (``\\1``,
  ``\\g<name>``).

An empty find string is a no-op for both. Invalid expressions raise
:class:`re.error` before any document is touched.
"""

from dataclasses import dataclass
import logging
import re
from typing import List, Sequence, Tuple

from otzaria_toolkit.core.markup import inner_markup, parse_body, serialize_body, set_inner_markup
from otzaria_toolkit.core.models import HEADING_TAGS, Document
from otzaria_toolkit.core.services.heading_analysis_service import iter_headings, iter_leaf_elements
from otzaria_toolkit.core.utils import escape_literal, heading_level

__all__ = [
    "ALL_HEADINGS",
    "GlobalReplaceResult",
    "HeadingReplaceResult",
    "global_replace",
    "replace_in_headings",
    "resolve_scope",
]

logger = logging.getLogger(__name__)

ALL_HEADINGS = "all"


@dataclass(frozen=True)
class GlobalReplaceResult:
    documents: Tuple[Document, ...]
    replacements: int
    files_affected: int


@dataclass(frozen=True)
class HeadingReplaceResult:
    documents: Tuple[Document, ...]
    headings_updated: int
    files_affected: int
    scope: str


def global_replace(documents: Sequence[Document], find: str, replacement: str) -> GlobalReplaceResult:
    """Replace literal *find* inside leaf elements of every document."""
    if not find:
        return GlobalReplaceResult(tuple(documents), 0, 0)

    regex = re.compile(escape_literal(find))
    total = 0
    files_affected = 0
    out: List[Document] = []
    for doc in documents:
        body = parse_body(doc.body)
        changed = False
        # Collect first: rewriting a leaf must not disturb the traversal.
        for el in list(iter_leaf_elements(body)):
            current = inner_markup(el)
            hits = len(regex.findall(current))
            if not hits:
                continue
            total += hits
            set_inner_markup(el, regex.sub(lambda _m: replacement, current))
            changed = True
        if changed:
            files_affected += 1
            out.append(doc.with_body(serialize_body(body)))
        else:
            out.append(doc)
    logger.debug("Global replace: occurrences=%d files=%d", total, files_affected)
    return GlobalReplaceResult(tuple(out), total, files_affected)


def resolve_scope(scope: str) -> Tuple[str, ...]:
    """Map ``"all"`` or ``"h1"``..``"h6"`` to the heading tags it covers."""
    normalized = (scope or ALL_HEADINGS).strip().lower()
    if normalized == ALL_HEADINGS:
        return HEADING_TAGS
    if heading_level(normalized) is None:
        raise ValueError(f"Unsupported heading scope '{scope}'.")
    return (normalized,)


def replace_in_headings(documents: Sequence[Document], scope: str, find: str,
                        replacement: str) -> HeadingReplaceResult:
    """Apply regex *find* → *replacement* inside every heading in *scope*.

    *replacement* is an :func:`re.sub` template: ``\\1`` and ``\\g<name>`` refer
    to groups, so a literal backslash must be doubled (``C:\\\\dir``). A
    malformed template raises :class:`re.error` before any document changes.
    """
    tags = resolve_scope(scope)
    scope_label = (scope or ALL_HEADINGS).strip().lower()
    if not find:
        return HeadingReplaceResult(tuple(documents), 0, 0, scope_label)

    regex = re.compile(find)
    updated = 0
    files_affected = 0
    out: List[Document] = []
    for doc in documents:
        body = parse_body(doc.body)
        changed = False
        for heading in list(iter_headings(body, tags)):
            current = inner_markup(heading)
            if not regex.search(current):
                continue
            set_inner_markup(heading, regex.sub(replacement, current))
            updated += 1
            changed = True
        if changed:
            files_affected += 1
            out.append(doc.with_body(serialize_body(body)))
        else:
            out.append(doc)
    logger.debug("Heading replace: scope=%s updated=%d files=%d", scope_label, updated, files_affected)
    return HeadingReplaceResult(tuple(out), updated, files_affected, scope_label)
