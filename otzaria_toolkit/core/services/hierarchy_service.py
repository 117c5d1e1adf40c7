from __future__ import annotations

"""Heading hierarchy normalization.

For each document the distinct heading levels actually present (minus the
skipped ones) are sorted and renumbered densely from ``h1``. Headings are
retagged in place, so their content and their attributes are preserved;
rebuilding each heading as a fresh element would drop the attributes, and
keeping them is intended. Running the normalizer on its own output is a
no-op.
"""

from dataclasses import dataclass
import logging
from typing import Dict, FrozenSet, Iterable, List, Sequence, Tuple

from otzaria_toolkit.core.markup import parse_body, serialize_body
from otzaria_toolkit.core.models import HEADING_TAGS, Document
from otzaria_toolkit.core.services.heading_analysis_service import iter_headings
from otzaria_toolkit.core.utils import heading_level

__all__ = [
    "SKIPPABLE_LEVELS",
    "NormalizeResult",
    "normalize_skip_levels",
    "compute_level_map",
    "normalize_hierarchy",
]

logger = logging.getLogger(__name__)

SKIPPABLE_LEVELS: FrozenSet[str] = frozenset({"h1", "h2", "h3"})


@dataclass(frozen=True)
class NormalizeResult:
    documents: Tuple[Document, ...]
    files_normalized: int
    skipped: Tuple[str, ...]


def normalize_skip_levels(skip: Iterable[str] | None) -> Tuple[str, ...]:
    """Return the valid skip levels in ascending order.

    Only h1–h3 may be excluded; anything else is ignored with a warning.
    """
    chosen = []
    for tag in skip or ():
        t = str(tag).strip().lower()
        if t in SKIPPABLE_LEVELS:
            if t not in chosen:
                chosen.append(t)
        else:
            logger.warning("Hierarchy: ignoring non-skippable level %r", tag)
    return tuple(sorted(chosen, key=lambda t: heading_level(t) or 0))


def compute_level_map(present: Iterable[str], skip: Iterable[str] = ()) -> Dict[str, str]:
    """Dense mapping of the present, non-skipped tags: lowest → h1, next → h2…

    >>> compute_level_map(["h5", "h2", "h4"])
    {'h2': 'h1', 'h4': 'h2', 'h5': 'h3'}
    """
    skipped = {s.lower() for s in skip}
    found = sorted(
        {t.lower() for t in present if heading_level(t) is not None and t.lower() not in skipped},
        key=lambda t: heading_level(t) or 0,
    )
    return {tag: f"h{i + 1}" for i, tag in enumerate(found)}


def normalize_hierarchy(documents: Sequence[Document], skip: Iterable[str] | None = None) -> NormalizeResult:
    """Renumber heading levels of every document into a dense hierarchy."""
    skip_levels = normalize_skip_levels(skip)
    normalized = 0
    out: List[Document] = []
    for doc in documents:
        body = parse_body(doc.body)
        headings = list(iter_headings(body, HEADING_TAGS))
        mapping = compute_level_map((h.tag for h in headings), skip_levels)
        changed = False
        for h in headings:
            old = h.tag.lower()
            new = mapping.get(old)
            if new and new != old:
                h.tag = new
                changed = True
        if changed:
            normalized += 1
            out.append(doc.with_body(serialize_body(body)))
        else:
            out.append(doc)
    logger.debug("Hierarchy: files=%d skipped=%s", normalized, ",".join(skip_levels) or "-")
    return NormalizeResult(tuple(out), normalized, skip_levels)
