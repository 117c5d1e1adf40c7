from __future__ import annotations

"""Two-phase document splitting: scan, operator review, commit.

The :class:`SplitService` is a small state machine::

    setup --scan()--> review --commit()/cancel()--> setup

:func:`scan_candidates` proposes split points; the operator may only flip the
boolean flags of a candidate while reviewing; :func:`commit_split` partitions
the documents at the approved points. The candidate list is an immutable
tuple, replaced wholesale on every flag change, and the commit never
re-derives candidates from the documents.

Heading modes (``tag``/``header_text``) cut the raw body on heading elements
of the configured tag. Pattern mode (``text_pattern``) cuts the raw body at
the recorded offsets of a literal pattern.
"""

from collections import defaultdict, deque
from dataclasses import dataclass, replace
from html import escape, unescape
import logging
import re
from typing import Deque, Dict, List, Literal, Optional, Sequence, Set, Tuple

from otzaria_toolkit.core.markup import parse_body, text_of
from otzaria_toolkit.core.models import (
    Document,
    SplitCandidate,
    SplitConfig,
    SplitMethod,
)
from otzaria_toolkit.core.services.heading_analysis_service import (
    find_pattern_matches,
    iter_headings,
    matches_exclusion,
)
from otzaria_toolkit.core.utils import clean_name, heading_level, unique_name

__all__ = [
    "CANDIDATE_FLAGS",
    "SplitReview",
    "SplitResult",
    "SplitService",
    "scan_candidates",
    "commit_split",
]

logger = logging.getLogger(__name__)

SplitState = Literal["setup", "review"]

CANDIDATE_FLAGS = ("should_split", "add_author", "add_book")

_TAG_RE = re.compile(r"<[^>]*>")
_OPEN_HEADING_RE = re.compile(r"<h[1-6][^>]*>", re.IGNORECASE)


@dataclass(frozen=True)
class SplitReview:
    """Review state: the scan configuration and its candidates."""
    config: SplitConfig
    candidates: Tuple[SplitCandidate, ...]

    def approved(self) -> Tuple[SplitCandidate, ...]:
        return tuple(c for c in self.candidates if c.should_split)


@dataclass(frozen=True)
class SplitResult:
    documents: Tuple[Document, ...]
    files_created: int
    files_affected: int


# ---------------------------------------------------------------------------
# Scan
# ---------------------------------------------------------------------------

def scan_candidates(documents: Sequence[Document], config: SplitConfig,
                    context_chars: int = 20) -> Tuple[SplitCandidate, ...]:
    """Return every candidate split point across *documents*."""
    method = SplitMethod(config.method)
    add_author = bool(config.author)
    add_book = bool(config.book_name)
    found: List[SplitCandidate] = []

    if method.is_heading_mode:
        tag = (config.tag or "").strip().lower()
        if heading_level(tag) is None:
            logger.warning("Split scan: %r is not a heading tag", config.tag)
            return ()
        for doc_idx, doc in enumerate(documents):
            body = parse_body(doc.body)
            for el_idx, el in enumerate(iter_headings(body, [tag])):
                text = text_of(el).strip()
                if matches_exclusion(text, config.exclude):
                    continue
                if method is SplitMethod.HEADER_TEXT and config.pattern not in text:
                    continue
                found.append(SplitCandidate(
                    id=f"{doc_idx}-{el_idx}",
                    document_index=doc_idx,
                    original_text=text,
                    should_split=True,
                    add_author=add_author,
                    add_book=add_book,
                ))
        return tuple(found)

    if not config.pattern:
        return ()
    for doc_idx, doc in enumerate(documents):
        for n, match in enumerate(find_pattern_matches(doc.body, config.pattern, context_chars)):
            found.append(SplitCandidate(
                id=f"{doc_idx}-{n}",
                document_index=doc_idx,
                original_text=match.context or f"occurrence {n + 1}",
                should_split=True,
                add_author=add_author,
                add_book=add_book,
                match_start=match.start,
                match_end=match.end,
            ))
    return tuple(found)


# ---------------------------------------------------------------------------
# Commit
# ---------------------------------------------------------------------------

class _Namer:
    """Sanitize and disambiguate output names across one commit."""

    def __init__(self, max_length: int) -> None:
        self._max_length = max_length
        self._taken: Set[str] = set()

    def reserve(self, name: str) -> None:
        self._taken.add(name)

    def __call__(self, proposed: str, index: int) -> str:
        return unique_name(clean_name(proposed, index, self._max_length), self._taken)


def _split_by_headings(doc: Document, doc_idx: int, config: SplitConfig,
                       candidates: Sequence[SplitCandidate], namer: _Namer
                       ) -> List[Document]:
    tag = config.tag.strip().lower()
    splitter = re.compile(rf"(<{re.escape(tag)}[^>]*>.*?</{re.escape(tag)}>)", re.IGNORECASE)
    parts = splitter.split(doc.body)

    # Same-text headings are matched to their candidates in document order.
    queues: Dict[str, Deque[SplitCandidate]] = defaultdict(deque)
    for c in candidates:
        if c.document_index == doc_idx:
            queues[c.original_text].append(c)

    fragments: List[Document] = []
    current = ""
    title = doc.name
    idx = 0

    def emit() -> None:
        content = current.strip()
        if content:
            fragments.append(Document(name=namer(title, idx), body=content))

    for i, part in enumerate(parts):
        if i % 2 == 0:
            current += part
            continue
        text = unescape(_TAG_RE.sub("", part)).strip()
        queue = queues.get(text)
        candidate = queue.popleft() if queue else None
        if candidate is None or not candidate.should_split:
            current += part
            continue

        emit()
        prefix = f"{config.book_name} " if candidate.add_book else ""
        title = prefix + (text or doc.name)
        open_match = _OPEN_HEADING_RE.match(part)
        open_tag = open_match.group(0) if open_match else f"<{tag}>"
        current = f"{open_tag}{escape(prefix + text, quote=False)}</{tag}>"
        if candidate.add_author:
            current += f"\n<p>{escape(config.author, quote=False)}</p>"
        idx += 1

    emit()
    return fragments


def _offsets_hold(body: str, candidate: SplitCandidate, pattern: str) -> bool:
    start, end = candidate.match_start, candidate.match_end
    if start is None or end is None:
        return False
    return body[start:end] == pattern


def _split_by_pattern(doc: Document, doc_idx: int, config: SplitConfig,
                      candidates: Sequence[SplitCandidate], namer: _Namer
                      ) -> Optional[List[Document]]:
    """Return the fragments of *doc*, or None when it has no approved point."""
    approved = [c for c in candidates if c.document_index == doc_idx and c.should_split]
    points = []
    for c in sorted(approved, key=lambda c: c.match_start or 0):
        if _offsets_hold(doc.body, c, config.pattern):
            points.append(c)
        else:
            logger.warning("Split commit: stale candidate %s skipped", c.id)
    if not points:
        return None

    fragments: List[Document] = []
    last = 0
    for n, c in enumerate(points):
        chunk = doc.body[last:c.match_start]
        if chunk.strip() or n > 0:
            fragments.append(Document(name=namer(f"{doc.name}_{n}", n), body=chunk.strip()))
        last = c.match_start or 0
    final = doc.body[last:]
    if final.strip():
        fragments.append(Document(name=namer(f"{doc.name}_last", len(points)), body=final.strip()))
    return fragments


def commit_split(documents: Sequence[Document], config: SplitConfig,
                 candidates: Sequence[SplitCandidate], max_name_length: int = 80) -> SplitResult:
    """Partition *documents* at the approved *candidates*."""
    method = SplitMethod(config.method)
    namer = _Namer(max_name_length)
    out: List[Document] = []
    affected = 0

    if method.is_heading_mode:
        if heading_level(config.tag or "") is None:
            return SplitResult(tuple(documents), 0, 0)
        for doc_idx, doc in enumerate(documents):
            fragments = _split_by_headings(doc, doc_idx, config, candidates, namer)
            if len(fragments) > 1:
                affected += 1
            out.extend(fragments)
    else:
        if not config.pattern:
            return SplitResult(tuple(documents), 0, 0)
        for doc in documents:
            namer.reserve(doc.name)
        for doc_idx, doc in enumerate(documents):
            fragments = _split_by_pattern(doc, doc_idx, config, candidates, namer)
            if fragments is None:
                out.append(doc)
                continue
            affected += 1
            out.extend(fragments)

    return SplitResult(tuple(out), len(out), affected)


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------

class SplitService:
    """Holds the transient review state between a scan and its commit."""

    def __init__(self, context_chars: int = 20, max_name_length: int = 80) -> None:
        self._context_chars = context_chars
        self._max_name_length = max_name_length
        self._review: Optional[SplitReview] = None

    @property
    def state(self) -> SplitState:
        return "review" if self._review is not None else "setup"

    @property
    def review(self) -> Optional[SplitReview]:
        return self._review

    def scan(self, documents: Sequence[Document], config: SplitConfig) -> SplitReview:
        """Scan *documents* and enter review; any previous review is discarded."""
        candidates = scan_candidates(documents, config, self._context_chars)
        self._review = SplitReview(config=config, candidates=candidates)
        logger.info("Split scan: method=%s candidates=%d", SplitMethod(config.method).value, len(candidates))
        return self._review

    def set_flag(self, candidate_id: str, flag: str, value: bool) -> bool:
        """Set one flag of one candidate. Returns False if the id is unknown."""
        review = self._require_review()
        self._check_flag(flag)
        found = False
        updated = []
        for c in review.candidates:
            if c.id == candidate_id:
                c = replace(c, **{flag: bool(value)})
                found = True
            updated.append(c)
        if found:
            self._review = replace(review, candidates=tuple(updated))
        return found

    def set_all(self, flag: str, value: bool) -> int:
        """Set *flag* on every candidate; returns the number of candidates."""
        review = self._require_review()
        self._check_flag(flag)
        self._review = replace(
            review,
            candidates=tuple(replace(c, **{flag: bool(value)}) for c in review.candidates),
        )
        return len(review.candidates)

    def cancel(self) -> None:
        self._review = None

    def commit(self, documents: Sequence[Document]) -> SplitResult:
        """Apply the reviewed candidates to *documents* and return to setup."""
        review = self._require_review()
        logger.info("Split commit: approved=%d of %d",
                    len(review.approved()), len(review.candidates))
        result = commit_split(documents, review.config, review.candidates, self._max_name_length)
        self._review = None
        return result

    # --------------------------------------------------------------- Internals

    def _require_review(self) -> SplitReview:
        if self._review is None:
            raise RuntimeError("No split review in progress; run a scan first.")
        return self._review

    @staticmethod
    def _check_flag(flag: str) -> None:
        if flag not in CANDIDATE_FLAGS:
            raise ValueError(f"Unknown candidate flag '{flag}'; expected one of {CANDIDATE_FLAGS}.")
