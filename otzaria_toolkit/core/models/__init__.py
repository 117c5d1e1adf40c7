from __future__ import annotations

"""Shared data structures used across the Otzaria Toolkit core.

This package exposes dataclasses and value objects used by services and other
core layers. It is intentionally free of UI / I/O code so that the contained
objects can be reused in any context (unit-tests, CLI, GUI, etc.).
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, List, Optional, Tuple

__all__ = [
    "HEADING_TAGS",
    "Document",
    "DocumentStore",
    "SplitMethod",
    "SplitConfig",
    "SplitCandidate",
]

HEADING_TAGS: Tuple[str, ...] = ("h1", "h2", "h3", "h4", "h5", "h6")


@dataclass(frozen=True)
class Document:
    """One loaded document.

    Attributes
    ----------
    name
        Export filename stem (already sanitized when produced by a transform).
    body
        Marked-up text content.
    original_name
        File name the document was loaded from, when known.
    """

    name: str
    body: str
    original_name: Optional[str] = None

    def with_body(self, body: str) -> "Document":
        return replace(self, body=body)


@dataclass
class DocumentStore:
    """Ordered collection of the documents loaded in the current session.

    Identity is positional. Transforms never mutate a :class:`Document`; they
    build a new tuple and hand it to :meth:`replace_all`.
    """

    documents: Tuple[Document, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.documents)

    def __iter__(self):
        return iter(self.documents)

    def __getitem__(self, index: int) -> Document:
        return self.documents[index]

    def is_empty(self) -> bool:
        return not self.documents

    def replace_all(self, documents: Iterable[Document]) -> None:
        self.documents = tuple(documents)

    def names(self) -> List[str]:
        return [doc.name for doc in self.documents]


class SplitMethod(str, Enum):
    """How split points are detected."""

    TAG = "tag"
    HEADER_TEXT = "header_text"
    TEXT_PATTERN = "text_pattern"

    @property
    def is_heading_mode(self) -> bool:
        return self is not SplitMethod.TEXT_PATTERN


@dataclass(frozen=True)
class SplitConfig:
    """Operator settings for one splitting session."""

    method: SplitMethod = SplitMethod.TAG
    tag: str = "h2"
    pattern: str = ""
    book_name: str = ""
    author: str = ""
    exclude: str = ""


@dataclass(frozen=True)
class SplitCandidate:
    """A provisional split point awaiting operator approval.

    ``id`` is ``"<document_index>-<ordinal>"`` and is unique within one scan.
    ``match_start``/``match_end`` are only set for pattern-based splitting and
    are character offsets into the scanned document body.
    """

    id: str
    document_index: int
    original_text: str
    should_split: bool = True
    add_author: bool = False
    add_book: bool = False
    match_start: Optional[int] = None
    match_end: Optional[int] = None
