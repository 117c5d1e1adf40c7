from __future__ import annotations

"""Simple reusable helper functions.

These helpers are side-effect-free and contain no GUI or disk I/O; they can be
used across all layers of the toolkit.
"""

from typing import Optional, Set
import re

__all__ = [
    "FORBIDDEN_NAME_CHARS",
    "clean_name",
    "unique_name",
    "strip_extension",
    "escape_literal",
    "heading_level",
]

FORBIDDEN_NAME_CHARS = '\\/:*?"<>|'

_FORBIDDEN_RE = re.compile(f"[{re.escape(FORBIDDEN_NAME_CHARS)}]")
_EXTENSION_RE = re.compile(r"\.[^/.]+$")
_HEADING_RE = re.compile(r"^h([1-6])$", re.IGNORECASE)


def clean_name(name: Optional[str], index: int, max_length: int = 80) -> str:
    """Return an export-safe filename stem.

    Strips the characters ``\\/:*?"<>|``, truncates to *max_length* and falls
    back to ``file_<index>`` when nothing is left.

    Examples:
        >>> clean_name('con:tent/"bad"', 0)
        'contentbad'
        >>> clean_name("???", 3)
        'file_3'
    """
    cleaned = _FORBIDDEN_RE.sub("", name or "")[:max_length]
    return cleaned or f"file_{index}"


def unique_name(name: str, taken: Set[str]) -> str:
    """Return *name*, or ``name_2``, ``name_3``… if already in *taken*.

    The returned value is added to *taken*.
    """
    candidate = name
    counter = 2
    while candidate in taken:
        candidate = f"{name}_{counter}"
        counter += 1
    taken.add(candidate)
    return candidate


def strip_extension(filename: str) -> str:
    """Drop the final extension: ``"book.txt"`` -> ``"book"``."""
    return _EXTENSION_RE.sub("", filename)


def escape_literal(text: str) -> str:
    """Escape *text* so it matches literally inside a regular expression."""
    return re.escape(text)


def heading_level(tag: str) -> Optional[int]:
    """Return 1..6 for ``h1``..``h6`` (any case), else None."""
    if not isinstance(tag, str):
        return None
    m = _HEADING_RE.match(tag.strip())
    return int(m.group(1)) if m else None
