"""Package utilities for loading documents and producing the export archive.

These utilities sit at the I/O boundary of the toolkit:
- Reading text files (or whole folders) into :class:`Document` values
- Listing the store as ``(filename, content)`` export entries
- Writing those entries into a dated ZIP archive
"""

from __future__ import annotations

import logging
import zipfile
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from otzaria_toolkit.core.models import Document, DocumentStore
from otzaria_toolkit.core.utils import strip_extension

logger = logging.getLogger(__name__)

__all__ = [
    "iter_input_files",
    "load_documents",
    "export_entries",
    "archive_name",
    "save_zip_archive",
]


def iter_input_files(paths: Iterable[str | Path]) -> List[Path]:
    """Expand *paths* into files; folders are walked recursively in sorted order."""
    files: List[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            files.extend(sorted(p for p in path.rglob("*") if p.is_file()))
        elif path.is_file():
            files.append(path)
        else:
            raise FileNotFoundError(f"Input file not found: {path}")
    return files


def load_documents(paths: Iterable[str | Path], encoding: str = "utf-8") -> List[Document]:
    """Read every input file as one document named after the file stem.

    Raises
    ------
    FileNotFoundError
        If a path does not exist.
    UnicodeDecodeError
        If a file is not valid text in *encoding*.
    """
    documents: List[Document] = []
    for path in iter_input_files(paths):
        content = path.read_text(encoding=encoding)
        documents.append(Document(
            name=strip_extension(path.name),
            body=content,
            original_name=path.name,
        ))
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("I/O: read document path=%s chars=%d", path, len(content))
    return documents


def export_entries(store: DocumentStore | Iterable[Document], extension: str = ".txt"
                   ) -> List[Tuple[str, str]]:
    """Return ``[(name + extension, body), ...]`` in store order."""
    return [(f"{doc.name}{extension}", doc.body) for doc in store]


def archive_name(prefix: str = "Otzaria_Output", on: Optional[date] = None) -> str:
    on = on or date.today()
    return f"{prefix}_{on.isoformat()}.zip"


def save_zip_archive(
    store: DocumentStore | Iterable[Document],
    directory: str | Path,
    *,
    prefix: str = "Otzaria_Output",
    extension: str = ".txt",
    on: Optional[date] = None,
) -> Optional[Path]:
    """Write the export entries of *store* to ``<directory>/<prefix>_<date>.zip``.

    Returns the archive path, or None when there is nothing to export.
    """
    entries = export_entries(store, extension)
    if not entries:
        logger.info("Export noop: no documents loaded")
        return None

    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    target = out_dir / archive_name(prefix, on)
    try:
        with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for filename, content in entries:
                zf.writestr(filename, content.encode("utf-8"))
    except OSError:
        logger.error("I/O FAIL: write archive path=%s", target, exc_info=True)
        raise
    logger.info("Export: wrote %d files to %s", len(entries), target)
    return target
