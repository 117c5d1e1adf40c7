from __future__ import annotations

"""Service layer for structural transforms on the loaded document batch.

This module provides a UI-agnostic, testable façade that owns the session
state (document store, undo history, operator log, split review) and runs
every transform against it.

Scope and guarantees:
- Operates purely in-memory on a DocumentStore; the only I/O helpers are the
  explicit ``load_paths``/``save_archive`` boundary calls.
- Conservative behavior: invalid or empty requests return
  OperationResult(success=False, ...) with clear messaging, never raise.
- Atomic transforms: the new document tuple is built first; the pre-state is
  pushed to history and the store replaced only if the build succeeded.
- Every mutating operation writes one line to the operator log.

Examples
--------
Basic usage:

    service = StructureEditingService()
    service.load_documents([Document("book", "<h4>A</h4><h5>X</h5>")])
    result = service.merge_headings("h4", "h5")
    if not result.success:
        print(result.message)
    service.undo()

"""

from dataclasses import dataclass
from datetime import date
import logging
import re
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from otzaria_toolkit.config import ConfigManager
from otzaria_toolkit.core import package_utils
from otzaria_toolkit.core.markup import parse_body
from otzaria_toolkit.core.merge import merge_headings
from otzaria_toolkit.core.models import Document, DocumentStore, SplitConfig, SplitMethod
from otzaria_toolkit.core.models.session_log import LogEntry, SessionLog
from otzaria_toolkit.core.services.enhancement_service import EnhancementError, EnhancementService
from otzaria_toolkit.core.services.heading_analysis_service import OutlineEntry, heading_outline
from otzaria_toolkit.core.services.hierarchy_service import normalize_hierarchy
from otzaria_toolkit.core.services.replace_service import global_replace, replace_in_headings
from otzaria_toolkit.core.services.split_service import SplitReview, SplitService
from otzaria_toolkit.core.services.undo_service import UndoService
from otzaria_toolkit.core.utils import clean_name


__all__ = ["OperationResult", "StructureEditingService"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationResult:
    """Result of a session operation.

    Attributes
    ----------
    success
        Whether the operation completed and changed (or could change) state.
    message
        Human-readable summary suitable for logs or UI display.
    details
        Optional structured details (counts) for diagnostics or caller logic.
    """
    success: bool
    message: str
    details: Optional[Dict[str, Any]] = None


class StructureEditingService:
    """Owns one editing session and exposes every transform on it.

    Parameters
    ----------
    store
        Document store to operate on; a fresh one by default.
    undo_service, session_log, split_service, enhancement_service
        Collaborators; built from :class:`ConfigManager` settings when omitted.
    """

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        undo_service: Optional[UndoService] = None,
        session_log: Optional[SessionLog] = None,
        split_service: Optional[SplitService] = None,
        enhancement_service: Optional[EnhancementService] = None,
    ) -> None:
        needs_config = None in (undo_service, session_log, split_service)
        config = ConfigManager() if needs_config else None

        def setting(section: str, key: str, default: Any) -> Any:
            return config.get_value(section, key, default) if config is not None else default

        self._max_name_length = int(setting("naming", "max_length", 80))
        self._store = store if store is not None else DocumentStore()
        if undo_service is None:
            undo_service = UndoService(max_history=setting("history", "capacity", 20))
        if session_log is None:
            session_log = SessionLog(capacity=setting("session_log", "capacity", 50))
        self._undo = undo_service
        self._log = session_log
        self._split = split_service if split_service is not None else SplitService(
            context_chars=int(setting("split", "context_chars", 20)),
            max_name_length=self._max_name_length,
        )
        self._enhancer = enhancement_service

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------

    @property
    def store(self) -> DocumentStore:
        return self._store

    @property
    def documents(self) -> Tuple[Document, ...]:
        return self._store.documents

    @property
    def split_state(self) -> str:
        return self._split.state

    @property
    def split_review(self) -> Optional[SplitReview]:
        return self._split.review

    def log_entries(self) -> List[LogEntry]:
        return self._log.entries()

    def can_undo(self) -> bool:
        return self._undo.can_undo()

    # -------------------------------------------------------------------------
    # Store management
    # -------------------------------------------------------------------------

    def load_documents(self, documents: Iterable[Document]) -> OperationResult:
        """Append *documents* to the store (ingestion is additive)."""
        incoming = tuple(documents)
        if not incoming:
            return self._noop("No files to load.")
        self._commit("load", self._store.documents + incoming)
        names = ", ".join(doc.name for doc in incoming)
        return self._done(f"Loaded {len(incoming)} files: {names}", {"loaded": len(incoming)})

    def load_paths(self, paths: Iterable[str | Path]) -> OperationResult:
        """Read files/folders from disk and append them.

        I/O errors propagate before the store is touched.
        """
        return self.load_documents(package_utils.load_documents(paths))

    def clear_all(self) -> OperationResult:
        if self._store.is_empty():
            return self._noop("Nothing to clear.")
        self._commit("clear", ())
        self._split.cancel()
        return self._done("All files and settings cleared.", {"cleared": True}, level="info")

    def update_document(self, index: int, body: Optional[str] = None,
                        name: Optional[str] = None) -> OperationResult:
        """Manually edit one document's body and/or name."""
        if not 0 <= index < len(self._store):
            logger.warning("Edit FAIL: update_document index_out_of_range index=%s", index)
            return OperationResult(False, f"No document at index {index}.", {"index": index})
        doc = self._store[index]
        new_doc = Document(
            name=clean_name(name, index, self._max_name_length) if name is not None else doc.name,
            body=body if body is not None else doc.body,
            original_name=doc.original_name,
        )
        if new_doc == doc:
            return OperationResult(False, "Document unchanged.", {"index": index})
        docs = list(self._store.documents)
        docs[index] = new_doc
        self._commit("edit", docs)
        logger.info("Edit OK: update_document index=%d", index)
        return OperationResult(True, f"Document {index} updated.", {"index": index, "name": new_doc.name})

    def undo(self) -> OperationResult:
        """Restore the store to the state before the last mutating operation."""
        label = self._undo.peek_label()
        if not self._undo.undo(self._store):
            return OperationResult(False, "Nothing to undo.")
        return self._done("Last operation undone; files restored to the previous state.",
                          {"operation": label}, level="info")

    # -------------------------------------------------------------------------
    # Transforms
    # -------------------------------------------------------------------------

    def merge_headings(self, source_tag: str, target_tag: str, exclude: str = "") -> OperationResult:
        """Fold each *source_tag* heading into the following *target_tag* headings."""
        logger.info("Edit: merge source=%s target=%s", source_tag, target_tag)
        if self._store.is_empty():
            return self._noop("No files loaded.")
        result = self._build(
            "merge", lambda docs: merge_headings(docs, source_tag, target_tag, exclude)
        )
        if isinstance(result, OperationResult):
            return result
        self._commit("merge", result.documents)
        return self._done(
            f"Heading merge done. {result.merged} source headings ({result.source_tag}) "
            f"merged into targets ({result.target_tag}).",
            {"merged": result.merged, "source_tag": result.source_tag, "target_tag": result.target_tag},
        )

    def global_replace(self, find: str, replacement: str) -> OperationResult:
        """Literal find/replace over leaf elements of every document."""
        if not find:
            return self._noop("Find text is empty.")
        if self._store.is_empty():
            return self._noop("No files loaded.")
        result = self._build("global_replace", lambda docs: global_replace(docs, find, replacement))
        if isinstance(result, OperationResult):
            return result
        self._commit("global_replace", result.documents)
        return self._done(
            f"Global replace done. {result.replacements} occurrences replaced in "
            f"{result.files_affected} files.",
            {"replacements": result.replacements, "files_affected": result.files_affected},
        )

    def replace_in_headings(self, scope: str, find: str, replacement: str) -> OperationResult:
        """Regex find/replace inside headings (``scope`` is ``"all"`` or ``"h1"``..``"h6"``)."""
        if not find:
            return self._noop("Find pattern is empty.")
        if self._store.is_empty():
            return self._noop("No files loaded.")
        result = self._build(
            "replace_headings", lambda docs: replace_in_headings(docs, scope, find, replacement)
        )
        if isinstance(result, OperationResult):
            return result
        self._commit("replace_headings", result.documents)
        return self._done(
            f"Heading replace done. {result.headings_updated} headings updated in scope {result.scope}.",
            {"headings_updated": result.headings_updated, "files_affected": result.files_affected,
             "scope": result.scope},
        )

    def normalize_hierarchy(self, skip: Iterable[str] = ()) -> OperationResult:
        """Renumber heading levels densely, leaving the *skip* levels alone."""
        if self._store.is_empty():
            return self._noop("No files loaded.")
        result = self._build("normalize", lambda docs: normalize_hierarchy(docs, skip))
        if isinstance(result, OperationResult):
            return result
        self._commit("normalize", result.documents)
        skipped = ", ".join(result.skipped) or "none"
        return self._done(
            f"Hierarchy normalized in {result.files_normalized} files. Skipped levels: {skipped}.",
            {"files_normalized": result.files_normalized, "skipped": list(result.skipped)},
        )

    # -------------------------------------------------------------------------
    # Split (scan -> review -> commit)
    # -------------------------------------------------------------------------

    def scan_split(self, config: SplitConfig) -> OperationResult:
        """Collect split candidates and enter review."""
        if self._store.is_empty():
            self._log.add("No files loaded to scan.", "error")
            return OperationResult(False, "No files loaded to scan.")
        review = self._split.scan(self._store.documents, config)
        message = f"Scanned {len(review.candidates)} potential split points across all loaded files."
        self._log.add(message, "info")
        return OperationResult(True, message, {
            "candidates": len(review.candidates),
            "method": SplitMethod(config.method).value,
        })

    def set_split_flag(self, candidate_id: str, flag: str, value: bool) -> OperationResult:
        if self._split.state != "review":
            return OperationResult(False, "No split review in progress.")
        try:
            found = self._split.set_flag(candidate_id, flag, value)
        except ValueError as exc:
            return OperationResult(False, str(exc), {"flag": flag})
        if not found:
            return OperationResult(False, f"Unknown candidate '{candidate_id}'.", {"id": candidate_id})
        return OperationResult(True, f"Candidate {candidate_id}: {flag}={bool(value)}.")

    def set_all_split_flags(self, flag: str, value: bool) -> OperationResult:
        if self._split.state != "review":
            return OperationResult(False, "No split review in progress.")
        try:
            count = self._split.set_all(flag, value)
        except ValueError as exc:
            return OperationResult(False, str(exc), {"flag": flag})
        return OperationResult(True, f"{flag}={bool(value)} on {count} candidates.", {"count": count})

    def cancel_split(self) -> OperationResult:
        if self._split.state != "review":
            return OperationResult(False, "No split review in progress.")
        self._split.cancel()
        return OperationResult(True, "Split review cancelled.")

    def commit_split(self) -> OperationResult:
        """Split the documents at the approved candidates and leave review."""
        if self._split.state != "review":
            return OperationResult(False, "No split review in progress.")
        result = self._build("split", self._split.commit)
        if isinstance(result, OperationResult):
            return result
        self._commit("split", result.documents)
        return self._done(
            f"Split done. {result.files_created} files created from {result.files_affected} "
            f"split source files.",
            {"files_created": result.files_created, "files_affected": result.files_affected},
        )

    # -------------------------------------------------------------------------
    # Navigation, enhancement, export
    # -------------------------------------------------------------------------

    def heading_outline(self, index: int) -> List[OutlineEntry]:
        """h1–h4 outline of one document (empty for an unknown index).

        Each entry carries the character offset of its heading in the raw body,
        or -1 when the serialized markup differs from the source text.
        """
        if not 0 <= index < len(self._store):
            return []
        raw = self._store[index].body
        return heading_outline(parse_body(raw), raw=raw)

    def enhance_document(self, index: int) -> OperationResult:
        """Ask the enhancement collaborator to improve one document's titles.

        Raises
        ------
        EnhancementError
            When the external call fails; the store is left unmodified.
        """
        if not 0 <= index < len(self._store):
            return OperationResult(False, f"No document at index {index}.", {"index": index})
        if self._enhancer is None:
            self._enhancer = self._default_enhancer()
        doc = self._store[index]
        try:
            improved = self._enhancer.enhance(doc.body)
        except EnhancementError as exc:
            self._log.add(f"Enhancement failed for {doc.name}: {exc}", "error")
            raise
        if improved == doc.body:
            return self._noop(f"Enhancement left {doc.name} unchanged.")
        docs = list(self._store.documents)
        docs[index] = doc.with_body(improved)
        self._commit("enhance", docs)
        return self._done(f"Titles enhanced in {doc.name}.", {"index": index})

    def export_entries(self) -> List[Tuple[str, str]]:
        extension = ConfigManager().get_value("export", "extension", ".txt")
        return package_utils.export_entries(self._store, extension)

    def save_archive(self, directory: str | Path, on: Optional[date] = None) -> OperationResult:
        """Write the export ZIP into *directory*."""
        if self._store.is_empty():
            return OperationResult(False, "No files to export.")
        export_cfg = ConfigManager().get_section("export")
        path = package_utils.save_zip_archive(
            self._store,
            directory,
            prefix=export_cfg.get("archive_prefix", "Otzaria_Output"),
            extension=export_cfg.get("extension", ".txt"),
            on=on,
        )
        return self._done(f"Export: archive with {len(self._store)} files.",
                          {"path": str(path), "files": len(self._store)})

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _build(self, label: str, fn: Callable[[Sequence[Document]], Any]) -> Any:
        """Run a pure transform on the current documents.

        Returns the transform's result, or a failed OperationResult when the
        input is rejected. The store is never touched here.
        """
        try:
            return fn(self._store.documents)
        except re.error as exc:
            message = f"Invalid pattern: {exc}"
        except ValueError as exc:
            message = str(exc)
        except Exception as exc:
            logger.error("Edit FAIL: %s unexpected error", label, exc_info=True)
            message = f"{label} failed: {exc}"
        logger.warning("Edit FAIL: %s %s", label, message)
        self._log.add(message, "error")
        return OperationResult(False, message, {"operation": label})

    def _commit(self, label: str, documents: Iterable[Document]) -> None:
        self._undo.push_snapshot(self._store, label)
        self._store.replace_all(documents)
        logger.info("Edit OK: %s documents=%d", label, len(self._store))

    def _done(self, message: str, details: Optional[Dict[str, Any]] = None,
              level: str = "success") -> OperationResult:
        self._log.add(message, level)  # type: ignore[arg-type]
        return OperationResult(True, message, details)

    def _noop(self, message: str) -> OperationResult:
        logger.info("Edit noop: %s", message)
        self._log.add(message, "info")
        return OperationResult(False, message)

    @staticmethod
    def _default_enhancer() -> EnhancementService:
        cfg = ConfigManager().get_section("enhancement")
        return EnhancementService(
            model=cfg.get("model", "gemini-2.5-flash"),
            excerpt_chars=cfg.get("excerpt_chars", 5000),
            api_key_env=cfg.get("api_key_env", "GEMINI_API_KEY"),
        )
