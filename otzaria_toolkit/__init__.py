"""Top-level package for the document-restructuring engine of Otzaria Toolkit.

Front-ends (CLI, GUI) should only depend on the public API exposed here rather
than importing internal modules directly.
"""

from .core.models import Document, DocumentStore  # re-export for convenience
from .core.services.structure_editing_service import OperationResult, StructureEditingService

__all__: list[str] = [
    "Document",
    "DocumentStore",
    "OperationResult",
    "StructureEditingService",
]
