from __future__ import annotations

"""High-level services (scanning, transforms, history, session façade).

Pure transform modules are importable on their own; the session façade
:class:`StructureEditingService` wires them to a document store.
"""

from .heading_analysis_service import matches_exclusion  # noqa: F401
from .undo_service import UndoService  # noqa: F401
from .split_service import SplitService  # noqa: F401
from .enhancement_service import EnhancementService  # noqa: F401
from .structure_editing_service import OperationResult, StructureEditingService  # noqa: F401

__all__: list[str] = [
    "matches_exclusion",
    "UndoService",
    "SplitService",
    "EnhancementService",
    "OperationResult",
    "StructureEditingService",
]
