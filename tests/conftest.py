"""Shared fixtures for the Otzaria Toolkit test-suite.

Every test runs with an isolated user-config and log directory so that the
ConfigManager singleton never reads or writes the real home folder.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from otzaria_toolkit.config import ConfigManager
from otzaria_toolkit.core.models import Document
from otzaria_toolkit.core.models.session_log import SessionLog
from otzaria_toolkit.core.services.split_service import SplitService
from otzaria_toolkit.core.services.structure_editing_service import StructureEditingService
from otzaria_toolkit.core.services.undo_service import UndoService


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point config and logs at a temp folder and reload the singleton."""
    monkeypatch.setenv("OTZARIA_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("OTZARIA_LOG_DIR", str(tmp_path / "logs"))
    ConfigManager.reset()
    yield tmp_path / "config"
    ConfigManager.reset()


@pytest.fixture
def make_doc():
    def factory(body: str, name: str = "doc") -> Document:
        return Document(name=name, body=body)
    return factory


@pytest.fixture
def service():
    """Session façade with explicit small collaborators."""
    return StructureEditingService(
        undo_service=UndoService(max_history=20),
        session_log=SessionLog(capacity=50),
        split_service=SplitService(),
    )


@pytest.fixture
def loaded_service(service):
    service.load_documents([
        Document("alpha", "<h4>A</h4><h5>X</h5><h5>Y</h5>"),
        Document("beta", "<h2>One</h2><p>first</p><h2>Two</h2><p>second</p>"),
    ])
    return service
