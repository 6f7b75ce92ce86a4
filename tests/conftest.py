"""Shared fixtures."""

import pytest

from diagram_backend.file_manager import DiagramFileManager
from diagram_core.editor import DiagramEditor


@pytest.fixture
def editor():
    return DiagramEditor()


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """A workspace directory that the global file manager is confined to."""
    root = tmp_path.resolve()
    monkeypatch.setenv("DIAGRAM_TOOL_WORKSPACE", str(root))
    return root


@pytest.fixture
def manager(workspace):
    return DiagramFileManager(workspace=workspace)
