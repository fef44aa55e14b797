"""Shared fixtures: a throwaway project directory and its collaborators."""

import pytest

from forge_session.config import ForgeConfig
from forge_session.context import SessionContext
from forge_session.session.store import FileDocumentStore


@pytest.fixture
def config(tmp_path):
    """Default layout rooted at a temporary project."""
    return ForgeConfig(project_root=str(tmp_path))


@pytest.fixture
def documents(config):
    return FileDocumentStore(config.root)


@pytest.fixture
def context(config):
    return SessionContext.for_project(config)
