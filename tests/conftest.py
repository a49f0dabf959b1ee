"""
Pytest configuration for claudy tests.

Shared fixtures for building a projects root on disk.
"""

import pytest


@pytest.fixture
def projects_root(tmp_path):
    """An empty ~/.claude/projects stand-in."""
    root = tmp_path / "projects"
    root.mkdir()
    return root


@pytest.fixture
def project_dir(projects_root):
    """One project directory under projects_root."""
    path = projects_root / "-home-user-myproject"
    path.mkdir()
    return path
