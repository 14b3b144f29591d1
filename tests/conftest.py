"""Shared fixtures for build-if-changed tests."""

import io
from pathlib import Path

import pytest

from buildifchanged.reporter import ConsoleReporter
from buildifchanged.store import InMemoryStateStore


class Workspace:
    """Test workspace with convenient file operations."""

    def __init__(self, tmp_path: Path):
        self.root = tmp_path

    def create_file(self, path: str, content: str = '') -> Path:
        """Create a file with content. Path is relative to workspace root."""
        full_path = self.root / path
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_text(content)
        return full_path

    def read_file(self, path: str) -> str:
        return (self.root / path).read_text()

    def exists(self, path: str) -> bool:
        return (self.root / path).exists()

    def path(self, path: str) -> Path:
        return self.root / path


@pytest.fixture
def ws(tmp_path):
    """Workspace fixture rooted at tmp_path."""
    return Workspace(tmp_path)


@pytest.fixture
def store():
    return InMemoryStateStore()


@pytest.fixture
def reporter():
    """ConsoleReporter writing into StringIO buffers."""
    return ConsoleReporter(outstream=io.StringIO(), errstream=io.StringIO())
