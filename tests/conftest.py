"""Shared test fixtures."""

import tempfile
from pathlib import Path

import pytest

from folder_diff.db import SyncJournal
from folder_diff.models import DirectoryNode, FileNode


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def sample_folders(temp_dir):
    """Create a left/right pair covering every kind of difference."""
    left = temp_dir / "left"
    right = temp_dir / "right"
    left.mkdir()
    right.mkdir()

    # Identical in both
    (left / "identical.txt").write_text("same content")
    (right / "identical.txt").write_text("same content")

    # Different sizes
    (left / "changed.txt").write_text("short")
    (right / "changed.txt").write_text("a longer body")

    # Same size, different content
    (left / "same_size.txt").write_text("aaaa")
    (right / "same_size.txt").write_text("bbbb")

    # Only in left, with nested content
    (left / "removed_dir").mkdir()
    (left / "removed_dir" / "nested.txt").write_text("gone")

    # Only in right
    (right / "added.txt").write_text("new")

    # Unchanged subdirectory
    (left / "docs").mkdir()
    (right / "docs").mkdir()
    (left / "docs" / "readme.md").write_text("docs")
    (right / "docs" / "readme.md").write_text("docs")

    return left, right


@pytest.fixture
def journal_path(temp_dir):
    """Create a temporary journal path."""
    return temp_dir / "sync_journal.db"


@pytest.fixture
def sync_journal(journal_path):
    """Create a SyncJournal instance."""
    journal = SyncJournal(journal_path)
    yield journal
    try:
        journal.close()
    except Exception:
        pass


def make_dir(path, *children):
    """Build a DirectoryNode with the given children and summed size."""
    node = DirectoryNode(path=Path(path), children=list(children))
    node.size = sum(child.size for child in node.children)
    return node


def make_file(path, size=0):
    return FileNode(path=Path(path), size=size)
