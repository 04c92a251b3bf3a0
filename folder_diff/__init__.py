"""
Folder Diff - compare two folder trees and sync entries between them.

Features:
- Recursive scan with hidden/system entry filters
- Added/removed/modified classification with subtree difference flags
- Optional content verification via SHA-256 (or xxhash for speed)
- Unified before/after tree for a single-pane view
- Per-file progress reporting for copies, resumable via a SQLite journal
"""

from .comparator import compare
from .hasher import compute_file_hash
from .merger import merge_trees
from .models import (
    CompareOptions,
    CopyProgress,
    DiffStatus,
    DirectoryNode,
    FileNode,
    Node,
    ProgressEvent,
    ScanOptions,
    Side,
)
from .scanner import scan
from .session import CompareSession
from .sync import ProgressChannel, SyncCancelled, SyncError, delete_item, sync_node

__version__ = "1.0.0"

__all__ = [
    "CompareOptions",
    "CompareSession",
    "CopyProgress",
    "DiffStatus",
    "DirectoryNode",
    "FileNode",
    "Node",
    "ProgressChannel",
    "ProgressEvent",
    "ScanOptions",
    "Side",
    "SyncCancelled",
    "SyncError",
    "compare",
    "compute_file_hash",
    "delete_item",
    "merge_trees",
    "scan",
    "sync_node",
]
