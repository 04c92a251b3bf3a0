"""Folder scanning functionality."""

import logging
import os
import re
import stat
from pathlib import Path
from typing import Optional

from .models import (
    SYSTEM_FILES,
    DiffStatus,
    DirectoryNode,
    FileNode,
    Node,
    ScanOptions,
)

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"(\d+)")


def natural_key(name: str) -> tuple:
    """Sort key ordering names case-insensitively with numeric runs by value."""
    key = []
    for part in _DIGITS.split(name.casefold()):
        if not part:
            continue
        if part.isdigit():
            key.append((0, int(part), part))
        else:
            key.append((1, 0, part))
    return tuple(key)


def _is_excluded(name: str, options: ScanOptions) -> bool:
    if not options.include_hidden and name.startswith("."):
        return True
    if not options.include_system and name in SYSTEM_FILES:
        return True
    return False


def _scan_file(path: Path) -> FileNode:
    node = FileNode(path=path)
    try:
        st = os.stat(path)
    except OSError as e:
        logger.warning("Could not stat %s: %s", path, e)
        node.mark(DiffStatus.FAILURE)
        return node
    if not stat.S_ISREG(st.st_mode):
        # FIFOs, sockets and devices block or never end when read.
        logger.warning("Not a regular file: %s", path)
        node.mark(DiffStatus.FAILURE)
        return node
    node.size = st.st_size
    return node


def _scan_directory(path: Path, options: ScanOptions) -> DirectoryNode:
    node = DirectoryNode(path=path)
    try:
        with os.scandir(path) as it:
            entries = [entry for entry in it if not _is_excluded(entry.name, options)]
    except OSError as e:
        logger.warning("Could not list %s: %s", path, e)
        node.mark(DiffStatus.FAILURE)
        return node

    children = []
    for entry in entries:
        child = _scan_entry(Path(entry.path), options)
        if child is not None:
            children.append(child)

    node.children = sorted(children, key=lambda child: natural_key(child.name))
    node.size = sum(child.size for child in node.children)
    node.contains_diff = any(child.contains_diff for child in node.children)
    return node


def _scan_entry(path: Path, options: ScanOptions) -> Optional[Node]:
    # Follows symlinks; an entry that vanished since listing is dropped.
    try:
        is_dir = path.is_dir()
    except OSError as e:
        logger.warning("Could not inspect %s: %s", path, e)
        node = FileNode(path=path)
        node.mark(DiffStatus.FAILURE)
        return node
    if is_dir:
        return _scan_directory(path, options)
    if not os.path.lexists(path):
        logger.debug("Entry disappeared during scan: %s", path)
        return None
    return _scan_file(path)


def scan(root, options: Optional[ScanOptions] = None) -> Optional[Node]:
    """
    Scan a path and build a node tree.

    Args:
        root: File or directory to scan
        options: Visibility filters (hidden and system entries)

    Returns:
        The root node, or None if the path does not exist. Unreadable
        entries are kept in the tree with FAILURE status.
    """
    options = options or ScanOptions()
    root_path = Path(root).absolute()
    if not root_path.exists():
        logger.info("Scan root not found: %s", root_path)
        return None

    logger.debug("Scanning %s", root_path)
    return _scan_entry(root_path, options)
