"""Two-tree comparison."""

import logging
from collections import Counter
from typing import Optional

from .hasher import compute_file_hash, is_hash_error
from .models import CompareOptions, DiffStatus, DirectoryNode, FileNode, Node

logger = logging.getLogger(__name__)


def mark_subtree(node: Node, status: DiffStatus) -> None:
    """Set status on a node and all of its descendants."""
    for descendant in node.walk():
        descendant.mark(status)


def _files_differ(left: FileNode, right: FileNode, options: CompareOptions) -> bool:
    # Unreadable or special entries keep FAILURE and are never opened.
    if left.status is DiffStatus.FAILURE or right.status is DiffStatus.FAILURE:
        return False
    # Size always decides first; hashing only confirms an equal size.
    if left.size != right.size:
        return True
    if not options.verify_content:
        return False

    left.hash = compute_file_hash(left.path, algorithm=options.algorithm)
    right.hash = compute_file_hash(right.path, algorithm=options.algorithm)

    if is_hash_error(left.hash) or is_hash_error(right.hash):
        logger.warning(
            "Content of %s could not be verified, treating as modified", left.name
        )
        return True
    return left.hash != right.hash


def compare(left: Node, right: Node, options: Optional[CompareOptions] = None) -> None:
    """
    Compare two directory trees and annotate both in place.

    Entries only on the left are marked REMOVED, entries only on the right
    ADDED, and entries present on both sides with different size, content
    or type MODIFIED. Every directory whose subtree holds a difference gets
    contains_diff on both sides. Non-directory arguments are ignored.
    """
    if not (isinstance(left, DirectoryNode) and isinstance(right, DirectoryNode)):
        return
    options = options or CompareOptions()

    left_map = {child.name: child for child in left.children}
    right_map = {child.name: child for child in right.children}

    any_diff = False
    for name in left_map.keys() | right_map.keys():
        l_node = left_map.get(name)
        r_node = right_map.get(name)

        if l_node is not None and r_node is not None:
            if l_node.is_directory and r_node.is_directory:
                compare(l_node, r_node, options)
                if (l_node.status is not DiffStatus.UNCHANGED or l_node.contains_diff
                        or r_node.status is not DiffStatus.UNCHANGED or r_node.contains_diff):
                    any_diff = True
            elif not l_node.is_directory and not r_node.is_directory:
                if _files_differ(l_node, r_node, options):
                    l_node.mark(DiffStatus.MODIFIED)
                    r_node.mark(DiffStatus.MODIFIED)
                if l_node.contains_diff or r_node.contains_diff:
                    any_diff = True
            else:
                # Type change counts as a modification, not add plus remove.
                l_node.mark(DiffStatus.MODIFIED)
                r_node.mark(DiffStatus.MODIFIED)
                any_diff = True
        elif l_node is not None:
            mark_subtree(l_node, DiffStatus.REMOVED)
            any_diff = True
        else:
            mark_subtree(r_node, DiffStatus.ADDED)
            any_diff = True

    if any_diff:
        left.contains_diff = True
        right.contains_diff = True


def summarize(node: Optional[Node]) -> Counter:
    """Count nodes per status across a tree, root excluded."""
    counts = Counter()
    if node is None:
        return counts
    for descendant in node.walk():
        if descendant is not node:
            counts[descendant.status] += 1
    return counts
