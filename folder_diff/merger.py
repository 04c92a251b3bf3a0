"""Unified tree construction."""

from typing import Optional

from .models import DirectoryNode, Node


def _merge_children(left: DirectoryNode, right: DirectoryNode) -> list[Node]:
    left_map = {child.name: child for child in left.children}
    right_map = {child.name: child for child in right.children}

    merged = []
    # Plain lexicographic order, independent of the scanner's natural sort.
    for name in sorted(left_map.keys() | right_map.keys()):
        l_node = left_map.get(name)
        r_node = right_map.get(name)

        if isinstance(l_node, DirectoryNode) and isinstance(r_node, DirectoryNode):
            merged.append(DirectoryNode(
                path=r_node.path,
                size=r_node.size,
                status=r_node.status,
                contains_diff=r_node.contains_diff,
                children=_merge_children(l_node, r_node),
            ))
        else:
            # Shared by reference with the scanned tree; read-only downstream.
            merged.append(r_node if r_node is not None else l_node)
    return merged


def merge_trees(left: Optional[Node], right: Optional[Node]) -> Optional[Node]:
    """
    Merge a compared left (before) and right (after) tree into one view.

    The result takes the right side's metadata wherever both sides have an
    entry and includes left-only entries as they are, so removed items stay
    visible. Neither input is modified.
    """
    if left is None:
        return right
    if right is None:
        return left
    if not (isinstance(left, DirectoryNode) and isinstance(right, DirectoryNode)):
        return right

    return DirectoryNode(
        path=right.path,
        size=right.size,
        status=right.status,
        contains_diff=right.contains_diff or left.contains_diff,
        children=_merge_children(left, right),
    )
