"""A left/right comparison session: scan, compare, merge and act on nodes."""

import logging
import threading
from pathlib import Path
from typing import Optional

from .comparator import compare
from .db import SyncJournal
from .merger import merge_trees
from .models import (
    CompareOptions,
    CopyProgress,
    Node,
    ProgressEvent,
    ScanOptions,
    Side,
)
from .scanner import scan
from .sync import ProgressSink, calculate_totals, delete_item, sync_node

logger = logging.getLogger(__name__)


class CompareSession:
    """
    Holds the scanned left, right and unified trees for two roots.

    Every refresh builds fresh trees and swaps them in whole, so a tree
    handed to a reader is never mutated afterwards.
    """

    def __init__(
        self,
        left_root,
        right_root,
        scan_options: Optional[ScanOptions] = None,
        compare_options: Optional[CompareOptions] = None
    ):
        self.left_root = Path(left_root).absolute()
        self.right_root = Path(right_root).absolute()
        self.scan_options = scan_options or ScanOptions()
        self.compare_options = compare_options or CompareOptions()
        self.left: Optional[Node] = None
        self.right: Optional[Node] = None
        self.unified: Optional[Node] = None

    def root_for(self, side: Side) -> Path:
        return self.left_root if side is Side.LEFT else self.right_root

    def tree_for(self, side: Side) -> Optional[Node]:
        return self.left if side is Side.LEFT else self.right

    def refresh(self) -> None:
        """Rescan both roots, compare them and rebuild the unified tree."""
        left = scan(self.left_root, self.scan_options)
        right = scan(self.right_root, self.scan_options)
        if left is not None and right is not None:
            compare(left, right, self.compare_options)
        unified = merge_trees(left, right)
        self.left, self.right, self.unified = left, right, unified

    def destination_for(self, node: Node, side: Side) -> Path:
        """Path on the opposite side matching node's position under side's root."""
        try:
            relative = node.path.relative_to(self.root_for(side))
        except ValueError:
            raise ValueError(f"{node.path} is not under {self.root_for(side)}") from None
        return self.root_for(side.opposite) / relative

    def copy_node(
        self,
        node: Node,
        side: Side,
        on_progress: Optional[ProgressSink] = None,
        journal: Optional[SyncJournal] = None,
        stop: Optional[threading.Event] = None
    ) -> CopyProgress:
        """
        Copy node from side to the opposite tree, then refresh.

        Returns the progress record as it stood when the copy finished.
        On failure or when stop is set (SyncCancelled) the error propagates
        and the trees are left as they were.
        """
        destination = self.destination_for(node, side)
        total_bytes, total_files = calculate_totals(node)
        progress = CopyProgress(total_bytes=total_bytes, total_files=total_files)

        def record(event: ProgressEvent) -> None:
            progress.advance(event)
            if on_progress is not None:
                on_progress(event)

        logger.info("Copying %s to %s (%d files)", node.path, destination, total_files)
        try:
            sync_node(node, destination, record, journal, stop)
        except OSError as e:
            logger.error("Copy failed: %s", e)
            raise
        self.refresh()
        return progress

    def delete_node(self, node: Node) -> None:
        """Delete node from disk, then refresh."""
        try:
            delete_item(node.path)
        except OSError as e:
            logger.error("Delete failed: %s", e)
            raise
        self.refresh()
