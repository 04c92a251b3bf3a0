"""Copy, sync and delete of tree entries."""

import logging
import os
import queue
import shutil
import threading
from pathlib import Path
from typing import Callable, Iterator, Optional

from .db import SyncJournal
from .models import CopyProgress, DirectoryNode, Node, ProgressEvent

logger = logging.getLogger(__name__)

ProgressSink = Callable[[ProgressEvent], None]


class SyncError(OSError):
    """A copy failed; the original OSError is chained as __cause__."""

    def __init__(self, source: Path, destination: Path, error: OSError):
        message = f"Could not copy {source} to {destination}: {error}"
        if error.errno is None:
            super().__init__(message)
        else:
            super().__init__(error.errno, message)
        self.source = source
        self.destination = destination


class SyncCancelled(Exception):
    """A sync was stopped between files at the caller's request."""


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def delete_item(path) -> None:
    """Delete a file or directory tree. OSError propagates to the caller."""
    path = Path(path)
    if not os.path.lexists(path):
        raise FileNotFoundError(2, "No such file or directory", str(path))
    _remove(path)
    logger.info("Deleted %s", path)


def copy_item(source, destination) -> None:
    """Copy a file or directory over whatever exists at destination."""
    source, destination = Path(source), Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    if os.path.lexists(destination):
        _remove(destination)
    if source.is_dir():
        shutil.copytree(source, destination)
    else:
        shutil.copy2(source, destination)


def _source_mtime_ns(node: Node) -> Optional[int]:
    try:
        return os.stat(node.path).st_mtime_ns
    except OSError:
        return None


def _already_copied(
    node: Node,
    destination: Path,
    mtime_ns: Optional[int],
    journal: Optional[SyncJournal]
) -> bool:
    if journal is None or mtime_ns is None:
        return False
    if not journal.is_copied(node.path, destination, node.size, mtime_ns):
        return False
    try:
        return destination.stat().st_size == node.size
    except OSError:
        return False


def sync_node(
    node: Node,
    destination,
    on_progress: Optional[ProgressSink] = None,
    journal: Optional[SyncJournal] = None,
    stop: Optional[threading.Event] = None
) -> None:
    """
    Copy a node to destination, recursing into directories.

    Existing files at the destination are replaced. on_progress receives one
    ProgressEvent per completed file. The first error aborts the rest of the
    sync; files copied before it stay in place and, when a journal is given,
    are skipped by the next run unless the source changed since. Setting
    stop makes the sync raise SyncCancelled before its next file.
    """
    destination = Path(destination)

    if isinstance(node, DirectoryNode):
        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SyncError(node.path, destination, e) from e
        for child in node.children:
            sync_node(child, destination / child.name, on_progress, journal, stop)
        return

    if stop is not None and stop.is_set():
        raise SyncCancelled(f"Sync stopped before {node.path}")

    mtime_ns = _source_mtime_ns(node)
    if _already_copied(node, destination, mtime_ns, journal):
        logger.debug("Skipping %s, already copied", node.path)
    else:
        try:
            if os.path.lexists(destination):
                _remove(destination)
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(node.path, destination)
        except OSError as e:
            raise SyncError(node.path, destination, e) from e
        if journal is not None and mtime_ns is not None:
            journal.mark_copied(node.path, destination, node.size, mtime_ns)
        logger.debug("Copied %s to %s", node.path, destination)

    if on_progress is not None:
        on_progress(ProgressEvent(bytes_copied=node.size, name=node.name))


def calculate_totals(node: Node) -> tuple[int, int]:
    """Return (bytes, files) a sync of node will copy."""
    if isinstance(node, DirectoryNode):
        total_bytes = total_files = 0
        for child in node.children:
            child_bytes, child_files = calculate_totals(child)
            total_bytes += child_bytes
            total_files += child_files
        return total_bytes, total_files
    return node.size, 1


class ProgressChannel:
    """
    Queue carrying progress events from a sync worker to one consumer.

    Pass the channel itself as on_progress. The consumer folds events into
    its own CopyProgress with drain(), or iterates events() until close().
    """

    _CLOSED = object()

    def __init__(self):
        self._queue = queue.Queue()

    def __call__(self, event: ProgressEvent) -> None:
        self._queue.put(event)

    def close(self) -> None:
        self._queue.put(self._CLOSED)

    def drain(self, progress: CopyProgress) -> int:
        """Apply all pending events to progress; return how many were applied."""
        applied = 0
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return applied
            if item is self._CLOSED:
                # Keep the end marker for events() consumers.
                self._queue.put(item)
                return applied
            progress.advance(item)
            applied += 1

    def events(self, timeout: Optional[float] = None) -> Iterator[ProgressEvent]:
        """Yield events until the channel is closed."""
        while True:
            item = self._queue.get(timeout=timeout)
            if item is self._CLOSED:
                return
            yield item
