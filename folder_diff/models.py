"""Data models for folder diff."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional

# Platform artifacts hidden unless system entries are requested.
SYSTEM_FILES = frozenset({".DS_Store", "Icon\r"})


class DiffStatus(Enum):
    """Classification of a node relative to its counterpart."""
    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    FAILURE = "failure"


class Side(Enum):
    """Which of the two compared trees a node belongs to."""
    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> "Side":
        return Side.RIGHT if self is Side.LEFT else Side.LEFT


@dataclass(eq=False)
class Node:
    """One filesystem entry plus its comparison state."""
    path: Path
    size: int = 0
    status: DiffStatus = DiffStatus.UNCHANGED
    contains_diff: bool = False

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_directory(self) -> bool:
        return False

    def mark(self, status: DiffStatus) -> None:
        """Set the status, keeping contains_diff consistent with it."""
        self.status = status
        if status is not DiffStatus.UNCHANGED:
            self.contains_diff = True

    def walk(self) -> Iterator["Node"]:
        """Yield this node and every descendant, parents first."""
        yield self

    def find(self, path) -> Optional["Node"]:
        """Return the node at an absolute path, or None."""
        target = Path(path)
        for node in self.walk():
            if node.path == target:
                return node
        return None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "path": str(self.path),
            "is_directory": self.is_directory,
            "size": self.size,
            "status": self.status.value,
            "contains_diff": self.contains_diff,
        }


@dataclass(eq=False)
class FileNode(Node):
    """A regular file. Hash is set only after a content comparison."""
    hash: Optional[str] = None

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["hash"] = self.hash
        return data


@dataclass(eq=False)
class DirectoryNode(Node):
    """A directory; children are empty for unreadable directories."""
    children: list[Node] = field(default_factory=list)

    @property
    def is_directory(self) -> bool:
        return True

    def child(self, name: str) -> Optional[Node]:
        for node in self.children:
            if node.name == name:
                return node
        return None

    def walk(self) -> Iterator[Node]:
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["children"] = [child.to_dict() for child in self.children]
        return data


@dataclass
class ScanOptions:
    """Visibility filters applied while scanning."""
    include_hidden: bool = False
    include_system: bool = False


@dataclass
class CompareOptions:
    """Options controlling how same-size files are judged."""
    verify_content: bool = False
    algorithm: str = "sha256"


@dataclass(frozen=True)
class ProgressEvent:
    """Emitted once per completed file copy."""
    bytes_copied: int
    name: str


@dataclass
class CopyProgress:
    """Aggregated state of an in-flight sync."""
    total_bytes: int = 0
    total_files: int = 0
    bytes_copied: int = 0
    files_copied: int = 0
    current_file: str = ""

    @property
    def fraction(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        return self.bytes_copied / self.total_bytes

    def advance(self, event: ProgressEvent) -> None:
        self.bytes_copied += event.bytes_copied
        self.files_copied += 1
        self.current_file = event.name
