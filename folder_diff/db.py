"""SQLite-backed journal of completed copies, used to resume a sync."""

import sqlite3
from pathlib import Path


class SyncJournal:
    """Durable record of files already copied by a sync."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        # Opened on the caller thread, used serially by a sync worker.
        self.conn = sqlite3.connect(
            str(self.db_path), isolation_level=None, check_same_thread=False
        )
        self.conn.execute("PRAGMA journal_mode=WAL")
        self._init_schema()

    def __enter__(self) -> "SyncJournal":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _init_schema(self) -> None:
        """Initialize database schema."""
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS copied_files (
                source TEXT NOT NULL,
                destination TEXT NOT NULL,
                size INTEGER NOT NULL,
                mtime_ns INTEGER NOT NULL,
                PRIMARY KEY (source, destination)
            );
        """)

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()

    def mark_copied(self, source: Path, destination: Path, size: int, mtime_ns: int) -> None:
        """Record a completed file copy and the source state it was copied from."""
        self.conn.execute(
            """INSERT OR REPLACE INTO copied_files (source, destination, size, mtime_ns)
               VALUES (?, ?, ?, ?)""",
            (str(source), str(destination), size, mtime_ns)
        )

    def is_copied(self, source: Path, destination: Path, size: int, mtime_ns: int) -> bool:
        """Check if this copy completed earlier from an unchanged source."""
        cursor = self.conn.execute(
            """SELECT 1 FROM copied_files
               WHERE source = ? AND destination = ? AND size = ? AND mtime_ns = ?""",
            (str(source), str(destination), size, mtime_ns)
        )
        return cursor.fetchone() is not None

    def copied_count(self) -> int:
        cursor = self.conn.execute("SELECT COUNT(*) FROM copied_files")
        return cursor.fetchone()[0]

    def clear(self) -> None:
        """Delete the database file."""
        self.conn.close()
        if self.db_path.exists():
            self.db_path.unlink()
