"""
SQLite-based document store for parent chunks.

Stores parent chunks in SQLite for efficient retrieval by ID after
child matching. Parent ids are assigned here on insert; child ids in
the vector store are built from them, so this store is the source of
truth for which files have been synced and with which content hash.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Sequence

from cookbook.errors import ConfigurationError
from cookbook.rag.chunking.models import ParentChunk

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


class SQLiteParentStore:
    """
    SQLite-based store for parent chunks.

    Provides:
    - Batch insert returning assigned ids
    - Update by id
    - Lookup by id and by source file
    - Per-file content hashes for sync diffing
    - Delete by source file, delete all

    A single connection is kept open (required for ":memory:") and
    guarded by a lock so the store can be shared across request threads.
    """

    def __init__(self, db_path: Path | str):
        """
        Initialize the parent store.

        Args:
            db_path: Path to SQLite database file, or ":memory:"

        Raises:
            ConfigurationError: If db_path is blank
        """
        db_path = str(db_path).strip()
        if not db_path:
            raise ConfigurationError("db_path must be a non-empty string")

        self.db_path = db_path
        if db_path != MEMORY_DB:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Initializing SQLiteParentStore with db_path: {db_path}")

        self._lock = threading.Lock()
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row

        self._init_db()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Context manager for a locked, committed-or-rolled-back unit of work."""
        with self._lock:
            try:
                yield self._conn
                self._conn.commit()
            except Exception:
                self._conn.rollback()
                raise

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._transaction() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS parents (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    source_file TEXT NOT NULL,
                    parent_index INTEGER NOT NULL,
                    content TEXT NOT NULL,
                    hash TEXT NOT NULL,
                    synced_at INTEGER NOT NULL,
                    UNIQUE (source_file, parent_index)
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_parents_source_file
                ON parents (source_file)
            """)

        logger.debug("SQLite schema initialized")

    def insert_parents(self, parents: Sequence[ParentChunk]) -> list[int]:
        """
        Insert parent chunks in a single transaction.

        Args:
            parents: Parents to store (their id field is ignored)

        Returns:
            Assigned ids, in input order
        """
        if not parents:
            return []

        ids = []
        with self._transaction() as conn:
            for parent in parents:
                cursor = conn.execute("""
                    INSERT INTO parents (
                        source_file, parent_index, content, hash, synced_at
                    ) VALUES (?, ?, ?, ?, ?)
                """, parent.to_row())
                ids.append(cursor.lastrowid)

        logger.debug(f"Inserted {len(ids)} parent chunks")

        return ids

    def update_parents(self, parents: Sequence[ParentChunk]) -> None:
        """
        Overwrite existing parents by id.

        Args:
            parents: Parents with their id set
        """
        if not parents:
            return

        with self._transaction() as conn:
            conn.executemany("""
                UPDATE parents
                SET source_file = ?, parent_index = ?, content = ?, hash = ?, synced_at = ?
                WHERE id = ?
            """, [(*p.to_row(), p.id) for p in parents])

        logger.debug(f"Updated {len(parents)} parent chunks")

    def get_parents(self, ids: Sequence[int]) -> list[ParentChunk]:
        """
        Retrieve parents by id.

        Args:
            ids: Parent ids

        Returns:
            Found parents ordered by id; unknown ids are ignored
        """
        if not ids:
            return []

        placeholders = ",".join("?" * len(ids))
        with self._transaction() as conn:
            rows = conn.execute(f"""
                SELECT * FROM parents WHERE id IN ({placeholders}) ORDER BY id
            """, list(ids)).fetchall()

        return [self._row_to_parent(row) for row in rows]

    def get_parents_by_source_file(self, source_file: str) -> list[ParentChunk]:
        """
        Get all parents for a source file.

        Returns:
            List of ParentChunks ordered by parent_index
        """
        with self._transaction() as conn:
            rows = conn.execute("""
                SELECT * FROM parents
                WHERE source_file = ?
                ORDER BY parent_index
            """, (source_file,)).fetchall()

        return [self._row_to_parent(row) for row in rows]

    def get_all_source_file_hashes(self) -> list[tuple[str, str]]:
        """
        Get the recorded content hash of every synced source file.

        Every parent of a file carries the same hash, so the first
        parent is representative.

        Returns:
            List of (source_file, hash) pairs
        """
        with self._transaction() as conn:
            rows = conn.execute("""
                SELECT source_file, hash FROM parents
                WHERE parent_index = 0
                ORDER BY source_file
            """).fetchall()

        return [(row["source_file"], row["hash"]) for row in rows]

    def delete_by_source_file(self, source_file: str) -> int:
        """
        Delete all parents for a source file.

        Returns:
            Number of parents deleted
        """
        with self._transaction() as conn:
            cursor = conn.execute("""
                DELETE FROM parents WHERE source_file = ?
            """, (source_file,))

        logger.debug(f"Deleted {cursor.rowcount} parent chunks for file: {source_file}")
        return cursor.rowcount

    def delete_all(self) -> int:
        """
        Clear all data from the store.

        Returns:
            Number of parents deleted
        """
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM parents")

        logger.debug(f"Deleted all {cursor.rowcount} parent chunks")
        return cursor.rowcount

    def get_stats(self) -> dict:
        """
        Get statistics about the parent store.

        Returns:
            Dict with counts
        """
        with self._transaction() as conn:
            total = conn.execute(
                "SELECT COUNT(*) FROM parents"
            ).fetchone()[0]

            files = conn.execute(
                "SELECT COUNT(DISTINCT source_file) FROM parents"
            ).fetchone()[0]

            total_chars = conn.execute(
                "SELECT SUM(LENGTH(content)) FROM parents"
            ).fetchone()[0] or 0

        return {
            "total_parent_chunks": total,
            "unique_source_files": files,
            "total_characters": total_chars,
        }

    def close(self) -> None:
        """Close the database connection; later calls raise sqlite3.ProgrammingError."""
        with self._lock:
            self._conn.close()
        logger.debug("SQLite database connection closed")

    @staticmethod
    def _row_to_parent(row: sqlite3.Row) -> ParentChunk:
        """Convert a database row to ParentChunk."""
        return ParentChunk(
            id=row["id"],
            source_file=row["source_file"],
            parent_index=row["parent_index"],
            content=row["content"],
            hash=row["hash"],
            synced_at=row["synced_at"],
        )
