# Path: ris/store/sqlite_store.py
# Purpose: Provide the persistent index store backed by a SQLite file.
# Layer: ris/store.
# Details: Lives at <index_dir>/index.sqlite in WAL mode so query snapshots never see partial indexing runs.

from __future__ import annotations

import sqlite3
import threading
import time
from pathlib import Path
from typing import Iterator, Optional

import numpy as np

from ris.errors import DuplicateIdentifier, ExtractorMismatch, StorageUnavailable
from ris.models.domain import ImageDocument

from .base import IndexStore, QueryHandle

INDEX_FILENAME = "index.sqlite"
SIGNATURE_KEY = "signature"
SCAN_FETCH_SIZE = 256


class SqliteQueryHandle(QueryHandle):
    """A dedicated connection holding an open read transaction.

    Several threads may scan the same handle; cursor access is serialised
    by ``lock``.
    """

    def __init__(self, conn: sqlite3.Connection, signature: Optional[str], size: int) -> None:
        self._conn: Optional[sqlite3.Connection] = conn
        self.lock = threading.Lock()
        self.signature = signature
        self.size = size

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageUnavailable("Query handle is closed.")
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None


class SqliteIndexStore(IndexStore):
    """IndexStore implementation backed by a single SQLite database file.

    The writer connection is created lazily on the first append, so a store
    constructed only for searching never creates an empty index by accident.
    Appends go through one connection guarded by a lock; each append is its
    own transaction.
    """

    def __init__(self, index_dir: Path | str, name: str = "sqlite") -> None:
        self.name = name
        self.index_dir = Path(index_dir)
        self.db_path = self.index_dir / INDEX_FILENAME
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    # Write path
    def _writer(self) -> sqlite3.Connection:
        """Open (creating if needed) the writer connection. Caller holds the lock."""

        if self._conn is not None:
            return self._conn

        conn = None
        try:
            self.index_dir.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path, check_same_thread=False)
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    identifier TEXT PRIMARY KEY,
                    descriptor BLOB NOT NULL,
                    dim INTEGER NOT NULL,
                    indexed_at INTEGER
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS meta (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            conn.commit()
        except (OSError, sqlite3.DatabaseError) as exc:
            if conn is not None:
                conn.close()
            raise StorageUnavailable(f"Cannot open index at {self.index_dir} for writing: {exc}") from exc

        self._conn = conn
        return conn

    def append(self, doc: ImageDocument) -> None:
        blob = np.ascontiguousarray(doc.descriptor, dtype=np.float32).tobytes()
        with self._lock:
            conn = self._writer()
            try:
                conn.execute(
                    "INSERT INTO documents (identifier, descriptor, dim, indexed_at) VALUES (?, ?, ?, ?)",
                    (doc.identifier, blob, doc.dim, int(time.time())),
                )
                conn.commit()
            except sqlite3.IntegrityError as exc:
                conn.rollback()
                raise DuplicateIdentifier(f"Already indexed: {doc.identifier}") from exc
            except sqlite3.DatabaseError as exc:
                conn.rollback()
                raise StorageUnavailable(f"Cannot write to index at {self.index_dir}: {exc}") from exc

    def bind_signature(self, signature: str) -> None:
        with self._lock:
            conn = self._writer()
            try:
                row = conn.execute("SELECT value FROM meta WHERE key = ?", (SIGNATURE_KEY,)).fetchone()
                if row is None:
                    conn.execute("INSERT INTO meta (key, value) VALUES (?, ?)", (SIGNATURE_KEY, signature))
                    conn.commit()
                    return
            except sqlite3.DatabaseError as exc:
                conn.rollback()
                raise StorageUnavailable(f"Cannot read index metadata at {self.index_dir}: {exc}") from exc

        if row[0] != signature:
            raise ExtractorMismatch(
                f"Index at {self.index_dir} was built with {row[0]!r}, not {signature!r}."
            )

    # Read path
    def open_for_query(self) -> SqliteQueryHandle:
        if not self.db_path.is_file():
            raise StorageUnavailable(f"No index found at {self.index_dir}. Index a directory with add_dir first.")

        conn = None
        try:
            conn = sqlite3.connect(self.db_path, isolation_level=None, check_same_thread=False)
            conn.execute("BEGIN")
            # The first read fixes the snapshot for the rest of the transaction.
            size = int(conn.execute("SELECT COUNT(*) FROM documents").fetchone()[0])
            row = conn.execute("SELECT value FROM meta WHERE key = ?", (SIGNATURE_KEY,)).fetchone()
        except sqlite3.DatabaseError as exc:
            if conn is not None:
                conn.close()
            raise StorageUnavailable(f"Index at {self.index_dir} is unreadable: {exc}") from exc

        return SqliteQueryHandle(conn, row[0] if row else None, size)

    def scan(self, handle: QueryHandle) -> Iterator[ImageDocument]:
        if not isinstance(handle, SqliteQueryHandle):
            raise TypeError("SqliteIndexStore.scan requires a handle from open_for_query().")
        try:
            with handle.lock:
                cursor = handle.connection.execute("SELECT identifier, descriptor FROM documents ORDER BY identifier")
            while True:
                with handle.lock:
                    rows = cursor.fetchmany(SCAN_FETCH_SIZE)
                if not rows:
                    return
                for identifier, blob in rows:
                    yield ImageDocument(identifier=identifier, descriptor=np.frombuffer(blob, dtype=np.float32).copy())
        except sqlite3.DatabaseError as exc:
            raise StorageUnavailable(f"Index at {self.index_dir} is unreadable: {exc}") from exc

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
