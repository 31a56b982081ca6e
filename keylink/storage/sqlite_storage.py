"""
SqliteStorage – durable on-disk mapping table for Keylink
=========================================================

Default backend. Persists the key -> URL table in a single sqlite file and
implements the `BaseMappingStore` contract.

Key Design Points
-----------------
- **Durability**: every write is a single autocommitted statement executed with
  `PRAGMA synchronous=FULL`, so a `put`/`delete` that returns has reached disk
  and survives a process crash.
- **Concurrency**: WAL journal mode lets readers run while a writer commits.
  Writers to any key take sqlite's write lock only for the duration of one
  statement; `busy_timeout` absorbs that brief contention instead of failing.
- **Connections**: one short-lived connection per call, so the store can be
  shared across the FastAPI thread pool without any connection-level locking.
- **Iteration**: runs inside one read transaction, which pins a consistent
  snapshot of the table for the lifetime of the iterator.
- **Layout**: `mappings(key BLOB PRIMARY KEY, value BLOB NOT NULL) WITHOUT ROWID`.
  Keys and values are raw bytes with no envelope; BLOB ordering gives
  lexicographic key order.

Example
-------
>>> storage = SqliteStorage("/tmp/keylink.db")
>>> storage.put(b"abc", b"https://example.com")
>>> storage.get(b"abc")
b'https://example.com'
"""

import contextlib
import logging
import sqlite3
from pathlib import Path
from typing import Iterator, Optional, Union

from keylink.errors import StoreIOError

from .base import BaseMappingStore, Record

log = logging.getLogger("keylink.storage")

DEFAULT_DB_PATH = "keylink_key_to_url.db"


class SqliteStorage(BaseMappingStore):
    """sqlite implementation of the mapping-table contract.

    Parameters
    ----------
    path : str or Path
        Location of the database file. Parent directories are created.
    timeout : float
        Seconds a statement waits for a competing writer before failing.

    Raises
    ------
    StoreIOError
        If the file cannot be created or the schema cannot be initialized.
    """

    name = "sqlite"

    def __init__(self, path: Union[str, Path] = DEFAULT_DB_PATH, timeout: float = 5.0) -> None:
        self.path = Path(path)
        self.timeout = timeout
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreIOError(f"cannot create directory for {self.path}: {exc}") from exc
        self._init_db()

    # ---- Internal helpers -------------------------------------------------

    @contextlib.contextmanager
    def _conn(self):
        """Yield an autocommit connection; sqlite errors become StoreIOError."""
        try:
            con = sqlite3.connect(self.path, timeout=self.timeout, isolation_level=None)
        except sqlite3.Error as exc:
            raise StoreIOError(f"cannot open {self.path}: {exc}") from exc
        try:
            con.execute(f"PRAGMA busy_timeout={int(self.timeout * 1000)}")
            con.execute("PRAGMA synchronous=FULL")
            yield con
        except sqlite3.Error as exc:
            raise StoreIOError(str(exc)) from exc
        finally:
            con.close()

    def _init_db(self) -> None:
        with self._conn() as con:
            con.execute("PRAGMA journal_mode=WAL")
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS mappings (
                  key BLOB PRIMARY KEY,
                  value BLOB NOT NULL
                ) WITHOUT ROWID
                """
            )
        log.info("sqlite mapping table ready path=%s", self.path)

    @staticmethod
    def _check_record(key, value) -> Record:
        # Anything but BLOBs means the file was written by someone else.
        if not isinstance(key, bytes) or not isinstance(value, bytes):
            raise StoreIOError(f"corrupted record for key {key!r}")
        return key, value

    # ---- Contract methods -------------------------------------------------

    def get(self, key: bytes) -> Optional[bytes]:
        self._check_key(key)
        with self._conn() as con:
            row = con.execute("SELECT key, value FROM mappings WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        return self._check_record(*row)[1]

    def put(self, key: bytes, value: bytes) -> None:
        self._check_key(key)
        self._check_value(value)
        with self._conn() as con:
            con.execute(
                """
                INSERT INTO mappings (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )

    def delete(self, key: bytes) -> None:
        self._check_key(key)
        with self._conn() as con:
            con.execute("DELETE FROM mappings WHERE key = ?", (key,))

    def iterate(self) -> Iterator[Record]:
        with self._conn() as con:
            con.execute("BEGIN")
            cur = con.cursor()
            try:
                for key, value in cur.execute("SELECT key, value FROM mappings ORDER BY key"):
                    yield self._check_record(key, value)
            finally:
                cur.close()
                if con.in_transaction:
                    con.execute("ROLLBACK")
