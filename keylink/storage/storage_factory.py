"""
Storage factory – switch storage backend from config (lazy env version)
======================================================================

Centralizes selection of the mapping-table backend so the rest of the app
stays ignorant of where data lives.

- Reads environment **at call time** to avoid stale values in tests.
- Imports the Postgres backend **only if** it is selected.

Environment variables
---------------------
- KEYLINK_STORAGE_BACKEND: "sqlite" (default), "memory" or "postgres"
- KEYLINK_DB_PATH:         sqlite file (default "keylink_key_to_url.db")
- KEYLINK_DB_DSN:          DSN string if backend=="postgres"
"""

import logging
import os
from typing import Optional

from keylink.storage.base import BaseMappingStore
from keylink.storage.sqlite_storage import DEFAULT_DB_PATH, SqliteStorage
from keylink.storage.storage import Storage

log = logging.getLogger("keylink.storage")


def get_storage(backend: Optional[str] = None, **kwargs) -> BaseMappingStore:
    """
    Return a mapping store based on configuration.

    Parameters
    ----------
    backend : str, optional
        "sqlite", "memory" or "postgres". If omitted, reads KEYLINK_STORAGE_BACKEND.
    kwargs : dict
        Extra args for the backend: path="..." for sqlite, dsn="..." for postgres.

    Returns
    -------
    BaseMappingStore

    Raises
    ------
    ValueError
        Unknown backend, or postgres selected without a DSN.
    StoreIOError
        The selected backend could not open its table.
    """
    be = (backend or os.getenv("KEYLINK_STORAGE_BACKEND", "sqlite")).strip().lower()
    log.info("Selected storage backend: %r", be)

    if be == "memory":
        return Storage()

    if be == "sqlite":
        path = kwargs.get("path") or os.getenv("KEYLINK_DB_PATH", DEFAULT_DB_PATH)
        return SqliteStorage(path)

    if be == "postgres":
        dsn = kwargs.get("dsn") or os.getenv("KEYLINK_DB_DSN", "")
        if not dsn:
            raise ValueError("DB_DSN is required for postgres backend (env KEYLINK_DB_DSN)")
        # Local import to avoid hard dependency when not using postgres
        from keylink.storage.db_storage import DBStorage
        return DBStorage(dsn=dsn, create_schema=kwargs.get("create_schema", True))

    raise ValueError(f"Unknown storage backend: {be!r}")
