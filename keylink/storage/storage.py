"""
Storage module for Keylink (in-memory implementation).

Responsibilities:
    - Hold the key -> URL table in a dict of bytes
    - Serialize concurrent access with a single lock
    - Hand out point-in-time snapshots for iteration

Design:
    - Reference implementation of the BaseMappingStore contract.
    - Fast and deterministic for unit/integration tests.
    - NOT durable: everything is lost when the process exits. Use the sqlite
      or Postgres backend for anything that must survive a restart.

LLM Prompt Example:
    "Explain how this in-memory storage can be swapped for a database-backed
     layer without changing the manager or API code, by adhering to a narrow,
     explicit BaseMappingStore interface."
"""

import threading
from typing import Dict, Iterator, Optional

from .base import BaseMappingStore, Record


class Storage(BaseMappingStore):
    name = "memory"

    def __init__(self):
        """
        Initialize an empty table.

        Internal schema:
            self.mappings = {key_bytes: value_bytes}
        """
        self.mappings: Dict[bytes, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: bytes) -> Optional[bytes]:
        self._check_key(key)
        with self._lock:
            return self.mappings.get(key)

    def put(self, key: bytes, value: bytes) -> None:
        self._check_key(key)
        self._check_value(value)
        with self._lock:
            self.mappings[key] = value

    def delete(self, key: bytes) -> None:
        self._check_key(key)
        with self._lock:
            self.mappings.pop(key, None)

    def iterate(self) -> Iterator[Record]:
        """
        Yield a sorted snapshot of the table.

        The snapshot is copied under the lock when iteration starts, so writers
        running during iteration never tear a record; they may or may not be
        reflected in the output.
        """
        with self._lock:
            snapshot = sorted(self.mappings.items())
        yield from snapshot
