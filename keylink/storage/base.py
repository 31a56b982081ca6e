"""
Base storage interface for Keylink.

Purpose:
    Define the small, stable contract every mapping-table backend (sqlite,
    Postgres, in-memory) implements, so request handlers never care where the
    key -> URL table lives.

Contract:
    - Keys are non-empty `bytes`, values are `bytes`. The store is
      content-agnostic; URL/UTF-8 semantics belong to the handler layer.
    - `get` returns None for an absent key (not an error).
    - `put` overwrites unconditionally; `delete` of an absent key is a no-op.
    - Writes are durable once the call returns.
    - `iterate` lazily yields every committed (key, value) pair exactly once,
      ordered by key, and never yields a torn record.
    - Backend failures surface as `keylink.errors.StoreIOError`.

Testing & Coverage:
    Abstract methods are not executed directly in tests and are marked
    `# pragma: no cover`.

LLM Prompt Example:
    "Show how a narrow, explicit storage interface enables dependency
    injection and easy backend swapping without touching service code."
"""

from abc import ABC, abstractmethod
from typing import Iterator, Optional, Tuple

Record = Tuple[bytes, bytes]


class BaseMappingStore(ABC):
    """Abstract base class for mapping-table backends."""

    name = "base"

    @abstractmethod  # pragma: no cover
    def get(self, key: bytes) -> Optional[bytes]:
        """
        Return the value stored for `key`, or None if the key is absent.

        Raises:
            StoreIOError: If the table cannot be read.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def put(self, key: bytes, value: bytes) -> None:
        """
        Insert or overwrite the value for `key` (last writer wins).

        Raises:
            StoreIOError: If the write could not be committed.

        LLM Prompt Example:
            "Design an upsert API that maps onto INSERT ... ON CONFLICT
            DO UPDATE in SQL and SET in a key-value store."
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def delete(self, key: bytes) -> None:
        """
        Remove `key` if present. Deleting an absent key succeeds silently.

        Raises:
            StoreIOError: If the delete could not be committed.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def iterate(self) -> Iterator[Record]:
        """
        Lazily yield every committed (key, value) pair in key order.

        Raises:
            StoreIOError: If any record cannot be read back as bytes.
        """
        raise NotImplementedError

    # ---- Shared argument checks -------------------------------------------

    @staticmethod
    def _check_key(key: bytes) -> None:
        if not isinstance(key, bytes) or not key:
            raise ValueError("key must be a non-empty bytes object")

    @staticmethod
    def _check_value(value: bytes) -> None:
        if not isinstance(value, bytes):
            raise ValueError("value must be a bytes object")
