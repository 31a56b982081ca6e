"""
LinkManager module for Keylink.

Responsibilities:
    - Resolve a short key to its URL
    - Upsert or delete a mapping from a single optional-URL request
    - List every registered mapping
    - Own the bytes <-> str boundary: the store sees bytes, callers see text

Design notes:
    - Each public method performs exactly one store call, so each request is a
      single operation against the table and nothing needs rolling back.
    - "url absent" on the set endpoint means delete. That overload is turned
      into an explicit `Upsert(url)` / `Delete()` command here, so the store's
      `put` always receives a real value.
    - Any non-empty string is a legal key; there is no generation or format
      policy.
    - Storage is an injected dependency shared by every request.

LLM Prompt Example:
    "Show how a thin service layer can translate HTTP-level requests into
    single storage operations while keeping encoding concerns out of the
    storage contract."
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Union

from keylink.errors import DecodeError, ValidationError
from keylink.storage.base import BaseMappingStore

log = logging.getLogger("keylink.manager")


@dataclass(frozen=True)
class Upsert:
    """Store `url` under the key, replacing any previous value."""
    url: str


@dataclass(frozen=True)
class Delete:
    """Remove the key if present."""


SetCommand = Union[Upsert, Delete]


class LinkManager:
    """
    Translates key/URL requests into mapping-store calls.

    LLM Prompt Example:
        "Explain how DI of a storage handle lets tests run handlers against an
        isolated table in a temporary directory."
    """

    def __init__(self, storage: BaseMappingStore):
        self.storage = storage

    # ---------------------------------------------------------------------
    # Encoding / Validation Helpers
    # ---------------------------------------------------------------------
    @staticmethod
    def _encode_key(key: Optional[str]) -> bytes:
        """
        Validate a request key and encode it for the store.

        Raises:
            ValidationError: If the key is missing, empty, or not encodable
                as UTF-8 (e.g. a lone surrogate from a JSON escape).
        """
        if not key:
            raise ValidationError("key is required")
        try:
            return key.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ValidationError(f"key is not valid unicode: {exc}") from exc

    @staticmethod
    def _decode(raw: bytes, what: str) -> str:
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"stored {what} is not valid UTF-8: {raw[:32]!r}") from exc

    @staticmethod
    def command_for(url: Optional[str]) -> SetCommand:
        """Map an optional URL to the command it stands for."""
        if url is None:
            return Delete()
        return Upsert(url)

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    def resolve(self, key: Optional[str]) -> Optional[str]:
        """
        Look up the URL registered for `key`.

        Returns:
            Optional[str]: The URL, or None if the key is not registered.

        Raises:
            ValidationError: Missing or unusable key.
            StoreIOError: The table could not be read.
            DecodeError: The stored URL is not valid UTF-8.
        """
        raw = self.storage.get(self._encode_key(key))
        if raw is None:
            return None
        return self._decode(raw, "url")

    def upsert_or_delete(self, key: Optional[str], url: Optional[str]) -> SetCommand:
        """
        Register `url` under `key`, or delete the key when `url` is None.

        Returns:
            SetCommand: The command that was applied.

        Raises:
            ValidationError: Missing or unusable key, or a URL that cannot
                be encoded as UTF-8.
            StoreIOError: The write could not be committed.
        """
        command = self.command_for(url)
        self.apply(key, command)
        return command

    def apply(self, key: Optional[str], command: SetCommand) -> None:
        encoded_key = self._encode_key(key)
        if isinstance(command, Upsert):
            try:
                value = command.url.encode("utf-8")
            except UnicodeEncodeError as exc:
                raise ValidationError(f"url is not valid unicode: {exc}") from exc
            self.storage.put(encoded_key, value)
            log.debug("upserted key=%r", key)
        elif isinstance(command, Delete):
            self.storage.delete(encoded_key)
            log.debug("deleted key=%r", key)
        else:
            raise TypeError(f"unsupported command: {command!r}")

    def list_all(self) -> Dict[str, str]:
        """
        Collect every mapping into a key -> URL dict.

        The whole table is read before anything is returned; if any record
        fails, the caller gets the exception and no partial result.

        Raises:
            StoreIOError: A record could not be read back.
            DecodeError: A key or URL is not valid UTF-8.
        """
        mapping: Dict[str, str] = {}
        for raw_key, raw_url in self.storage.iterate():
            mapping[self._decode(raw_key, "key")] = self._decode(raw_url, "url")
        return mapping
