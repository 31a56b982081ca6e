"""
Error taxonomy for Keylink.

Every failure the service knows how to render derives from `KeylinkError`, so
the API layer can map exceptions to HTTP status codes in one place:

    ValidationError -> 400 (/set_url) or 404 (/get_url)
    StoreIOError    -> 400 (write path) or 500 (read/list path)
    DecodeError     -> 500
    StartupError    -> process exits before serving

A missing key is not an error: stores return None and the API answers 404.
"""


class KeylinkError(Exception):
    """Base class for all Keylink errors."""


class ValidationError(KeylinkError, ValueError):
    """A required request field is missing or cannot be used as a key."""


class StoreIOError(KeylinkError):
    """The underlying mapping table could not be read or written."""


class DecodeError(KeylinkError):
    """Stored bytes could not be decoded as UTF-8 text."""


class StartupError(KeylinkError):
    """Configuration or storage problem that prevents the service from starting."""
