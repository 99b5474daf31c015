from __future__ import annotations


class PasteError(Exception):
    """Base class for paste-related errors."""


class InvalidPasteParameters(PasteError):
    """Raised when creating a paste with invalid parameters."""


class PasteNotFoundError(PasteError):
    """Raised when a paste cannot be found."""


class StorageError(PasteError):
    """
    Raised when the persistence backend fails (connect, timeout, write).

    Retriable: no partial state is left behind when this is raised.
    """
