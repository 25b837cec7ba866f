"""Error taxonomy for the arrival log.

The store raises :class:`StorageError`; the recorder and the history reader
wrap it into :class:`RecordingError` / :class:`ReadError`. Nothing past
:class:`~arrival_log.actions.ArrivalActions` sees an exception.
"""

from typing import Optional


class ArrivalLogError(Exception):
    """Base exception for the arrival log."""


class StorageError(ArrivalLogError):
    """The persistence medium is unavailable (disk, connection, permissions)."""


class InvalidEventError(ArrivalLogError, ValueError):
    """Raised when an event argument has the wrong type."""


class RecordingError(ArrivalLogError):
    """Write path failure."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ReadError(ArrivalLogError):
    """Read path failure."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
