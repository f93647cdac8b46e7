"""Exception hierarchy shared by the store, indexer and annotation client."""

from __future__ import annotations


class OcrIndexError(Exception):
    """Base class for errors raised by ocrindex."""


class StoreError(OcrIndexError):
    """Failure talking to the key-value store."""


class StoreConnectionError(StoreError):
    """The store could not be reached.

    Reported through logging only; commands issued afterwards fail on their own.
    """


class StoreOperationError(StoreError):
    """A single store command failed."""

    def __init__(self, operation: str, key: str, reason: str = "") -> None:
        self.operation = operation
        self.key = key
        self.reason = reason
        message = f"{operation} {key!r} failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class AnnotationServiceError(OcrIndexError):
    """The image annotation service rejected a whole batch."""
