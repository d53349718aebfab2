"""Domain-specific exceptions for SheroKitchen Core.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from SheroCoreError for easy catching.
"""

from __future__ import annotations

from typing import Any


class SheroCoreError(Exception):
    """Base exception for all SheroKitchen Core errors.

    Users can catch this exception to handle any error raised by the
    package on purpose.
    """

    pass


class ConfigError(SheroCoreError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - The user settings file cannot be parsed
    - Remote store configuration is incomplete or malformed
    """

    pass


class StoreError(SheroCoreError):
    """Raised when a persistence store cannot complete an operation."""

    pass


class RemoteStoreError(StoreError):
    """Raised when a call to the remote store fails.

    This exception is raised when:
    - The network connection to the remote store fails
    - The remote store rejects the request (HTTP 4xx/5xx)
    - The remote store returns an unexpected response

    The in-memory collections are never updated when this is raised.
    """

    pass


class PartialWriteError(RemoteStoreError):
    """Raised when a bulk write fails part-way through.

    Attributes:
        written: Records the remote store confirmed before the failure.
        failed: Records that were not written (the failing one first).
    """

    def __init__(self, message: str, written: list[Any], failed: list[Any]) -> None:
        super().__init__(message)
        self.written = written
        self.failed = failed


class LocalStoreError(StoreError):
    """Raised when the local fallback store cannot be read or written."""

    pass


class InputError(SheroCoreError, ValueError):
    """Raised when user-supplied input is rejected."""

    pass


class InvalidNumberError(InputError):
    """Raised in strict parse mode when a value is not a number."""

    pass


class UnknownUnitError(InputError):
    """Raised when a measurement unit has no known multiplier."""

    pass


class InvalidRecordError(InputError):
    """Raised when a record is missing a required field."""

    pass


class ImportFormatError(SheroCoreError):
    """Raised when a bulk import source cannot be read."""

    pass
