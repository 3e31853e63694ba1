"""
Error kinds shared by the record store, the resolver and the bridge.

Store failures are raised as StoreError subclasses and converted into
result objects carrying an ErrorKind before they reach the UI.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NOT_CONFIGURED = "not_configured"
    CONSTRAINT_VIOLATION = "constraint_violation"
    IO_FAILURE = "io_failure"
    BRIDGE_UNAVAILABLE = "bridge_unavailable"
    INVALID_RECORD = "invalid_record"


class StoreError(RuntimeError):
    """Raised for record store failures."""

    kind: ErrorKind = ErrorKind.IO_FAILURE


class StoreNotConfiguredError(StoreError):
    """The library database path has not been set or could not be opened."""

    kind = ErrorKind.NOT_CONFIGURED


class ConstraintViolationError(StoreError):
    """An insert collided with an existing unique key."""

    kind = ErrorKind.CONSTRAINT_VIOLATION


class StoreIOError(StoreError):
    kind = ErrorKind.IO_FAILURE


class BridgeUnavailableError(RuntimeError):
    """The content surface is gone or did not answer in time."""

    kind = ErrorKind.BRIDGE_UNAVAILABLE
