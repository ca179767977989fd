"""Exceptions raised by api-snapshot.

Library code raises these; nothing is swallowed. The CLI catches SnapshotError
at the top level and turns it into an exit code.
"""

from __future__ import annotations


# =============================================================================
# Engine Errors
# =============================================================================


class SnapshotError(Exception):
    """Base class for snapshot engine errors."""


class EncodeError(SnapshotError):
    """A value could not be encoded as canonical JSON."""


class DecodeError(SnapshotError):
    """Bytes (response body or stored snapshot) are not valid JSON."""


class InvalidPathError(SnapshotError, ValueError):
    """A field path string is empty or has an empty segment."""


class PathNotFoundError(SnapshotError):
    """A field path does not resolve (missing key or non-object intermediate)."""

    def __init__(self, path: str, message: str | None = None) -> None:
        self.path = path
        super().__init__(message or f"couldn't find item at path: {path}")


class UnsupportedShapeError(SnapshotError):
    """A top-level JSON value has a shape the operation cannot handle."""

    def __init__(self, shape: str, context: str) -> None:
        self.shape = shape
        self.context = context
        super().__init__(f"Unrecognized type for {context}: {shape}")


class InvalidKeyError(SnapshotError, ValueError):
    """A snapshot key would escape the snapshot directory."""


class SnapshotNotFoundError(SnapshotError):
    """No snapshot is stored for the key."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"No snapshot stored for key: {key}")


class SnapshotIOError(SnapshotError):
    """Filesystem failure while reading or writing a snapshot."""


# =============================================================================
# Assertion Failures
# =============================================================================


class ResponseAssertionError(AssertionError):
    """An assertion about an HTTP response did not hold."""


class FieldAssertionError(ResponseAssertionError):
    """A field validator rejected a value."""


class SnapshotMismatchError(ResponseAssertionError, SnapshotError):
    """A response body differs from its recorded snapshot.

    Carries the request URL and the rendered diff so test output can show both.
    """

    def __init__(self, url: str, diff: str) -> None:
        self.url = url
        self.diff = diff
        super().__init__(
            f"Body test for url '{url}' failed.\n"
            f" See this diff for more detail:\n\n {diff}"
        )
