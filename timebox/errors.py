"""
Exception types raised by the timebox planner core.
"""


class TimeboxError(Exception):
    """Base class for planner errors."""


class PersistenceError(TimeboxError):
    """Raised when a document store round-trip fails.

    The original error is chained as ``__cause__``.
    """

    def __init__(self, key: str, operation: str, message: str):
        self.key = key
        self.operation = operation
        super().__init__(f"{operation} failed for '{key}': {message}")


class MalformedDocumentError(PersistenceError):
    """Raised when a stored document was fetched but failed validation."""


class ReadOnlySessionError(TimeboxError):
    """Raised when an editing operation is attempted on a read-only view."""
