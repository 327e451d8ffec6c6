"""Typed failures raised by the trade repository."""


class JournalError(Exception):
    """Base class for trade journal failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(JournalError):
    """A required field is missing or has the wrong type. Raised before any store call."""


class NotFound(JournalError):
    """The store has no row matching a point lookup."""


class StoreError(JournalError):
    """Transport or backend failure, including permission failures."""
