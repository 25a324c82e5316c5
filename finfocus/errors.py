"""Exceptions raised by the FinFocus data layer."""


class FinFocusError(Exception):
    """Base exception for FinFocus operations."""
    pass


class StorageError(FinFocusError):
    """A data file could not be read, decoded or written."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class ValidationError(FinFocusError):
    """A record was rejected; ``details`` holds the validator's error payload."""

    def __init__(self, details: dict):
        super().__init__(details.get("message", details.get("error", "invalid record")))
        self.details = details
