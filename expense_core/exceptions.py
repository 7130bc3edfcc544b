"""Domain-specific exceptions for the expense tracker core."""

from typing import Dict, Optional


class ValidationError(ValueError):
    """Raised when a draft or filter does not meet validation requirements."""

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None) -> None:
        super().__init__(message)
        self.errors: Dict[str, str] = dict(errors or {})


class RecordNotFoundError(LookupError):
    """Raised when an expense record cannot be located."""


class PersistenceError(IOError):
    """Raised when the blob store encounters unrecoverable issues."""


class PersistenceWarning(UserWarning):
    """Emitted when loading or saving fails but the in-memory state stands."""
