"""
Custom exceptions for the application.

Every business failure raised by the marketplace core derives from
MarketplaceError and carries a stable ``kind`` plus an HTTP-equivalent
``status_code``. The API layer renders them verbatim; nothing in the core
retries them.
"""

from typing import List, Optional


class MarketplaceError(Exception):
    """Base class for typed, non-retryable marketplace failures."""

    kind = "INTERNAL"
    status_code = 500

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = list(errors) if errors else [message]

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message, "errors": self.errors}


# ------------------- NOT FOUND -------------------
class NotFoundError(MarketplaceError):
    kind = "NOT_FOUND"
    status_code = 404


class UserNotFoundError(NotFoundError):
    """Raised when a user referenced by id or keyword does not exist."""


class BookNotFoundError(NotFoundError):
    """Raised when a book referenced by id or ISBN does not exist."""


# ------------------- CONFLICT -------------------
class ConflictError(MarketplaceError):
    kind = "CONFLICT"
    status_code = 409


class BookAlreadyExistsError(ConflictError):
    """ISBN is already registered for a different title/author."""


class InventoryFullError(ConflictError):
    """Adding a new book record would exceed the pool cap."""


class UserAlreadyExistsError(ConflictError):
    """Email or username is already taken."""


class ConcurrentUpdateError(ConflictError):
    """Another transaction committed a change to the same row first."""


# ------------------- VALIDATION -------------------
class ValidationFailure(MarketplaceError):
    """
    A precondition was not met.

    Carries a list of human-readable reasons; the first one doubles as the
    message.
    """

    kind = "VALIDATION"
    status_code = 400

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = [errors]
        super().__init__(errors[0] if errors else "Validation failed", errors)


# ------------------- INTERNAL -------------------
class PersistenceError(MarketplaceError):
    """Unexpected failure of the underlying store."""

    kind = "INTERNAL"
    status_code = 500
