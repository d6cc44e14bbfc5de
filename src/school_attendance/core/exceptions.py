from __future__ import annotations

from typing import Mapping, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    ``errors`` maps a field name to a human readable message.
    """

    def __init__(self, message: str = "The given data was invalid.", errors: Optional[Mapping[str, str]] = None):
        super().__init__(message)
        self.errors = dict(errors or {})

    @classmethod
    def for_field(cls, field_name: str, message: str) -> "ValidationError":
        return cls(message, {field_name: message})


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record or user does not exist."""


class ConflictError(DomainError):
    """Raised by repositories when a uniqueness constraint is violated."""
