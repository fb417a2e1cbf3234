# studio_dashboard/exceptions.py
from __future__ import annotations


class DomainError(Exception):
    """Base class for domain-level errors."""
    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when user input is rejected by a guard (e.g. non-positive amount)."""


class NotFoundError(DomainError):
    """Raised when a referenced contract, envelope or share link is absent."""


class StoreError(DomainError):
    """Raised when the document store rejects a read or write."""
