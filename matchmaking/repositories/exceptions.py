"""Custom exceptions for the repository layer."""

from __future__ import annotations

from typing import Optional


class RepositoryError(RuntimeError):
    """Base exception raised when a repository operation fails."""


class DuplicateKeyRepositoryError(RepositoryError):
    """Raised when a write violates a unique index (email, member id, profile owner)."""

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundRepositoryError(RepositoryError):
    """Raised when an expected user or profile document is missing."""


__all__ = [
    "DuplicateKeyRepositoryError",
    "NotFoundRepositoryError",
    "RepositoryError",
]
