"""Exceptions raised by the candidate search pipeline."""

from __future__ import annotations


class SearchError(Exception):
    """Base exception for search failures."""


class SearchValidationError(SearchError, ValueError):
    """Raised when the request itself is unusable (missing age bound, bad gender)."""


class ProfileIncompleteError(SearchError, ValueError):
    """Raised when the caller's own profile cannot drive a search."""


class SearchFailedError(SearchError, RuntimeError):
    """Raised when a store call fails; carries no internal detail."""

    def __init__(self, message: str = "search failed, please try again") -> None:
        super().__init__(message)


__all__ = [
    "ProfileIncompleteError",
    "SearchError",
    "SearchFailedError",
    "SearchValidationError",
]
