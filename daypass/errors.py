from __future__ import annotations

from typing import Optional


class DayPassError(Exception):
    """Base class for errors surfaced to the UI."""


class ValidationError(DayPassError, ValueError):
    """A required field is missing or a value is out of range."""


class NotFoundError(DayPassError):
    """The batch or product being operated on does not exist."""


class StoreError(DayPassError):
    """The catalog store call failed."""


class MatrixSaveError(StoreError):
    """
    One upsert of a product matrix save failed.

    Entries before the failing one are already written; nothing after it is.
    """

    def __init__(self, message: str, *, day: int, category: str, written: int, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.day = day
        self.category = category
        self.written = written
        self.cause = cause


class AuthError(DayPassError):
    """Sign-in or sign-up rejected by the auth provider."""
