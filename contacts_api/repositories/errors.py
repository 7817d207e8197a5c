from __future__ import annotations


class StoreError(Exception):
    """Raised when a backing store (SQL or Redis) fails unexpectedly."""


class ConstraintViolation(StoreError):
    """Raised when a uniqueness or foreign-key constraint rejects a write."""

    def __init__(self, message: str, field: str = ""):
        super().__init__(message)
        self.message = message
        self.field = field


__all__ = ["StoreError", "ConstraintViolation"]
