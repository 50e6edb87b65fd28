# ♥♥─── Checklist Errors ─────────────────────────────────────────────────────────
from __future__ import annotations


class ChecklistError(Exception):
    """Base class for all checklist failures."""


class ItemValidationError(ChecklistError, ValueError):
    """Raised before any I/O when an operation's input is unusable."""


class BulkImportError(ItemValidationError):
    """Raised when pasted import text yields no items or too many."""


class PersistenceError(ChecklistError):
    """A store operation failed.

    :param message: Human readable description.
    :param operation: The store operation that failed (``list``, ``insert``...).
    """

    def __init__(self, message: str, operation: str | None = None) -> None:
        """Initialize the error with the failing operation name."""
        super().__init__(message)
        self.operation: str | None = operation

    def __str__(self) -> str:
        """Return the message, prefixed with the operation when known."""
        base_message = self.args[0] if self.args else "Store operation failed"
        if self.operation:
            return f"{self.operation}: {base_message}"
        return base_message
