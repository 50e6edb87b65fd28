# ♥♥─── API Models ───────────────────────────────────────────────────────────────
from __future__ import annotations

from typing import Any

from pydantic import Field, BaseModel, ConfigDict

from checktree.core.exceptions import PersistenceError, ItemValidationError


# ─── Store Error Response ─────────────────────────────────────────────────────
class StoreErrorResponse(BaseModel):
    """Error body returned by the REST table API."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    message: str | None = Field(default=None, description="User-friendly error message.")
    code: str | None = Field(default=None, description="Backend error code, e.g. a SQLSTATE.")
    details: str | None = Field(default=None)
    hint: str | None = Field(default=None)


# ─── Store API Error ──────────────────────────────────────────────────────────
class StoreAPIError(PersistenceError):
    """Custom exception raised for errors originating from the REST store.

    :param message: The primary error message.
    :param status_code: The HTTP status code of the API response, if available.
    :param error_code: A backend-specific error code, if available.
    :param response_data: The raw response data from the API, if available.
    :param operation: The store operation that failed.
    """

    def __init__(self, message: str, status_code: int | None = None, error_code: str | None = None, response_data: Any | None = None, operation: str | None = None) -> None:
        """Initialize a custom exception raised for errors originating from the REST store."""
        super().__init__(message, operation=operation)
        self.status_code: int | None = status_code
        self.error_code: str | None = error_code
        self.response_data: Any | None = response_data

    def __str__(self) -> str:
        """Return a string representation of the error, including available details."""
        details_parts: list[str] = []
        if self.status_code is not None:
            details_parts.append(f"Status Code: {self.status_code}")
        if self.error_code:
            details_parts.append(f"Error Code: '{self.error_code}'")
        base_error_message = super().__str__()
        if details_parts:
            return f"{base_error_message} ({', '.join(details_parts)})"
        return base_error_message


# ─── Aliases ──────────────────────────────────────────────────────────────────
SuccessfulResponseData = dict[str, Any] | list[dict[str, Any]] | list[Any] | None


def _validate_not_empty_param(param_value: str | None, param_name: str) -> None:
    """Reject empty identifiers before any request is made.

    :param param_value: The value to check.
    :param param_name: The name used in the error message.
    :raises ItemValidationError: If the value is empty or blank.
    """
    if not param_value or not str(param_value).strip():
        msg = f"{param_name} cannot be empty."
        raise ItemValidationError(msg)
