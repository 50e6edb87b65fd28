# ♥♥─── Validators ─────────────────────────────────────────────────────────────────
from __future__ import annotations

from typing import Any
from datetime import UTC, datetime

from checktree.core.exceptions import ItemValidationError


def clean_item_text(value: Any) -> str:
    """Trim a checklist label and reject blank ones.

    :param value: The raw user input.
    :returns: The trimmed label.
    :raises ItemValidationError: If nothing is left after trimming.
    """
    if value is None:
        msg = "Checklist item text is required."
        raise ItemValidationError(msg)
    text = str(value).strip()
    if not text:
        msg = "Checklist item text cannot be empty."
        raise ItemValidationError(msg)
    return text


def ensure_utc(value: datetime | None) -> datetime | None:
    """Return the datetime as timezone-aware UTC (naive values are assumed UTC)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def utc_now() -> datetime:
    """Current time in UTC, truncated to whole seconds."""
    return datetime.now(UTC).replace(microsecond=0)
