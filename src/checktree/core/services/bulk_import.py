# ♥♥─── Bulk Import Parsing ────────────────────────────────────────────────────────
"""Turn pasted text into checklist labels."""

from __future__ import annotations

import re
from typing import NamedTuple

from checktree.custom_logger import log, logged
from checktree.core.exceptions import BulkImportError


# ─── Constants ─────────────────────────────────────────────────────────────────
DEFAULT_MAX_IMPORT_ITEMS = 500
DEFAULT_PREVIEW_LIMIT = 10

# Markers are stripped in this order: bullets, numbering, checkbox.
BULLET_PATTERN = re.compile(r"^[\s•\-–—*]+")
NUMBER_PATTERN = re.compile(r"^\d+[.)]\s*")
CHECKBOX_PATTERN = re.compile(r"^\[\s*[xX\s]\s*\]\s*")


class ImportPreview(NamedTuple):
    """The first few parsed labels and how many were left out."""

    items: list[str]
    remaining: int


def strip_list_marker(line: str) -> str:
    """Remove a leading bullet, number or checkbox from one trimmed line."""
    stripped = BULLET_PATTERN.sub("", line, count=1)
    stripped = NUMBER_PATTERN.sub("", stripped, count=1)
    stripped = CHECKBOX_PATTERN.sub("", stripped, count=1)
    return stripped.strip()


@logged
def parse_bulk_text(text: str) -> list[str]:
    """Split pasted text into one label per non-empty line.

    At most one leading marker of each kind is dropped, in the order bullet,
    number, checkbox: ``- [x] Buy milk`` becomes ``Buy milk``.

    :param text: Raw pasted text.
    :returns: Labels in input order.
    """
    if not text or not text.strip():
        return []
    labels = []
    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed:
            continue
        label = strip_list_marker(trimmed)
        if label:
            labels.append(label)
    log.debug("Parsed {} checklist labels from pasted text", len(labels))
    return labels


def validate_import_size(items: list[str], max_items: int = DEFAULT_MAX_IMPORT_ITEMS) -> list[str]:
    """Check that an import has at least one and at most ``max_items`` labels.

    :raises BulkImportError: If the list is empty or too long.
    """
    if not items:
        msg = "No valid checklist items found. Please enter at least one item."
        raise BulkImportError(msg)
    if len(items) > max_items:
        msg = f"Too many items. Please limit to {max_items} items per import."
        raise BulkImportError(msg)
    return items


def preview(items: list[str], limit: int = DEFAULT_PREVIEW_LIMIT) -> ImportPreview:
    """Return the first ``limit`` labels and the count of the rest."""
    return ImportPreview(items=items[:limit], remaining=max(len(items) - limit, 0))
