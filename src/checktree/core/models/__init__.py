# ♥♥─── CheckTree Model Initialization ──────────────────────────────────────────
"""Initialize the models package."""

from __future__ import annotations

from .base_model import CheckTreeSQLModel, CheckTreeBaseModel
from .validators import utc_now, ensure_utc, clean_item_text
from .checklist_model import ChecklistItem, ChecklistNode, PositionUpdate, ChecklistItemCreate, new_item_id


__all__ = [
    "CheckTreeBaseModel",
    "CheckTreeSQLModel",
    "ChecklistItem",
    "ChecklistItemCreate",
    "ChecklistNode",
    "PositionUpdate",
    "clean_item_text",
    "ensure_utc",
    "new_item_id",
    "utc_now",
]
