# ♥♥─── Checklist Services ───────────────────────────────────────────────────────
from __future__ import annotations

from .bulk_import import ImportPreview, preview, parse_bulk_text, validate_import_size
from .tree_builder import (
    iter_tree,
    build_tree,
    children_of,
    flatten_tree,
    sibling_group,
    next_position,
    count_completed,
    find_item_by_id,
    update_item_in_tree,
    remove_item_from_tree,
    collect_descendant_ids,
)
from .store_factory import build_store
from .checklist_manager import Notice, ChecklistManager
from .reorder_coordinator import DragPhase, ReorderCoordinator, array_move, dense_positions, persist_positions


__all__ = [
    "ChecklistManager",
    "DragPhase",
    "ImportPreview",
    "Notice",
    "ReorderCoordinator",
    "array_move",
    "build_store",
    "build_tree",
    "children_of",
    "collect_descendant_ids",
    "count_completed",
    "dense_positions",
    "find_item_by_id",
    "flatten_tree",
    "iter_tree",
    "next_position",
    "parse_bulk_text",
    "persist_positions",
    "preview",
    "remove_item_from_tree",
    "sibling_group",
    "update_item_in_tree",
    "validate_import_size",
]
