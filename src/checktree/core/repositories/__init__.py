from __future__ import annotations

from .base_vault import BaseVault
from .item_store import UPDATABLE_FIELDS, OrderedItemStore
from .checklist_vault import ChecklistVault


__all__ = ["UPDATABLE_FIELDS", "BaseVault", "ChecklistVault", "OrderedItemStore"]
