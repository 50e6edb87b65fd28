from __future__ import annotations

from .edit_modal import FieldType, FormField, BulkImportModal, GenericEditModal, create_item_modal
from .confirm_modal import GenericConfirmModal, show_delete_confirm


__all__ = [
    "BulkImportModal",
    "FieldType",
    "FormField",
    "GenericConfirmModal",
    "GenericEditModal",
    "create_item_modal",
    "show_delete_confirm",
]
