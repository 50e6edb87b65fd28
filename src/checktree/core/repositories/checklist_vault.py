# ♥♥─── Checklist Vault ─────────────────────────────────────────────────────────
from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from sqlmodel import col, select

from checktree.ui import icons
from checktree.core.models import ChecklistItem, utc_now
from checktree.custom_logger import log
from checktree.core.exceptions import PersistenceError

from .base_vault import BaseVault
from .item_store import UPDATABLE_FIELDS


if TYPE_CHECKING:
    from collections.abc import Sequence

    from checktree.config import StorageSettings


def _copy_row(item: ChecklistItem) -> ChecklistItem:
    """Detach a row from any session by copying its column values."""
    return ChecklistItem(**item.model_dump())


# ─── Checklist Vault ──────────────────────────────────────────────────────────
class ChecklistVault(BaseVault):
    """SQLite-backed ordered item store for checklist rows."""

    def __init__(self, vault_name: str = "checklist_vault", db_url: str | None = None, echo: bool = False, storage: StorageSettings | None = None) -> None:
        """Initialize the vault on the configured database file.

        :param vault_name: The name of this vault instance.
        :param db_url: The database connection URL (derived from ``storage`` if None).
        :param echo: If True, SQLAlchemy will log all generated SQL.
        :param storage: Storage settings used to locate the database file.
        """
        if db_url is None:
            if storage is None:
                from checktree.config import get_settings  # noqa: PLC0415

                storage = get_settings().storage
            db_url = storage.get_database_url()
        super().__init__(vault_name=vault_name, db_url=db_url, echo=echo)

    # ─── Blocking Session Work ────────────────────────────────────────────────
    def _list_rows(self, task_id: str) -> list[ChecklistItem]:
        with self.session_scope("list", commit=False) as session:
            rows = session.exec(select(ChecklistItem).where(col(ChecklistItem.task_id) == task_id)).all()
            return [_copy_row(row) for row in rows]

    def _insert_rows(self, operation: str, items: Sequence[ChecklistItem]) -> list[ChecklistItem]:
        with self.session_scope(operation) as session:
            session.add_all(items)
            session.flush()
            return [_copy_row(item) for item in items]

    def _update_row(self, item_id: str, fields: dict[str, Any]) -> None:
        with self.session_scope("update") as session:
            existing = session.get(ChecklistItem, item_id)
            if existing is None:
                msg = f"Checklist item {item_id} not found"
                raise PersistenceError(msg, operation="update")
            for field_name, value in fields.items():
                setattr(existing, field_name, value)
            existing.updated_at = utc_now()
            session.add(existing)

    def _delete_row(self, item_id: str) -> bool:
        with self.session_scope("delete") as session:
            existing = session.get(ChecklistItem, item_id)
            if existing is None:
                return False
            session.delete(existing)
            return True

    # ─── Ordered Item Store ───────────────────────────────────────────────────
    async def list(self, task_id: str) -> Sequence[ChecklistItem]:
        """Return all rows belonging to a task, in insertion order.

        :param task_id: The owning task.
        :returns: Detached row copies.
        """
        items = await asyncio.to_thread(self._list_rows, task_id)
        log.debug("{} vault: loaded {} rows for task {}", self.vault_name, len(items), task_id)
        return items

    async def insert(self, item: ChecklistItem) -> ChecklistItem:
        """Insert a single row.

        :param item: The row to store.
        :returns: A copy of the stored row.
        """
        (stored,) = await asyncio.to_thread(self._insert_rows, "insert", [item])
        log.debug("{} vault: {} {}", self.vault_name, icons.CREATE, stored.id)
        return stored

    async def insert_batch(self, items: Sequence[ChecklistItem]) -> Sequence[ChecklistItem]:
        """Insert several rows in one transaction.

        :param items: The rows to store.
        :returns: Copies of the stored rows.
        """
        if not items:
            return []
        stored = await asyncio.to_thread(self._insert_rows, "insert_batch", list(items))
        log.debug("{} vault: {} {} rows", self.vault_name, icons.CREATE, len(stored))
        return stored

    async def update(self, item_id: str, fields: dict[str, Any]) -> None:
        """Apply a partial update to a row.

        :param item_id: The row to update.
        :param fields: Column values to write.
        :raises PersistenceError: If the row does not exist or a field is not updatable.
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            msg = f"Fields cannot be updated: {', '.join(sorted(unknown))}"
            raise PersistenceError(msg, operation="update")
        await asyncio.to_thread(self._update_row, item_id, dict(fields))
        log.debug("{} vault: {} {} {}", self.vault_name, icons.RELOAD, item_id, sorted(fields))

    async def delete(self, item_id: str) -> None:
        """Delete a row. Children are left untouched.

        :param item_id: The row to delete.
        """
        if not await asyncio.to_thread(self._delete_row, item_id):
            log.warning("{} vault: delete skipped, {} not found", self.vault_name, item_id)
            return
        log.debug("{} vault: {} {}", self.vault_name, icons.ERASE, item_id)
