# ♥♥─── Checklist Manager ─────────────────────────────────────────────────────────
"""State holder and mutation engine for one task's checklist."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, NamedTuple

from checktree.ui import icons
from checktree.core.models import ChecklistItemCreate, clean_item_text
from checktree.custom_logger import log
from checktree.core.exceptions import PersistenceError, ItemValidationError

from .bulk_import import parse_bulk_text, validate_import_size
from .tree_builder import (
    iter_tree,
    build_tree,
    children_of,
    flatten_tree,
    next_position,
    count_completed,
    find_item_by_id,
    update_item_in_tree,
    remove_item_from_tree,
    collect_descendant_ids,
)


if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from checktree.config import ChecklistSettings
    from checktree.core.models import ChecklistNode
    from checktree.core.repositories import OrderedItemStore

    Listener = Callable[["ChecklistManager"], None]


class Notice(NamedTuple):
    """A transient message shown until ``expires_at`` (monotonic seconds)."""

    message: str
    expires_at: float


# ─── Checklist Manager ──────────────────────────────────────────────────────────
class ChecklistManager:
    """Owns the checklist forest of one task and every mutation made to it.

    Store failures never escape the public operations: they are logged, kept in
    :attr:`error` as a display string, and the operation returns a falsy value.
    Input problems raise :class:`ItemValidationError` before any store call.

    :param store: The ordered item store holding the rows.
    :param task_id: The task whose checklist is managed.
    :param settings: Batch sizes, limits and delete policy.
    :param clock: Monotonic clock used for notice expiry.
    """

    def __init__(self, store: OrderedItemStore, task_id: str, settings: ChecklistSettings | None = None, clock: Callable[[], float] = time.monotonic) -> None:
        if settings is None:
            from checktree.config import get_settings  # noqa: PLC0415

            settings = get_settings().checklist
        if not task_id or not task_id.strip():
            msg = "Task ID cannot be empty."
            raise ItemValidationError(msg)
        self.store = store
        self.task_id = task_id
        self.settings = settings
        self.roots: list[ChecklistNode] = []
        self.loading: bool = False
        self.error: str | None = None
        self.expanded: set[str] = set()
        self._notice: Notice | None = None
        self._clock = clock
        self._listeners: list[Listener] = []

    # ─── Listeners ────────────────────────────────────────────────────────────
    def subscribe(self, callback: Listener) -> Callable[[], None]:
        """Register a callback run after every state change.

        :returns: A function that removes the callback again.
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def notify(self) -> None:
        """Run every registered listener with this manager."""
        for callback in list(self._listeners):
            callback(self)

    # ─── Errors and Notices ───────────────────────────────────────────────────
    def record_failure(self, operation: str, error: PersistenceError) -> None:
        """Log a store failure and keep its message in :attr:`error`."""
        log.error("{} Checklist {} failed for task {}: {}", icons.ERROR, operation, self.task_id, error)
        self.error = str(error)
        self.notify()

    def clear_error(self) -> None:
        self.error = None
        self.notify()

    def show_notice(self, message: str) -> None:
        """Show a success message for ``notice_seconds``."""
        self._notice = Notice(message, self._clock() + self.settings.notice_seconds)
        log.success("{} {}", icons.CHECK, message)
        self.notify()

    @property
    def notice(self) -> str | None:
        """The current notice text, or None once it has expired."""
        if self._notice is None:
            return None
        if self._clock() >= self._notice.expires_at:
            self._notice = None
            return None
        return self._notice.message

    # ─── Snapshots ────────────────────────────────────────────────────────────
    def snapshot(self) -> list[ChecklistNode]:
        """Deep copy of the forest, used to roll back optimistic patches."""
        return [root.snapshot() for root in self.roots]

    def restore(self, roots: list[ChecklistNode]) -> None:
        self.roots = roots
        self._prune_expanded()
        self.notify()

    def get_item(self, item_id: str) -> ChecklistNode:
        """Return the node for ``item_id``.

        :raises ItemValidationError: If the item is not in the current forest.
        """
        node = find_item_by_id(self.roots, item_id)
        if node is None:
            msg = f"Checklist item {item_id} not found."
            raise ItemValidationError(msg)
        return node

    # ─── Fetch ────────────────────────────────────────────────────────────────
    async def refresh(self) -> bool:
        """Re-fetch every row and rebuild the forest from scratch.

        :returns: True when the rebuild succeeded.
        """
        self.loading = True
        try:
            items = await self.store.list(self.task_id)
        except PersistenceError as e:
            self.record_failure("refresh", e)
            return False
        finally:
            self.loading = False
        self.roots = build_tree(items)
        self.error = None
        self._prune_expanded()
        log.debug("Rebuilt checklist for task {}: {} items, {} roots", self.task_id, len(items), len(self.roots))
        self.notify()
        return True

    # ─── Add ──────────────────────────────────────────────────────────────────
    async def add_item(self, text: str, parent_id: str | None = None) -> ChecklistNode | None:
        """Persist a new item at the end of its sibling group, then rebuild.

        :param text: The label; trimmed, must not be blank.
        :param parent_id: The parent item, or None for a root item.
        :returns: The new node, or None when the store failed.
        :raises ItemValidationError: If the text is blank or the parent is unknown.
        """
        label = clean_item_text(text)
        if parent_id is not None:
            self.get_item(parent_id)
        siblings = self.roots if parent_id is None else children_of(self.roots, parent_id)
        position = next_position(siblings)
        item = ChecklistItemCreate(task_id=self.task_id, parent_id=parent_id, text=label, position=position).to_item()
        try:
            stored = await self.store.insert(item)
        except PersistenceError as e:
            self.record_failure("add", e)
            return None
        log.info("{} Added checklist item {} at position {}", icons.CREATE, stored.id, position)
        if parent_id is not None:
            self.expanded.add(parent_id)
        await self.refresh()
        return find_item_by_id(self.roots, stored.id)

    async def add_sub_item(self, parent_id: str, text: str) -> ChecklistNode | None:
        """Add an item nested under ``parent_id`` and expand the parent."""
        if not parent_id:
            msg = "A parent item is required for a sub-item."
            raise ItemValidationError(msg)
        return await self.add_item(text, parent_id=parent_id)

    # ─── Patch ────────────────────────────────────────────────────────────────
    async def _patch(self, operation: str, item_id: str, **fields: object) -> bool:
        """Apply ``fields`` locally, persist them, and roll back on failure.

        Only the patched fields of ``item_id`` are rolled back, so other
        mutations that completed in the meantime stay on screen.
        """
        node = self.get_item(item_id)
        previous = {field_name: getattr(node, field_name) for field_name in fields}
        update_item_in_tree(self.roots, item_id, **fields)
        self.notify()
        try:
            await self.store.update(item_id, dict(fields))
        except PersistenceError as e:
            update_item_in_tree(self.roots, item_id, **previous)
            self.record_failure(operation, e)
            return False
        # a rebuild may have replaced the forest while the write was in flight
        if update_item_in_tree(self.roots, item_id, **fields) is not None:
            self.notify()
        return True

    async def toggle_item(self, item_id: str, completed: bool | None = None) -> bool:
        """Set (or flip, when ``completed`` is None) the completion flag of one item.

        Children and parents are not affected.
        """
        node = self.get_item(item_id)
        new_state = not node.is_completed if completed is None else completed
        ok = await self._patch("toggle", item_id, is_completed=new_state)
        if ok:
            log.debug("{} Item {} completed={}", icons.CHECK_MARK if new_state else icons.MULTIPLICATION_X, item_id, new_state)
        return ok

    async def edit_item_text(self, item_id: str, text: str) -> bool:
        """Replace the label of one item.

        :raises ItemValidationError: If the text is blank or the item is unknown.
        """
        label = clean_item_text(text)
        node = self.get_item(item_id)
        if node.text == label:
            return True
        ok = await self._patch("edit", item_id, text=label)
        if ok:
            log.debug("{} Item {} relabelled", icons.EDIT, item_id)
        return ok

    # ─── Delete ───────────────────────────────────────────────────────────────
    async def delete_item(self, item_id: str) -> bool:
        """Delete an item.

        With the ``cascade`` policy its descendants are deleted first, deepest
        first; with ``orphan`` they stay in the store and surface as roots.
        """
        node = self.get_item(item_id)
        doomed = [*collect_descendant_ids(node), item_id] if self.settings.delete_policy == "cascade" else [item_id]
        before = self.snapshot()
        self.roots = remove_item_from_tree(self.roots, doomed)
        self._prune_expanded()
        self.notify()
        deleted = 0
        try:
            for doomed_id in doomed:
                await self.store.delete(doomed_id)
                deleted += 1
        except PersistenceError as e:
            if not await self.refresh():
                self.restore(before)
            self.record_failure("delete", e)
            return False
        log.info("{} Deleted {} checklist item(s) starting at {}", icons.ERASE, deleted, item_id)
        await self.refresh()
        return True

    # ─── Bulk Import ──────────────────────────────────────────────────────────
    async def bulk_import(self, texts: Iterable[str]) -> int:
        """Append many root items after the current last root.

        Rows are inserted in batches of ``import_batch_size``; a success notice
        with the count is shown afterwards.

        :returns: The number of rows stored.
        :raises BulkImportError: If there are more than ``max_import_items`` labels.
        """
        labels = [text.strip() for text in texts if text and text.strip()]
        if not labels:
            return 0
        validate_import_size(labels, self.settings.max_import_items)
        start = next_position(root for root in self.roots)
        items = [ChecklistItemCreate(task_id=self.task_id, text=label, position=start + offset).to_item() for offset, label in enumerate(labels)]
        batch_size = self.settings.import_batch_size
        stored = 0
        try:
            for index in range(0, len(items), batch_size):
                batch = items[index : index + batch_size]
                await self.store.insert_batch(batch)
                stored += len(batch)
                log.debug("{} Imported batch {}-{} of {}", icons.IMPORT, index, index + len(batch) - 1, len(items))
        except PersistenceError as e:
            if stored:
                await self.refresh()
            self.record_failure("bulk import", e)
            return stored
        await self.refresh()
        self.show_notice(f"Successfully imported {stored} checklist items")
        return stored

    async def import_text(self, raw_text: str) -> int:
        """Parse pasted text and bulk import the labels.

        :raises BulkImportError: If the text yields no labels or too many.
        """
        labels = validate_import_size(parse_bulk_text(raw_text), self.settings.max_import_items)
        return await self.bulk_import(labels)

    # ─── Expand / Collapse ────────────────────────────────────────────────────
    def is_expanded(self, item_id: str) -> bool:
        return item_id in self.expanded

    def expand(self, item_id: str) -> None:
        self.expanded.add(item_id)
        self.notify()

    def collapse(self, item_id: str) -> None:
        self.expanded.discard(item_id)
        self.notify()

    def toggle_expand(self, item_id: str) -> bool:
        """Flip the expanded state of one item and return the new state."""
        if item_id in self.expanded:
            self.collapse(item_id)
            return False
        self.expand(item_id)
        return True

    def expand_all(self) -> None:
        self.expanded = {node.id for node in flatten_tree(self.roots) if node.has_children}
        self.notify()

    def collapse_all(self) -> None:
        self.expanded.clear()
        self.notify()

    def _prune_expanded(self) -> None:
        present = {node.id for node in flatten_tree(self.roots)}
        self.expanded &= present

    def visible_rows(self) -> list[tuple[ChecklistNode, int]]:
        """Rows to display as ``(node, depth)``, skipping children of collapsed items."""
        rows: list[tuple[ChecklistNode, int]] = []
        hidden_below: int | None = None
        for node, depth in iter_tree(self.roots):
            if hidden_below is not None:
                if depth > hidden_below:
                    continue
                hidden_below = None
            rows.append((node, depth))
            if node.has_children and node.id not in self.expanded:
                hidden_below = depth
        return rows

    def progress(self) -> tuple[int, int]:
        """Return ``(completed, total)`` over every item."""
        return count_completed(self.roots)
