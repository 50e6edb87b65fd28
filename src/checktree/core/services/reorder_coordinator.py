# ♥♥─── Reorder Coordinator ───────────────────────────────────────────────────────
"""Drag-and-drop reordering within one sibling group."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, TypeVar
import asyncio

from checktree.ui import icons
from checktree.core.models import PositionUpdate
from checktree.custom_logger import log
from checktree.core.exceptions import PersistenceError

from .tree_builder import sibling_group, find_item_by_id


if TYPE_CHECKING:
    from collections.abc import Sequence

    from checktree.config import ChecklistSettings
    from checktree.core.models import ChecklistNode
    from checktree.core.repositories import OrderedItemStore

    from .checklist_manager import ChecklistManager
T = TypeVar("T")


class DragPhase(StrEnum):
    """Phase of the current drag gesture."""

    IDLE = "idle"
    DRAGGING = "dragging"
    REORDERING = "reordering"


# ─── Position Helpers ───────────────────────────────────────────────────────────
def array_move(items: Sequence[T], from_index: int, to_index: int) -> list[T]:
    """Return a copy with the element at ``from_index`` moved to ``to_index``.

    Everything between the two indices shifts by one toward the gap.
    """
    moved = list(items)
    element = moved.pop(from_index)
    moved.insert(to_index, element)
    return moved


def dense_positions(nodes: Sequence[ChecklistNode]) -> list[PositionUpdate]:
    """Assign each node its index as position (0..n-1)."""
    return [PositionUpdate(id=node.id, position=index) for index, node in enumerate(nodes)]


async def persist_positions(store: OrderedItemStore, updates: Sequence[PositionUpdate], batch_size: int) -> None:
    """Write position updates in sequential batches.

    Updates inside a batch run concurrently; the next batch starts only after
    all of them resolved. The first failure stops further batches.

    :raises PersistenceError: If any update in a batch fails.
    """
    for index in range(0, len(updates), batch_size):
        batch = updates[index : index + batch_size]
        await asyncio.gather(*(store.update(update.id, {"position": update.position}) for update in batch))
        log.debug("Persisted positions {}-{} of {}", index, index + len(batch) - 1, len(updates))


# ─── Reorder Coordinator ────────────────────────────────────────────────────────
class ReorderCoordinator:
    """Tracks one drag gesture at a time and applies the resulting reorder.

    Items can only move inside their own sibling group. Every completed reorder
    ends with a full rebuild of the manager's forest; if that rebuild fails the
    forest from before the gesture is put back.

    :param manager: The checklist the gestures act on.
    :param settings: Supplies ``reorder_batch_size`` (defaults to the manager's settings).
    """

    def __init__(self, manager: ChecklistManager, settings: ChecklistSettings | None = None) -> None:
        self.manager = manager
        self.settings = settings or manager.settings
        self.phase: DragPhase = DragPhase.IDLE
        self.active_id: str | None = None
        self.overlay: ChecklistNode | None = None

    def _reset(self) -> None:
        self.phase = DragPhase.IDLE
        self.active_id = None
        self.overlay = None

    def drag_start(self, item_id: str) -> ChecklistNode | None:
        """Begin dragging ``item_id`` and snapshot it for the drag overlay.

        :returns: The overlay snapshot, or None when the gesture cannot start.
        """
        if self.phase is DragPhase.REORDERING:
            log.warning("Drag of {} ignored: a reorder is still being saved.", item_id)
            return None
        node = find_item_by_id(self.manager.roots, item_id)
        if node is None:
            log.warning("Drag of unknown checklist item {} ignored.", item_id)
            self._reset()
            return None
        self.phase = DragPhase.DRAGGING
        self.active_id = item_id
        self.overlay = node.snapshot()
        log.debug("{} Dragging {}", icons.GRIP, item_id)
        return self.overlay

    def drag_cancel(self) -> None:
        """Abandon the current gesture without saving anything."""
        if self.phase is DragPhase.DRAGGING:
            log.debug("Drag of {} cancelled", self.active_id)
            self._reset()

    async def drag_end(self, over_id: str | None) -> bool:
        """Drop the dragged item onto ``over_id``.

        :param over_id: The item dropped on, or None when dropped outside any item.
        :returns: True when a reorder was saved.
        """
        if self.phase is not DragPhase.DRAGGING or self.active_id is None:
            return False
        active_id = self.active_id
        roots = self.manager.roots
        if over_id is None or over_id == active_id:
            self._reset()
            return False
        source = find_item_by_id(roots, active_id)
        target = find_item_by_id(roots, over_id)
        group = sibling_group(roots, active_id)
        if source is None or target is None or group is None:
            log.warning("Drop of {} onto {} ignored: item no longer present.", active_id, over_id)
            self._reset()
            return False
        if source.parent_id != target.parent_id or sibling_group(roots, over_id) is not group:
            log.warning("Drop of {} onto {} rejected: items have different parents.", active_id, over_id)
            self._reset()
            return False

        self.phase = DragPhase.REORDERING
        before = self.manager.snapshot()
        old_index = next(index for index, node in enumerate(group) if node.id == active_id)
        new_index = next(index for index, node in enumerate(group) if node.id == over_id)
        reordered = array_move(group, old_index, new_index)
        updates = dense_positions(reordered)
        group[:] = reordered
        for node, update in zip(reordered, updates, strict=True):
            node.position = update.position
        self.manager.notify()
        log.info("{} Moving {} from index {} to {}", icons.GRIP, active_id, old_index, new_index)

        failure: PersistenceError | None = None
        try:
            await persist_positions(self.manager.store, updates, self.settings.reorder_batch_size)
        except PersistenceError as e:
            failure = e
        finally:
            rebuilt = await self.manager.refresh()
            if not rebuilt:
                self.manager.restore(before)
            self._reset()
        if failure is not None:
            self.manager.record_failure("reorder", failure)
            return False
        return True

    async def move_by(self, item_id: str, offset: int) -> bool:
        """Move an item ``offset`` places within its sibling group.

        The target index is clamped to the group; a move that lands on the item
        itself does nothing.
        """
        group = sibling_group(self.manager.roots, item_id)
        if group is None:
            return False
        index = next(i for i, node in enumerate(group) if node.id == item_id)
        target_index = max(0, min(len(group) - 1, index + offset))
        if target_index == index:
            return False
        if self.drag_start(item_id) is None:
            return False
        return await self.drag_end(group[target_index].id)
