# ♥♥─── Ordered Item Store ───────────────────────────────────────────────────────
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable


if TYPE_CHECKING:
    from collections.abc import Sequence

    from checktree.core.models import ChecklistItem

# Columns a partial update may touch.
UPDATABLE_FIELDS = frozenset({"text", "is_completed", "position", "parent_id"})


@runtime_checkable
class OrderedItemStore(Protocol):
    """Persistence collaborator for checklist rows.

    Implementations raise :class:`~checktree.core.exceptions.PersistenceError`
    (or a subclass) for every failure.
    """

    async def list(self, task_id: str) -> Sequence[ChecklistItem]:
        """Return every row of a checklist, in no particular order."""
        ...

    async def insert(self, item: ChecklistItem) -> ChecklistItem:
        """Create a single row and return it as stored."""
        ...

    async def insert_batch(self, items: Sequence[ChecklistItem]) -> Sequence[ChecklistItem]:
        """Create several rows in one request."""
        ...

    async def update(self, item_id: str, fields: dict[str, Any]) -> None:
        """Apply a partial update to one row."""
        ...

    async def delete(self, item_id: str) -> None:
        """Delete one row. No cascade to children is implied."""
        ...
