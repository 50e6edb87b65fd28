"""Shared fixtures: a recording in-memory item store and checklist helpers."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

import pytest

from checktree.config import ChecklistSettings
from checktree.core.exceptions import PersistenceError
from checktree.core.models import ChecklistItem
from checktree.core.services import ChecklistManager, ReorderCoordinator

TASK_ID = "task-1"


def make_item(
    item_id: str,
    position: int,
    parent_id: str | None = None,
    text: str | None = None,
    completed: bool = False,
    task_id: str = TASK_ID,
) -> ChecklistItem:
    """Build a stored row with readable defaults."""
    return ChecklistItem(
        id=item_id,
        task_id=task_id,
        parent_id=parent_id,
        text=text or f"item {item_id}",
        is_completed=completed,
        position=position,
    )


class RecordingStore:
    """In-memory ordered item store that records every call.

    ``fail_on`` maps an operation name to the number of upcoming calls that
    should raise :class:`PersistenceError` (``None`` means every call).
    """

    def __init__(self, items: Sequence[ChecklistItem] = ()) -> None:
        self.rows: dict[str, ChecklistItem] = {item.id: item for item in items}
        self.calls: list[tuple[str, Any]] = []
        self.fail_on: dict[str, int | None] = {}
        self.batch_sizes: list[int] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def fail(self, operation: str, times: int | None = None) -> None:
        self.fail_on[operation] = times

    def _maybe_fail(self, operation: str) -> None:
        if operation not in self.fail_on:
            return
        remaining = self.fail_on[operation]
        if remaining is not None:
            if remaining <= 0:
                return
            self.fail_on[operation] = remaining - 1
        raise PersistenceError("simulated store outage", operation=operation)

    def ops(self, operation: str) -> list[Any]:
        """Arguments of every recorded call to ``operation``."""
        return [args for name, args in self.calls if name == operation]

    def clear_calls(self) -> None:
        self.calls.clear()
        self.batch_sizes.clear()
        self.max_in_flight = 0

    async def list(self, task_id: str) -> Sequence[ChecklistItem]:
        self.calls.append(("list", task_id))
        self._maybe_fail("list")
        return [ChecklistItem(**row.model_dump()) for row in self.rows.values() if row.task_id == task_id]

    async def insert(self, item: ChecklistItem) -> ChecklistItem:
        self.calls.append(("insert", item.id))
        self._maybe_fail("insert")
        self.rows[item.id] = item
        return item

    async def insert_batch(self, items: Sequence[ChecklistItem]) -> Sequence[ChecklistItem]:
        self.calls.append(("insert_batch", [item.id for item in items]))
        self._maybe_fail("insert_batch")
        self.batch_sizes.append(len(items))
        for item in items:
            self.rows[item.id] = item
        return list(items)

    async def update(self, item_id: str, fields: dict[str, Any]) -> None:
        self.calls.append(("update", (item_id, dict(fields))))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            self._maybe_fail("update")
            if item_id not in self.rows:
                raise PersistenceError(f"Checklist item {item_id} not found", operation="update")
            for name, value in fields.items():
                setattr(self.rows[item_id], name, value)
        finally:
            self.in_flight -= 1

    async def delete(self, item_id: str) -> None:
        self.calls.append(("delete", item_id))
        self._maybe_fail("delete")
        self.rows.pop(item_id, None)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def checklist_settings() -> ChecklistSettings:
    return ChecklistSettings(
        import_batch_size=50,
        reorder_batch_size=10,
        max_import_items=500,
        notice_seconds=5.0,
        delete_policy="cascade",
        default_task_id=TASK_ID,
    )


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def manager(store: RecordingStore, checklist_settings: ChecklistSettings, clock: FakeClock) -> ChecklistManager:
    return ChecklistManager(store, TASK_ID, settings=checklist_settings, clock=clock)


@pytest.fixture
def coordinator(manager: ChecklistManager) -> ReorderCoordinator:
    return ReorderCoordinator(manager)


@pytest.fixture
def nested_rows() -> list[ChecklistItem]:
    """Roots a, b, c; a has children a1, a2; a1 has child a1x."""
    return [
        make_item("b", 1),
        make_item("a2", 1, parent_id="a"),
        make_item("a", 0),
        make_item("a1x", 0, parent_id="a1"),
        make_item("c", 2),
        make_item("a1", 0, parent_id="a"),
    ]
