"""Tests for the checklist screen's item actions."""

import pytest
from textual.worker import WorkerState

from checktree.config import ApplicationSettings
from checktree.tui.main_app import CheckTreeApp
from checktree.tui.checklist_screen import ChecklistScreen
from conftest import TASK_ID


class TestStaleSelection:
    """Actions on an item that vanished after the cursor was read."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action", ["action_toggle_item", "action_edit_item", "action_delete_item", "action_add_sub_item"])
    async def test_missing_item_is_reported_not_raised(self, store, nested_rows, checklist_settings, action):
        for row in nested_rows:
            store.rows[row.id] = row
        app = CheckTreeApp(settings=ApplicationSettings(checklist=checklist_settings), task_id=TASK_ID, store=store)
        async with app.run_test() as pilot:
            await pilot.pause()
            screen = app.screen
            assert isinstance(screen, ChecklistScreen)
            screen._cursor_id = lambda: "gone"
            worker = getattr(screen, action)()
            await app.workers.wait_for_complete()
            assert worker.state is WorkerState.SUCCESS
            assert app.is_running
        assert store.ops("update") == []
        assert store.ops("delete") == []
