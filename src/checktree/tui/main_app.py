# ♥♥─── Main App ─────────────────────────────────────────────────────────────────
from __future__ import annotations

from typing import TYPE_CHECKING

from textual.app import App
from textual.binding import Binding

from checktree.config import get_settings
from checktree.core.client import RestItemStore
from checktree.custom_logger import get_logger
from checktree.core.services import ChecklistManager, ReorderCoordinator, build_store
from checktree.core.repositories import ChecklistVault

from .checklist_screen import ChecklistScreen


if TYPE_CHECKING:
    from checktree.config import ApplicationSettings
    from checktree.core.repositories import OrderedItemStore


class CheckTreeApp(App):
    BINDINGS = [Binding("q", "quit", "Quit", priority=True)]
    CSS_PATH = "checktree.tcss"
    TITLE = "CheckTree"

    def __init__(self, settings: ApplicationSettings | None = None, task_id: str | None = None, store: OrderedItemStore | None = None) -> None:
        super().__init__()
        self.logger = get_logger()
        self.settings = settings or get_settings()
        self.task_id = task_id or self.settings.checklist.default_task_id
        self.store = store or build_store(self.settings)
        self.manager = ChecklistManager(self.store, self.task_id, settings=self.settings.checklist)
        self.coordinator = ReorderCoordinator(self.manager)
        self.sub_title = self.task_id

    async def on_mount(self) -> None:
        self.theme = "rose-pine"
        self.logger.info("Opening checklist for task {}", self.task_id)
        await self.push_screen(ChecklistScreen(self.manager, self.coordinator))

    async def on_unmount(self) -> None:
        if isinstance(self.store, RestItemStore):
            await self.store.aclose()
        elif isinstance(self.store, ChecklistVault):
            self.store.dispose()
