# ♥♥─── Checklist Screen ────────────────────────────────────────────────────────
from __future__ import annotations

from typing import TYPE_CHECKING

from rich.text import Text
from textual import on, work
from textual.screen import Screen
from textual.binding import Binding
from textual.widgets import Tree, Footer, Header, Static, RichLog

from checktree.ui import icons
from checktree.tui.generic import BulkImportModal, create_item_modal, show_delete_confirm
from checktree.custom_logger import log, add_textual_sink, remove_textual_sink
from checktree.core.services import DragPhase, collect_descendant_ids
from checktree.core.exceptions import BulkImportError, ItemValidationError


if TYPE_CHECKING:
    from textual.app import ComposeResult
    from textual.widgets.tree import TreeNode

    from checktree.core.models import ChecklistNode
    from checktree.core.services import ChecklistManager, ReorderCoordinator


class ChecklistScreen(Screen):
    """Tree view of one task's checklist with keyboard editing and reordering."""

    # ─── Configuration ─────────────────────────────────────────────────────────────
    BINDINGS: list[Binding] = [
        Binding("a", "add_item", "Add"),
        Binding("s", "add_sub_item", "Sub-item"),
        Binding("space", "toggle_item", "Done", priority=True),
        Binding("e", "edit_item", "Edit"),
        Binding("d", "delete_item", "Delete"),
        Binding("m", "grab", "Move"),
        Binding("shift+up", "move_up", "Up", show=False),
        Binding("shift+down", "move_down", "Down", show=False),
        Binding("escape", "cancel_drag", "Cancel Move", show=False),
        Binding("i", "bulk_import", "Import"),
        Binding("r", "refresh_data", "Refresh"),
        Binding("x", "expand_all", "Expand All", show=False),
        Binding("c", "collapse_all", "Collapse All", show=False),
    ]

    def __init__(self, manager: ChecklistManager, coordinator: ReorderCoordinator) -> None:
        super().__init__()
        self.manager = manager
        self.coordinator = coordinator
        self._unsubscribe = manager.subscribe(self._on_manager_change)
        self._sink_id: int | None = None
        self._shown_error: str | None = None
        self._shown_notice: str | None = None

    # ─── UI Composition ────────────────────────────────────────────────────────────
    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("", id="checklist-progress")
        tree: Tree[str] = Tree(f"{icons.LIST} {self.manager.task_id}", id="checklist-tree")
        tree.show_root = False
        yield tree
        yield RichLog(id="checklist-log", max_lines=200, markup=False)
        yield Footer()

    def on_mount(self) -> None:
        self._sink_id = add_textual_sink(self.query_one("#checklist-log", RichLog), level="INFO")
        self.query_one("#checklist-tree", Tree).focus()
        self.refresh_checklist()

    def on_unmount(self) -> None:
        self._unsubscribe()
        if self._sink_id is not None:
            remove_textual_sink(self._sink_id)
            self._sink_id = None

    # ─── Rendering ─────────────────────────────────────────────────────────────────
    def _on_manager_change(self, manager: ChecklistManager) -> None:
        if not self.is_mounted:
            return
        self._render_tree()
        if manager.error and manager.error != self._shown_error:
            self.notify(f"{icons.ERROR} {manager.error}", severity="error")
        self._shown_error = manager.error
        notice = manager.notice
        if notice and notice != self._shown_notice:
            self.notify(f"{icons.CHECK} {notice}", severity="information", timeout=manager.settings.notice_seconds)
        self._shown_notice = notice

    def _item_label(self, node: ChecklistNode) -> Text:
        box = icons.CHECK_SQUARE if node.is_completed else icons.CHECK_SQUARE_O
        style = "strike dim" if node.is_completed else ""
        label = Text.assemble((f"{box} ", style), (node.text, style))
        if self.coordinator.phase is DragPhase.DRAGGING and node.id == self.coordinator.active_id:
            label = Text.assemble((f"{icons.GRIP} ", "bold"), label)
        return label

    def _add_nodes(self, parent: TreeNode[str], nodes: list[ChecklistNode]) -> None:
        for node in nodes:
            if node.children:
                branch = parent.add(self._item_label(node), data=node.id, expand=self.manager.is_expanded(node.id))
                self._add_nodes(branch, node.children)
            else:
                parent.add_leaf(self._item_label(node), data=node.id)

    def _render_tree(self) -> None:
        tree = self.query_one("#checklist-tree", Tree)
        selected = self._cursor_id()
        tree.clear()
        self._add_nodes(tree.root, self.manager.roots)
        tree.root.expand()
        completed, total = self.manager.progress()
        self.query_one("#checklist-progress", Static).update(f"{icons.CHECK} {completed}/{total} completed")
        if selected is not None:
            self.call_after_refresh(self._select_id, selected)

    def _select_id(self, item_id: str) -> None:
        tree = self.query_one("#checklist-tree", Tree)
        for line in range(tree.last_line + 1):
            tree_node = tree.get_node_at_line(line)
            if tree_node is not None and tree_node.data == item_id:
                tree.move_cursor(tree_node)
                return

    def _cursor_id(self) -> str | None:
        tree = self.query_one("#checklist-tree", Tree)
        node = tree.cursor_node
        if node is None or node.data is None:
            return None
        return node.data

    def _require_cursor(self) -> str | None:
        item_id = self._cursor_id()
        if item_id is None:
            self.notify(f"{icons.WARNING} Select an item first", severity="warning")
        return item_id

    # ─── Tree Events ───────────────────────────────────────────────────────────────
    @on(Tree.NodeExpanded)
    def _node_expanded(self, event: Tree.NodeExpanded) -> None:
        item_id = event.node.data
        if item_id and not self.manager.is_expanded(item_id):
            self.manager.expand(item_id)

    @on(Tree.NodeCollapsed)
    def _node_collapsed(self, event: Tree.NodeCollapsed) -> None:
        item_id = event.node.data
        if item_id and self.manager.is_expanded(item_id):
            self.manager.collapse(item_id)

    # ─── Actions ───────────────────────────────────────────────────────────────────
    @work(exclusive=True, group="refresh")
    async def refresh_checklist(self) -> None:
        await self.manager.refresh()

    def action_refresh_data(self) -> None:
        self.refresh_checklist()

    @work
    async def action_add_item(self) -> None:
        result = await self.app.push_screen(create_item_modal("Add Item"), wait_for_dismiss=True)
        if not result:
            return
        try:
            await self.manager.add_item(result["text"])
        except ItemValidationError as e:
            self.notify(f"{icons.WARNING} {e}", severity="warning")

    @work
    async def action_add_sub_item(self) -> None:
        parent_id = self._require_cursor()
        if parent_id is None:
            return
        try:
            parent = self.manager.get_item(parent_id)
            result = await self.app.push_screen(create_item_modal("Add Sub-item", parent_text=parent.text), wait_for_dismiss=True)
            if not result:
                return
            await self.manager.add_sub_item(parent_id, result["text"])
        except ItemValidationError as e:
            self.notify(f"{icons.WARNING} {e}", severity="warning")

    @work
    async def action_toggle_item(self) -> None:
        item_id = self._require_cursor()
        if item_id is None:
            return
        try:
            await self.manager.toggle_item(item_id)
        except ItemValidationError as e:
            self.notify(f"{icons.WARNING} {e}", severity="warning")

    @work
    async def action_edit_item(self) -> None:
        item_id = self._require_cursor()
        if item_id is None:
            return
        try:
            node = self.manager.get_item(item_id)
            result = await self.app.push_screen(create_item_modal("Edit Item", text=node.text), wait_for_dismiss=True)
            if not result:
                return
            await self.manager.edit_item_text(item_id, result["text"])
        except ItemValidationError as e:
            self.notify(f"{icons.WARNING} {e}", severity="warning")

    @work
    async def action_delete_item(self) -> None:
        item_id = self._require_cursor()
        if item_id is None:
            return
        try:
            node = self.manager.get_item(item_id)
            modal = show_delete_confirm(node.text, len(collect_descendant_ids(node)), cascade=self.manager.settings.delete_policy == "cascade")
            if await self.app.push_screen(modal, wait_for_dismiss=True):
                await self.manager.delete_item(item_id)
        except ItemValidationError as e:
            self.notify(f"{icons.WARNING} {e}", severity="warning")

    @work
    async def action_bulk_import(self) -> None:
        labels = await self.app.push_screen(BulkImportModal(max_items=self.manager.settings.max_import_items), wait_for_dismiss=True)
        if not labels:
            return
        try:
            await self.manager.bulk_import(labels)
        except BulkImportError as e:
            self.notify(f"{icons.WARNING} {e}", severity="warning")

    @work(group="reorder")
    async def action_grab(self) -> None:
        """Pick up the selected item, or drop the held item onto the selection."""
        item_id = self._require_cursor()
        if item_id is None:
            return
        if self.coordinator.phase is DragPhase.DRAGGING:
            moved = await self.coordinator.drag_end(item_id)
            if not moved:
                self._render_tree()
            return
        if self.coordinator.drag_start(item_id) is not None:
            log.info("{} Moving '{}': select a sibling and press m to drop it", icons.GRIP, self.coordinator.overlay.text if self.coordinator.overlay else item_id)
            self._render_tree()

    def action_cancel_drag(self) -> None:
        if self.coordinator.phase is DragPhase.DRAGGING:
            self.coordinator.drag_cancel()
            self._render_tree()

    @work(group="reorder")
    async def action_move_up(self) -> None:
        item_id = self._require_cursor()
        if item_id is not None:
            await self.coordinator.move_by(item_id, -1)

    @work(group="reorder")
    async def action_move_down(self) -> None:
        item_id = self._require_cursor()
        if item_id is not None:
            await self.coordinator.move_by(item_id, 1)

    def action_expand_all(self) -> None:
        self.manager.expand_all()

    def action_collapse_all(self) -> None:
        self.manager.collapse_all()
