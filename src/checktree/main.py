# ♥♥─── CheckTree CLI ──────────────────────────────────────────────────────────────
"""Command line entry point.

Usage:
    checktree tui --task TASK_ID          # Interactive checklist
    checktree show --task TASK_ID --json  # Print the tree
    checktree import FILE --task TASK_ID  # Bulk import one item per line
    checktree config --init               # Write a default .env
"""

from __future__ import annotations

from typing import TYPE_CHECKING
import json
import asyncio
from pathlib import Path

import typer
from rich.text import Text
from rich.tree import Tree

from checktree.ui import icons, console
from checktree.config import get_settings
from checktree.custom_logger import log, set_console_level
from checktree.core.services import ChecklistManager, build_store
from checktree.core.exceptions import ChecklistError


if TYPE_CHECKING:
    from checktree.core.models import ChecklistNode


app = typer.Typer(help="Nested task checklists.", no_args_is_help=True)


def _manager_for(task_id: str | None) -> ChecklistManager:
    settings = get_settings()
    store = build_store(settings)
    return ChecklistManager(store, task_id or settings.checklist.default_task_id, settings=settings.checklist)


def _rich_tree(manager: ChecklistManager) -> Tree:
    completed, total = manager.progress()
    tree = Tree(f"{icons.LIST} [primary]{manager.task_id}[/] [muted]({completed}/{total})[/]")

    def add(branch: Tree, nodes: list[ChecklistNode]) -> None:
        for node in nodes:
            box = icons.CHECK_SQUARE if node.is_completed else icons.CHECK_SQUARE_O
            style = "item.completed" if node.is_completed else "item.open"
            child = branch.add(Text(f"{box} {node.text}", style=style))
            add(child, node.children)

    add(tree, manager.roots)
    return tree


@app.command("tui")
def tui_cmd(task: str | None = typer.Option(None, "--task", "-t", help="Task whose checklist to open")) -> None:
    """Open the interactive checklist."""
    from checktree.tui.main_app import CheckTreeApp  # noqa: PLC0415

    set_console_level("CRITICAL")
    CheckTreeApp(task_id=task).run()


@app.command("show")
def show_cmd(
    task: str | None = typer.Option(None, "--task", "-t", help="Task whose checklist to print"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Print a checklist as a tree."""
    manager = _manager_for(task)
    if not asyncio.run(manager.refresh()):
        console.print(f"[error]{icons.ERROR} {manager.error}[/]")
        raise typer.Exit(1)
    if output_json:
        typer.echo(json.dumps([root.to_export_dict() for root in manager.roots], indent=2))
        return
    console.print(_rich_tree(manager))


@app.command("import")
def import_cmd(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Text file, one item per line"),
    task: str | None = typer.Option(None, "--task", "-t", help="Task receiving the items"),
) -> None:
    """Append every line of a file as a top-level item."""
    manager = _manager_for(task)

    async def run() -> int:
        if not await manager.refresh():
            return 0
        return await manager.import_text(file.read_text(encoding="utf-8"))

    try:
        imported = asyncio.run(run())
    except ChecklistError as e:
        console.print(f"[error]{icons.ERROR} {e}[/]")
        raise typer.Exit(1) from e
    if manager.error:
        console.print(f"[error]{icons.ERROR} {manager.error}[/]")
        raise typer.Exit(1)
    console.print(f"[success]{icons.CHECK} Imported {imported} items into {manager.task_id}[/]")


@app.command("config")
def config_cmd(init: bool = typer.Option(False, "--init", help="Write a default .env if none exists")) -> None:
    """Show the active configuration."""
    settings = get_settings()
    if init:
        written = settings.paths.write_default_env_file()
        log.info("Default .env {} at {}", "written" if written else "already present", settings.paths.env_file_path)
    typer.echo(json.dumps(settings.get_configuration_summary(), indent=2, default=str))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
