# ♥♥─── Generic Confirmation Modal ─────────────────────────────────────────────────
from __future__ import annotations

from typing import TYPE_CHECKING

from textual import on
from textual.screen import ModalScreen
from textual.binding import Binding
from textual.widgets import Label, Button
from textual.containers import Vertical, Container, Horizontal

from checktree.ui import icons


if TYPE_CHECKING:
    from textual.app import ComposeResult


class GenericConfirmModal(ModalScreen[bool]):
    """A reusable yes/no modal. Dismisses with True when confirmed."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
        Binding("enter", "confirm", "Confirm", show=False),
        Binding("y", "confirm", "Yes", show=False),
        Binding("n", "cancel", "No", show=False),
    ]

    def __init__(  # noqa: PLR0913, PLR0917
        self,
        question: str,
        title: str = "Confirm",
        confirm_text: str = "Confirm",
        cancel_text: str = "Cancel",
        confirm_variant: str = "success",
        cancel_variant: str = "default",
        details: list[str] | None = None,
        icon: str = icons.QUESTION_CIRCLE,
    ) -> None:
        """Initialize the GenericConfirmModal.

        :param question: Main question/description text
        :param title: Modal title
        :param confirm_text: Text for confirm button
        :param cancel_text: Text for cancel button
        :param confirm_variant: Button variant for confirm button
        :param cancel_variant: Button variant for cancel button
        :param details: Extra lines shown under the question
        :param icon: Icon shown in the modal title
        """
        super().__init__()
        self.question = question
        self.modal_title = title
        self.confirm_text = confirm_text
        self.cancel_text = cancel_text
        self.confirm_variant = confirm_variant
        self.cancel_variant = cancel_variant
        self.details = details or []
        self.icon = icon

    def compose(self) -> ComposeResult:
        with Container(classes="input-confirm dialog"):
            confirm_screen = Vertical(classes="input-confirm-body dialog-content")
            confirm_screen.border_title = f"{self.icon} {self.modal_title}"
            with confirm_screen:
                yield Label(self.question, classes="changes-question", markup=False)
                for line in self.details:
                    yield Label(f"• {line}", classes="changes-row", markup=False)
                with Horizontal(classes="modal-buttons"):
                    yield Button(self.cancel_text, id="cancel", variant=self.cancel_variant, flat=True)  # type: ignore
                    yield Button(self.confirm_text, id="confirm", variant=self.confirm_variant, flat=True)  # type: ignore

    @on(Button.Pressed)
    def _button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm")

    def action_cancel(self) -> None:
        self.dismiss(False)

    def action_confirm(self) -> None:
        self.dismiss(True)


# ─── Builders ──────────────────────────────────────────────────────────────────
def show_delete_confirm(item_text: str, descendant_count: int = 0, cascade: bool = True) -> GenericConfirmModal:
    """Confirmation for deleting a checklist item.

    :param item_text: Label of the item being deleted.
    :param descendant_count: Number of items nested below it.
    :param cascade: Whether nested items are deleted too.
    """
    details = []
    if descendant_count:
        if cascade:
            details.append(f"{descendant_count} nested item(s) will be deleted as well.")
        else:
            details.append(f"{descendant_count} nested item(s) will move to the top level.")
    return GenericConfirmModal(
        question=f"Delete '{item_text}'? This action cannot be undone.",
        title="Confirm Deletion",
        confirm_text="Delete",
        cancel_text="Keep",
        confirm_variant="error",
        details=details,
        icon=icons.WARNING,
    )
