# ♥♥─── Generic Edit Modal for Textual Applications ──────────────────────
from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any
from dataclasses import dataclass

from textual import on
from textual.screen import ModalScreen
from textual.binding import Binding
from textual.widgets import Input, Label, Button, Static, TextArea
from textual.containers import Vertical, Container, Horizontal

from checktree.ui import icons
from checktree.custom_logger import log
from checktree.core.services import preview, parse_bulk_text, validate_import_size
from checktree.core.exceptions import BulkImportError


if TYPE_CHECKING:
    from collections.abc import Callable

    from textual.app import ComposeResult


# ─── Enums ─────────────────────────────────────────────────────────────────────
class FieldType(Enum):
    """Kinds of rows a form can show."""

    TEXT = "text"
    STATIC = "static"


# ─── Data Classes ──────────────────────────────────────────────────────────────
@dataclass
class FormField:
    """One row of a :class:`GenericEditModal` form.

    :param id: Widget id, also the key in the dismissed result.
    :param label: Label text (the whole text for static rows).
    :param field_type: Input or static row.
    :param placeholder: Placeholder shown in empty inputs.
    :param required: Reject blank values.
    :param validation: Returns ``(ok, error_message)`` for a value.
    """

    id: str
    label: str
    field_type: FieldType = FieldType.TEXT
    placeholder: str = ""
    required: bool = False
    validation: Callable[[str], tuple[bool, str]] | None = None


# ─── Modal Screen ──────────────────────────────────────────────────────────────
class GenericEditModal(ModalScreen[dict[str, str] | None]):
    """Short single-line form.

    Dismisses with the fields whose value differs from ``original_data``, or
    with None when cancelled or when nothing changed.
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel", show=False), Binding("ctrl+s", "save", "Save", show=False)]

    def __init__(self, title: str, fields: list[FormField], original_data: dict[str, str] | None = None, icon: str = icons.EDIT, auto_focus: str | None = None) -> None:
        super().__init__()
        self.modal_title = title
        self.fields = fields
        self.original_data = original_data or {}
        self.icon = icon
        self.auto_focus = auto_focus

    def compose(self) -> ComposeResult:
        with Container(classes="input-edit"):
            body = Vertical(classes="input-edit-body")
            body.border_title = f"{self.icon} {self.modal_title}"
            with body:
                for field in self.fields:
                    if field.field_type is FieldType.STATIC:
                        yield Static(field.label, classes="input-static", markup=False)
                        continue
                    yield Label(field.label + (" *" if field.required else ""), classes="input-label")
                    yield Input(value=self.original_data.get(field.id, ""), placeholder=field.placeholder, id=field.id, classes="input-line")
                yield Label("", id="form-errors", classes="input-errors")
                with Horizontal(classes="modal-buttons"):
                    yield Button("Cancel", id="cancel", variant="default")
                    yield Button("Save", id="save", variant="success")

    def on_mount(self) -> None:
        if self.auto_focus:
            self.query_one(f"#{self.auto_focus}").focus()

    def _errors_for(self, field: FormField, value: str) -> str | None:
        if field.required and not value.strip():
            return f"{field.label.rstrip(':')} is required"
        if field.validation is not None:
            ok, message = field.validation(value)
            return None if ok else message
        return None

    @on(Button.Pressed, "#save")
    @on(Input.Submitted)
    def save_changes(self) -> None:
        """Validate every input and dismiss with the changed values."""
        values = {field.id: self.query_one(f"#{field.id}", Input).value for field in self.fields if field.field_type is FieldType.TEXT}
        errors = [error for field in self.fields if field.id in values and (error := self._errors_for(field, values[field.id]))]
        if errors:
            self.query_one("#form-errors", Label).update(f"{icons.ERROR} " + "; ".join(errors))
            log.debug("Form '{}' rejected: {}", self.modal_title, errors)
            return
        changed = {field_id: value for field_id, value in values.items() if value != self.original_data.get(field_id)}
        self.dismiss(changed or None)

    @on(Button.Pressed, "#cancel")
    def action_cancel(self) -> None:
        self.dismiss(None)

    def action_save(self) -> None:
        self.save_changes()


# ─── Bulk Import Modal ─────────────────────────────────────────────────────────
class BulkImportModal(ModalScreen[list[str] | None]):
    """Paste many lines at once; shows a live preview of the parsed labels."""

    BINDINGS = [Binding("escape", "cancel", "Cancel", show=False), Binding("ctrl+s", "save", "Import", show=False)]

    def __init__(self, max_items: int = 500, preview_limit: int = 10) -> None:
        super().__init__()
        self.max_items = max_items
        self.preview_limit = preview_limit
        self.parsed: list[str] = []

    def compose(self) -> ComposeResult:
        with Container(classes="input-edit"):
            body = Vertical(classes="input-edit-body")
            body.border_title = f"{icons.IMPORT} Bulk Import"
            with body:
                yield Label("Paste one item per line. Bullets, numbers and checkboxes are removed.", classes="input-label")
                yield TextArea("", id="bulk-text", classes="input-box")
                yield Static("", id="bulk-preview", classes="input-static", markup=False)
                yield Label("", id="form-errors", classes="input-errors")
                with Horizontal(classes="modal-buttons"):
                    yield Button("Cancel", id="cancel", variant="default")
                    yield Button("Import", id="save", variant="success")

    def on_mount(self) -> None:
        self.query_one("#bulk-text", TextArea).focus()

    @on(TextArea.Changed, "#bulk-text")
    def update_preview(self, event: TextArea.Changed) -> None:
        """Re-parse the pasted text and refresh the preview."""
        self.parsed = parse_bulk_text(event.text_area.text)
        shown = preview(self.parsed, self.preview_limit)
        lines = [f"Preview ({len(self.parsed)} items):", *(f"• {item}" for item in shown.items)]
        if shown.remaining:
            lines.append(f"... and {shown.remaining} more")
        self.query_one("#bulk-preview", Static).update("\n".join(lines) if self.parsed else "")
        self.query_one("#form-errors", Label).update("")

    @on(Button.Pressed, "#save")
    def save_changes(self) -> None:
        try:
            validate_import_size(self.parsed, self.max_items)
        except BulkImportError as e:
            self.query_one("#form-errors", Label).update(f"{icons.ERROR} {e}")
            return
        self.dismiss(list(self.parsed))

    @on(Button.Pressed, "#cancel")
    def cancel_edit(self) -> None:
        self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)

    def action_save(self) -> None:
        self.save_changes()


# ─── Specialized Modal Builders ────────────────────────────────────────────────
def _text_not_blank(value: Any) -> tuple[bool, str]:
    if not str(value).strip():
        return False, "Text cannot be empty"
    return True, ""


def create_item_modal(title: str = "Add Item", text: str = "", parent_text: str | None = None) -> GenericEditModal:
    """Create a modal for entering or editing a checklist label.

    :param title: The modal title.
    :param text: The current label when editing.
    :param parent_text: Label of the parent when adding a sub-item.
    :returns: A modal dismissing with ``{"text": ...}`` or None.
    """
    fields = []
    if parent_text is not None:
        fields.append(FormField(id="parent_info", label=f"{icons.CHEVRON_RIGHT} Under: {parent_text}", field_type=FieldType.STATIC))
    fields.append(FormField(id="text", label="Text:", placeholder="Add a checklist item...", required=True, validation=_text_not_blank))
    return GenericEditModal(title=title, fields=fields, original_data={"text": text}, icon=icons.EDIT if text else icons.CREATE, auto_focus="text")
