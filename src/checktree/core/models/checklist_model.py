# ♥♥─── CheckTree Checklist Models ───────────────────────────────────────────────
from __future__ import annotations

import uuid
from typing import Any
from datetime import datetime

from pydantic import Field as PydanticField, field_validator
from sqlmodel import Field

from .base_model import CheckTreeSQLModel, CheckTreeBaseModel
from .validators import utc_now, ensure_utc, clean_item_text


def new_item_id() -> str:
    """Generate a fresh identifier for a checklist row."""
    return str(uuid.uuid4())


# ─── ChecklistItem ──────────────────────────────────────────────────────────────
class ChecklistItem(CheckTreeSQLModel, table=True):
    """A persisted checklist row. Nesting is expressed only through ``parent_id``."""

    __tablename__ = "task_checklist_items"  # type: ignore

    id: str = Field(default_factory=new_item_id, primary_key=True)
    task_id: str = Field(index=True)
    parent_id: str | None = Field(default=None, index=True)
    text: str
    is_completed: bool = Field(default=False)
    position: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v) or utc_now()


# ─── ChecklistNode ──────────────────────────────────────────────────────────────
class ChecklistNode(CheckTreeBaseModel):
    """In-memory tree view of a checklist row.

    ``children`` is derived from ``parent_id`` links when the tree is built and
    is never persisted.
    """

    id: str
    task_id: str
    parent_id: str | None = None
    text: str
    is_completed: bool = False
    position: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    children: list[ChecklistNode] = PydanticField(default_factory=list)

    @classmethod
    def from_item(cls, item: ChecklistItem) -> ChecklistNode:
        """Create a childless node from a stored row.

        :param item: The persisted checklist row.
        :returns: A node with an empty ``children`` list.
        """
        return cls(
            id=item.id,
            task_id=item.task_id,
            parent_id=item.parent_id,
            text=item.text,
            is_completed=item.is_completed,
            position=item.position,
            created_at=ensure_utc(item.created_at),
            updated_at=ensure_utc(item.updated_at),
        )

    @property
    def has_children(self) -> bool:
        """Whether the node has any nested items."""
        return bool(self.children)

    def snapshot(self) -> ChecklistNode:
        """Deep copy used for drag overlays and rollback."""
        return self.model_copy(deep=True)

    def to_export_dict(self) -> dict[str, Any]:
        """Serialize the subtree with camelCase keys (``parentId``, ``isCompleted``...)."""
        data = self.model_dump(mode="json", by_alias=True, exclude={"task_id", "created_at", "updated_at", "children"})
        data["children"] = [child.to_export_dict() for child in self.children]
        return data


# ─── Payloads ───────────────────────────────────────────────────────────────────
class ChecklistItemCreate(CheckTreeBaseModel):
    """Validated input for a new checklist row."""

    task_id: str = PydanticField(min_length=1)
    parent_id: str | None = None
    text: str
    position: int = PydanticField(default=0, ge=0)
    is_completed: bool = False

    @field_validator("text", mode="before")
    @classmethod
    def validate_text(cls, v: Any) -> str:
        """Trim the label and reject blank input.

        :param v: The raw label.
        :returns: The trimmed label.
        """
        return clean_item_text(v)

    def to_item(self) -> ChecklistItem:
        """Build the row to persist, with a fresh id and timestamps."""
        return ChecklistItem(
            task_id=self.task_id,
            parent_id=self.parent_id,
            text=self.text,
            position=self.position,
            is_completed=self.is_completed,
        )


class PositionUpdate(CheckTreeBaseModel):
    """A single ``position`` write produced by a reorder."""

    id: str
    position: int = PydanticField(ge=0)
