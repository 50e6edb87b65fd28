# ♥♥─── CheckTree Base Models ──────────────────────────────────────────────────
"""Common Pydantic models and configurations for CheckTree."""

from __future__ import annotations

from humps import camelize
from pydantic import BaseModel, ConfigDict
from sqlmodel import Field, SQLModel


# ─── Common Model Configuration ────────────────────────────────────────────────
CHECKTREE_MODEL_CONFIG = ConfigDict(
    extra="ignore",
    populate_by_name=True,
    alias_generator=camelize,
    arbitrary_types_allowed=True,
    validate_assignment=True,
    use_enum_values=True,
)

# Table models: plain column names, no assignment validation.
CHECKTREE_SQL_MODEL_CONFIG = ConfigDict(arbitrary_types_allowed=True, use_enum_values=True)


# ─── Base Models ──────────────────────────────────────────────────────────────
class CheckTreeBaseModel(BaseModel):
    """Base Pydantic model with shared project configuration."""

    model_config = CHECKTREE_MODEL_CONFIG


class CheckTreeSQLModel(SQLModel):
    """Base SQLModel for all database tables."""

    model_config = CHECKTREE_SQL_MODEL_CONFIG  # type: ignore
    id: str = Field(primary_key=True)
