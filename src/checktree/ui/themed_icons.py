# ♥♥─── Themed Icon Provider ───────────────────────────────────────────────────
from __future__ import annotations

from enum import Enum
from typing import Literal
from functools import lru_cache


Shape = Literal["SIMPLE", "CIRCLE", "SQUARE"]


# ─── Icon Definitions ───────────────────────────────────────────────────────────
class IconName(str, Enum):
    """Nerd-font glyphs used across the console and the checklist screen."""

    CHECK = "󰄬"
    CHECK_SQUARE = "󰄵"
    CHECK_SQUARE_O = "󰄱"
    CHECK_CIRCLE = "󰄴"
    CHECK_CIRCLE_O = "󰄰"
    CHECK_MARK = "✓"
    MULTIPLICATION_X = "✗"
    CHEVRON_RIGHT = ""
    CHEVRON_DOWN = ""
    GRIP = "󰇙"
    CREATE = "󰐕"
    EDIT = "󰏫"
    ERASE = "󰆴"
    RELOAD = "󰑐"
    LIST = "󰉹"
    IMPORT = "󰋺"
    ERROR = "󰅚"
    WARNING = "󰀪"
    INFO = "󰋼"
    QUESTION_CIRCLE = "󰘥"
    DATABASE = "󰆼"
    CLOUD = "󰅟"


# ─── Icon Retriever ─────────────────────────────────────────────────────────────
@lru_cache(maxsize=128)
def get_icon(name: str, shape: Shape = "SIMPLE", outline: bool = False) -> str | None:
    """Resolve ``name`` to a glyph, preferring the shaped/outlined variant.

    Exact member names (``CHECK_SQUARE_O``) always win; base names (``CHECK``)
    pick ``CHECK_<SHAPE>[_O]`` when such a variant exists.
    """
    suffix = "_O" if outline else ""
    candidates = [name]
    if shape != "SIMPLE":
        candidates.insert(0, f"{name}_{shape}{suffix}")
    elif outline:
        candidates.insert(0, f"{name}_O")
    for candidate in candidates:
        if candidate in IconName.__members__:
            return IconName[candidate].value
    return None


# ─── Themed Icon Class ──────────────────────────────────────────────────────────
class ThemedIcons:
    """Attribute access to icons, e.g. ``icons.CHECK``, for one shape preset."""

    def __init__(self, shape: Shape = "SIMPLE", outline: bool = False) -> None:
        self.shape: Shape = shape
        self.outline = outline

    def __getattr__(self, name: str) -> str:
        glyph = get_icon(name, self.shape, self.outline)
        if glyph is None:
            msg = f"Icon '{name}' not found. Available: {sorted(IconName.__members__)}"
            raise AttributeError(msg)
        return glyph


class Icons:
    """Preset icon themes."""

    simple = ThemedIcons()
    square = ThemedIcons("SQUARE")
    square_outline = ThemedIcons("SQUARE", outline=True)


icons = Icons.simple
