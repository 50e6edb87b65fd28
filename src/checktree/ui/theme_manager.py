# ♥♥─── Console Style Manager ────────────────────────────────────────────────────
from __future__ import annotations

import os

from rich.style import Style
from rich.theme import Theme
from rich.console import Console


# ─── Palettes ──────────────────────────────────────────────────────────────────

Palette = dict[str, str]

PALETTES: dict[str, Palette] = {
    "rose_pine": {
        "muted": "#6e6a86",
        "subtle": "#908caa",
        "text": "#e0def4",
        "love": "#eb6f92",
        "gold": "#f6c177",
        "pine": "#31748f",
        "foam": "#9ccfd8",
        "iris": "#c4a7e7",
    },
    "rose_pine_dawn": {
        "muted": "#9893a5",
        "subtle": "#797593",
        "text": "#575279",
        "love": "#b4637a",
        "gold": "#ea9d34",
        "pine": "#286983",
        "foam": "#56949f",
        "iris": "#907aa9",
    },
}
DEFAULT_PALETTE = "rose_pine"


# ─── Theme Builder ─────────────────────────────────────────────────────────────


def build_theme(palette: Palette) -> Theme:
    """Named styles used by log output, checklist rows and status messages.

    :param palette: Colour roles for one palette.
    :returns: A rich Theme; unknown roles fall back to the terminal default.
    """

    def colour(role: str, **attrs: bool) -> Style:
        return Style(color=palette.get(role), **attrs)

    return Theme(
        {
            "primary": colour("iris", bold=True),
            "success": colour("foam"),
            "warning": colour("gold"),
            "error": colour("love", bold=True),
            "muted": colour("muted", dim=True),
            "item.open": colour("text"),
            "item.completed": colour("muted", strike=True),
            "item.handle": colour("pine", dim=True),
            "log.time": colour("muted"),
            "log.separator": colour("pine"),
            "log.module": colour("iris", dim=True),
            "log.level.trace": colour("muted", dim=True),
            "log.level.debug": colour("subtle"),
            "log.level.info": colour("pine"),
            "log.level.success": colour("foam"),
            "log.level.warning": colour("gold"),
            "log.level.error": colour("love"),
            "log.level.critical": colour("love", bold=True),
        }
    )


def create_console(palette_name: str = DEFAULT_PALETTE) -> Console:
    """Create a rich Console themed with one of :data:`PALETTES`.

    :raises ValueError: If ``palette_name`` is unknown.
    """
    if palette_name not in PALETTES:
        msg = f"Theme '{palette_name}' not found. Available: {sorted(PALETTES)}"
        raise ValueError(msg)
    os.environ.setdefault("COLORTERM", "truecolor")
    return Console(theme=build_theme(PALETTES[palette_name]), highlight=True, soft_wrap=True)
