# ♥♥─── UI Init ──────────────────────────────────────────────────────────────
from __future__ import annotations

from .console import console
from .themed_icons import icons


__all__ = ["console", "icons"]
