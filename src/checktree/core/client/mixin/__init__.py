# ♥♥─── API Client Mixins Initialization ─────────────────────────────────────────
from __future__ import annotations

from .checklist_mixin import ChecklistMixin


__all__ = ["ChecklistMixin"]
