# ♥♥─── Global Console ─────────────────────────────────────────────────────────
from rich.traceback import install as install_rich_traceback

from .theme_manager import create_console


console = create_console()

install_rich_traceback(console=console, show_locals=False, word_wrap=True, extra_lines=3)
