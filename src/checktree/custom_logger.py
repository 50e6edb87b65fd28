# ♥♥─── Global Application Logger Configuration ───────────────────────────
from __future__ import annotations

from typing import TYPE_CHECKING, Any
from pathlib import Path
from functools import wraps
import logging
import contextlib

from loguru import logger

from rich.text import Text
from rich.errors import MarkupError

from .ui.console import console


if TYPE_CHECKING:
    from collections.abc import Callable

# ─── Configuration ─────────────────────────────────────────────────────────────

LEVEL_CONFIG: dict[str, dict[str, str]] = {
    "TRACE": {"icon": "󱐋", "color": "#908caa"},
    "DEBUG": {"icon": "󱏿", "color": "#6e6a86"},
    "INFO": {"icon": "󰫍", "color": "#31748f"},
    "SUCCESS": {"icon": "󰸞", "color": "#9ccfd8"},
    "WARNING": {"icon": "󱍢", "color": "#f6c177"},
    "ERROR": {"icon": "󱎘", "color": "#eb6f92"},
    "CRITICAL": {"icon": "󰚌", "color": "#eb6f92"},
}
FALLBACK_LEVEL = {"icon": "•", "color": "#908caa"}

LOG_FILE_NAME = "checktree.log"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"
QUIET_LIBRARIES = ("httpx", "httpcore", "sqlalchemy.engine", "asyncio", "textual")


# ─── Utility Functions ─────────────────────────────────────────────────────────


def _project_root() -> Path:
    """First directory upwards from the cwd holding a project marker."""
    cwd = Path.cwd()
    return next((folder for folder in (cwd, *cwd.parents) if (folder / "pyproject.toml").exists() or (folder / ".git").exists()), cwd)


def get_log_dir() -> Path:
    """Return ``app_data/logs`` under the project root, creating it when missing."""
    log_directory = _project_root() / "app_data" / "logs"
    log_directory.mkdir(parents=True, exist_ok=True)
    return log_directory


def _markup(message: str, style: str | None = None) -> Text:
    """Render rich markup, falling back to plain text for stray brackets."""
    try:
        return Text.from_markup(message, style=style or "")
    except MarkupError:
        return Text(message, style=style or "")


class _InterceptHandler(logging.Handler):
    """Forward records from the standard ``logging`` module into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1
        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


# ─── Logger Class ──────────────────────────────────────────────────────────────


class MinimalLogger:
    """Owns the loguru sinks: a themed rich console and a rotating file.

    The console sink can be swapped for a quieter one while a full screen
    application owns the terminal.
    """

    def __init__(self, console_level: str = "INFO", file_level: str = "DEBUG") -> None:
        self.console: Any = console
        self.path: Path = get_log_dir()
        self._console_sink_id: int | None = None

        logger.remove()
        self._add_console_sink(console_level)
        logger.add(
            sink=self.path / LOG_FILE_NAME,
            level=file_level,
            format=FILE_FORMAT,
            backtrace=True,
            diagnose=False,
            rotation="10 MB",
            retention="7 days",
            compression="zip",
            encoding="utf-8",
        )
        logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
        for name in QUIET_LIBRARIES:
            logging.getLogger(name).setLevel(logging.WARNING)

    def _add_console_sink(self, level: str) -> None:
        self._console_sink_id = logger.add(self._console_sink, level=level, format="{message}", colorize=False, backtrace=False, diagnose=False)  # type: ignore

    def set_console_level(self, level: str) -> None:
        """Replace the console sink with one filtering at ``level``."""
        if self._console_sink_id is not None:
            with contextlib.suppress(ValueError):
                logger.remove(self._console_sink_id)
        self._add_console_sink(level)

    def _console_sink(self, message: Any) -> None:
        record = message.record
        level_name = record["level"].name
        style = f"log.level.{level_name.lower()}"
        icon = LEVEL_CONFIG.get(level_name, FALLBACK_LEVEL)["icon"]
        self.console.print(
            Text(record["time"].strftime("%H:%M:%S"), style="log.time"),
            Text("|", style="log.separator"),
            Text(record["module"], style="log.module"),
            Text(f"{icon:<2}", style=style),
            _markup(record["message"], style),
        )


# ─── Global Logger Instance and Helper Functions ───────────────────────────────

logger_instance = MinimalLogger()


def set_console_level(level: str) -> None:
    """Change the minimum level printed on the console, e.g. while a TUI owns the terminal."""
    logger_instance.set_console_level(level)


def get_logger() -> Any:
    """Get the configured Loguru logger instance."""
    return logger


def logged(func: Callable) -> Callable:
    """Trace calls of ``func`` at debug level and log its failures.

    :param func: The function to be decorated
    :returns: The wrapped function
    """
    qualified = f"[i white]{func.__module__}.{func.__name__}[/i white]"

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        logger.debug("→ Calling {}", qualified)
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error("Error in {}: {}", qualified, e)
            raise
        logger.debug("{}  Completed {}", LEVEL_CONFIG["INFO"]["icon"], qualified)
        return result

    return wrapper


def add_textual_sink(textual_widget: Any, level: str = "INFO") -> int:
    """
    Mirror log records into a Textual widget that has a ``write`` method.

    :param textual_widget: Usually a ``RichLog``
    :param level: The minimum logging level for this sink
    :returns: The handler ID for the added sink
    """

    def textual_sink(message: Any) -> None:
        record = message.record
        level_config = LEVEL_CONFIG.get(record["level"].name, FALLBACK_LEVEL)
        textual_widget.write(
            Text.assemble(
                (f"{record['time']:%H:%M:%S}│", "dim"),
                (f"{level_config['icon']:<3}", level_config["color"]),
                _markup(record["message"]),
            )
        )

    return logger.add(textual_sink, level=level, format="{message}")  # type: ignore


def remove_textual_sink(sink_id: int) -> None:
    """Detach a sink added by :func:`add_textual_sink`; unknown ids are ignored."""
    with contextlib.suppress(ValueError):
        logger.remove(sink_id)


log = logger
