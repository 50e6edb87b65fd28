# ♥♥─── Store Factory ─────────────────────────────────────────────────────────────
from __future__ import annotations

from typing import TYPE_CHECKING

from checktree.ui import icons
from checktree.custom_logger import log


if TYPE_CHECKING:
    from checktree.config import ApplicationSettings
    from checktree.core.repositories import OrderedItemStore


def build_store(settings: ApplicationSettings) -> OrderedItemStore:
    """Create the item store selected by ``STORE_BACKEND``.

    :param settings: The application settings.
    :returns: A SQLite vault or a REST-backed store.
    """
    if settings.store.backend == "rest":
        from checktree.core.client import RestItemStore, ChecklistStoreClient  # noqa: PLC0415

        log.info("{} Using REST checklist store at {}", icons.CLOUD, settings.store.base_url)
        return RestItemStore(ChecklistStoreClient(settings.store))
    from checktree.core.repositories import ChecklistVault  # noqa: PLC0415

    log.info("{} Using SQLite checklist store at {}", icons.DATABASE, settings.storage.get_database_file_path())
    return ChecklistVault(storage=settings.storage)
