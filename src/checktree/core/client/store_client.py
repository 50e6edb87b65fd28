# ♥♥─── Store Client ────────────────────────────────────────────────────────────
"""Define the REST checklist client and the item store built on it."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from checktree.core.models import ChecklistItem, utc_now
from checktree.custom_logger import log
from checktree.core.exceptions import PersistenceError
from checktree.core.repositories.item_store import UPDATABLE_FIELDS

from .store_api import RestStoreAPI
from .mixin.checklist_mixin import ChecklistMixin


if TYPE_CHECKING:
    from collections.abc import Sequence

    import httpx

    from checktree.config import StoreSettings

    from .rate_limiter import RateLimiter


class ChecklistStoreClient(RestStoreAPI, ChecklistMixin):
    """Asynchronous client for the checklist table."""

    def __init__(self, store_settings: StoreSettings | None = None, rate_limiter: RateLimiter | None = None, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Initialize the checklist client.

        :param store_settings: Store configuration; loaded from the environment if None.
        :param rate_limiter: Optional limiter override.
        :param transport: Optional httpx transport.
        """
        super().__init__(store_settings=store_settings, rate_limiter=rate_limiter, transport=transport)
        log.debug("ChecklistStoreClient initialized.")


def _row_payload(item: ChecklistItem) -> dict[str, Any]:
    """Column values for an insert."""
    return item.model_dump(mode="json")


def _parse_rows(rows: Sequence[dict[str, Any]], operation: str) -> list[ChecklistItem]:
    """Validate raw rows into :class:`ChecklistItem` objects.

    :raises PersistenceError: If a row does not match the table shape.
    """
    try:
        return [ChecklistItem.model_validate(row) for row in rows]
    except ValidationError as e:
        log.error("Malformed checklist row from REST store: {}", e.errors(include_input=False))
        msg = f"Malformed checklist row: {e}"
        raise PersistenceError(msg, operation=operation) from e


# ─── REST Item Store ──────────────────────────────────────────────────────────
class RestItemStore:
    """Ordered item store backed by :class:`ChecklistStoreClient`."""

    def __init__(self, client: ChecklistStoreClient) -> None:
        self.client = client

    async def list(self, task_id: str) -> Sequence[ChecklistItem]:
        rows = await self.client.get_checklist_rows(task_id)
        return _parse_rows(rows, "list")

    async def insert(self, item: ChecklistItem) -> ChecklistItem:
        rows = await self.client.create_checklist_rows([_row_payload(item)])
        stored = _parse_rows(rows, "insert")
        return stored[0] if stored else item

    async def insert_batch(self, items: Sequence[ChecklistItem]) -> Sequence[ChecklistItem]:
        if not items:
            return []
        rows = await self.client.create_checklist_rows([_row_payload(item) for item in items])
        return _parse_rows(rows, "insert_batch") or list(items)

    async def update(self, item_id: str, fields: dict[str, Any]) -> None:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            msg = f"Fields cannot be updated: {', '.join(sorted(unknown))}"
            raise PersistenceError(msg, operation="update")
        await self.client.update_checklist_row(item_id, {**fields, "updated_at": utc_now().isoformat()})

    async def delete(self, item_id: str) -> None:
        await self.client.delete_checklist_row(item_id)

    async def aclose(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close_client_session()
