# ♥♥─── Checklist API Methods Mixin ───────────────────────────────────────────────
from __future__ import annotations

from typing import Any, cast

from checktree.custom_logger import log
from checktree.core.client.api_models import StoreAPIError, SuccessfulResponseData, _validate_not_empty_param


def _eq(value: str) -> str:
    """Build an equality filter value."""
    return f"eq.{value}"


class ChecklistMixin:
    """Row-level calls against the checklist table."""

    table: str

    async def get(self, api_endpoint: str, params: dict[str, Any] | None = None, *, operation: str | None = None, **kwargs: Any) -> SuccessfulResponseData: ...
    async def post(self, api_endpoint: str, data: Any | None = None, params: dict[str, Any] | None = None, *, operation: str | None = None, **kwargs: Any) -> SuccessfulResponseData: ...
    async def patch(self, api_endpoint: str, data: Any | None = None, params: dict[str, Any] | None = None, *, operation: str | None = None, **kwargs: Any) -> SuccessfulResponseData: ...
    async def delete(self, api_endpoint: str, params: dict[str, Any] | None = None, *, operation: str | None = None, **kwargs: Any) -> SuccessfulResponseData: ...

    async def get_checklist_rows(self, task_id: str) -> list[dict[str, Any]]:
        """Fetch every row of a task's checklist.

        :param task_id: The owning task.
        :return: Raw rows, in the order the API returns them.
        """
        _validate_not_empty_param(task_id, "Task ID")
        result = await self.get(self.table, params={"select": "*", "task_id": _eq(task_id)}, operation="list")
        return cast("list[dict[str, Any]]", result or [])

    async def create_checklist_rows(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert one or more rows in a single request.

        :param rows: Column values per row.
        :return: The stored rows.
        """
        if not rows:
            return []
        result = await self.post(self.table, data=rows, operation="insert" if len(rows) == 1 else "insert_batch")
        return cast("list[dict[str, Any]]", result or [])

    async def update_checklist_row(self, item_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Apply a partial update to one row.

        :param item_id: The row to update.
        :param fields: Column values to write.
        :return: The updated row.
        :raises StoreAPIError: If no row matched.
        """
        _validate_not_empty_param(item_id, "Checklist Item ID")
        result = await self.patch(self.table, data=fields, params={"id": _eq(item_id)}, operation="update")
        rows = cast("list[dict[str, Any]]", result or [])
        if not rows:
            msg = f"Checklist item {item_id} not found"
            raise StoreAPIError(msg, status_code=404, operation="update")
        return rows[0]

    async def delete_checklist_row(self, item_id: str) -> None:
        """Delete one row. Missing rows are not an error.

        :param item_id: The row to delete.
        """
        _validate_not_empty_param(item_id, "Checklist Item ID")
        result = await self.delete(self.table, params={"id": _eq(item_id)}, operation="delete")
        if not result:
            log.warning("Delete of checklist item {} matched no rows.", item_id)
