"""Tests for the REST checklist store, routed through httpx.MockTransport."""

import json

import httpx
import pytest

from checktree.config import StoreSettings
from checktree.core.client import ChecklistStoreClient, RateLimiter, RestItemStore, StoreAPIError
from checktree.core.exceptions import PersistenceError, ItemValidationError
from checktree.core.services import ChecklistManager
from conftest import TASK_ID, make_item

BASE_URL = "https://db.example.com/rest/v1"


def row(item_id, position, parent_id=None, text=None):
    return {
        "id": item_id,
        "task_id": TASK_ID,
        "parent_id": parent_id,
        "text": text or f"item {item_id}",
        "is_completed": False,
        "position": position,
        "created_at": "2024-05-01T10:00:00+00:00",
        "updated_at": "2024-05-01T10:00:00+00:00",
    }


class Recorder:
    """MockTransport handler that records requests and replays queued responses."""

    def __init__(self, *responses):
        self.requests: list[httpx.Request] = []
        self.responses = list(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return httpx.Response(response.status_code, headers=response.headers, content=response.content)


def make_store(*responses):
    recorder = Recorder(*responses)
    settings = StoreSettings(backend="rest", base_url=BASE_URL, api_key="service-key", requests_per_minute=6000)
    client = ChecklistStoreClient(settings, rate_limiter=RateLimiter(initial_interval=0), transport=httpx.MockTransport(recorder))
    return RestItemStore(client), recorder


# =============================================================================
# Requests
# =============================================================================


class TestRequests:
    """Tests for the shape of outgoing requests."""

    @pytest.mark.asyncio
    async def test_list_filters_by_task(self):
        store, recorder = make_store(httpx.Response(200, json=[row("a", 0), row("b", 1)]))
        items = await store.list(TASK_ID)
        assert [item.id for item in items] == ["a", "b"]
        request = recorder.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/rest/v1/task_checklist_items"
        assert request.url.params["task_id"] == f"eq.{TASK_ID}"
        assert request.url.params["select"] == "*"
        assert request.headers["apikey"] == "service-key"
        assert request.headers["authorization"] == "Bearer service-key"
        assert request.headers["prefer"] == "return=representation"
        await store.aclose()

    @pytest.mark.asyncio
    async def test_insert_batch_posts_all_rows(self):
        items = [make_item("x", 0), make_item("y", 1, parent_id="x")]
        store, recorder = make_store(httpx.Response(201, json=[row("x", 0), row("y", 1, parent_id="x")]))
        stored = await store.insert_batch(items)
        assert [item.id for item in stored] == ["x", "y"]
        body = json.loads(recorder.requests[0].content)
        assert recorder.requests[0].method == "POST"
        assert [entry["id"] for entry in body] == ["x", "y"]
        assert body[1]["parent_id"] == "x"
        assert body[0]["is_completed"] is False

    @pytest.mark.asyncio
    async def test_update_patches_one_row(self):
        store, recorder = make_store(httpx.Response(200, json=[row("x", 3)]))
        await store.update("x", {"position": 3})
        request = recorder.requests[0]
        body = json.loads(request.content)
        assert request.method == "PATCH"
        assert request.url.params["id"] == "eq.x"
        assert body["position"] == 3
        assert "updated_at" in body

    @pytest.mark.asyncio
    async def test_delete(self):
        store, recorder = make_store(httpx.Response(200, json=[row("x", 0)]))
        await store.delete("x")
        assert recorder.requests[0].method == "DELETE"
        assert recorder.requests[0].url.params["id"] == "eq.x"

    @pytest.mark.asyncio
    async def test_delete_of_missing_row_is_not_an_error(self):
        store, _ = make_store(httpx.Response(200, json=[]))
        await store.delete("gone")


# =============================================================================
# Errors
# =============================================================================


class TestErrors:
    """Tests for error translation."""

    @pytest.mark.asyncio
    async def test_update_matching_no_row(self):
        store, _ = make_store(httpx.Response(200, json=[]))
        with pytest.raises(StoreAPIError) as exc_info:
            await store.update("ghost", {"text": "x"})
        assert exc_info.value.status_code == 404
        assert exc_info.value.operation == "update"

    @pytest.mark.asyncio
    async def test_error_body_is_parsed(self):
        body = {"message": "duplicate key value", "code": "23505", "details": None, "hint": None}
        store, _ = make_store(httpx.Response(409, json=body))
        with pytest.raises(StoreAPIError) as exc_info:
            await store.insert(make_item("x", 0))
        error = exc_info.value
        assert error.status_code == 409
        assert error.error_code == "23505"
        assert "duplicate key value" in str(error)
        assert str(error).startswith("insert: ")

    @pytest.mark.asyncio
    async def test_transport_error(self):
        store, _ = make_store(httpx.ConnectError("connection refused"))
        with pytest.raises(StoreAPIError) as exc_info:
            await store.list(TASK_ID)
        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_malformed_json(self):
        store, _ = make_store(httpx.Response(200, content=b"not json", headers={"Content-Type": "application/json"}))
        with pytest.raises(StoreAPIError):
            await store.list(TASK_ID)

    @pytest.mark.asyncio
    async def test_malformed_row(self):
        store, _ = make_store(httpx.Response(200, json=[{"id": "a"}]))
        with pytest.raises(PersistenceError) as exc_info:
            await store.list(TASK_ID)
        assert exc_info.value.operation == "list"

    @pytest.mark.asyncio
    async def test_unknown_field_rejected_before_request(self):
        store, recorder = make_store(httpx.Response(200, json=[row("x", 0)]))
        with pytest.raises(PersistenceError):
            await store.update("x", {"task_id": "other"})
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_blank_ids_rejected(self):
        store, recorder = make_store(httpx.Response(200, json=[]))
        with pytest.raises(ItemValidationError):
            await store.list(" ")
        with pytest.raises(ItemValidationError):
            await store.delete("")
        assert recorder.requests == []

    def test_missing_credentials(self):
        with pytest.raises(ValueError, match="STORE_BASE_URL"):
            ChecklistStoreClient(StoreSettings(backend="sqlite"))


# =============================================================================
# Rate limiting
# =============================================================================


class TestRateLimiting:
    """Tests for 429 handling and limiter bookkeeping."""

    @pytest.mark.asyncio
    async def test_429_is_retried(self):
        store, recorder = make_store(httpx.Response(429, headers={"Retry-After": "0"}), httpx.Response(200, json=[row("a", 0)]))
        items = await store.list(TASK_ID)
        assert [item.id for item in items] == ["a"]
        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_429_retries_are_bounded(self):
        store, recorder = make_store(httpx.Response(429, headers={"Retry-After": "0"}))
        with pytest.raises(StoreAPIError) as exc_info:
            await store.list(TASK_ID)
        assert exc_info.value.status_code == 429
        assert len(recorder.requests) == 4

    @pytest.mark.asyncio
    async def test_stats_are_recorded(self):
        store, _ = make_store(httpx.Response(200, json=[]))
        await store.list(TASK_ID)
        info = store.client.get_current_rate_limit_info()
        assert info["request_stats"]["successful_requests"] == 1
        assert info["request_stats"]["failed_requests"] == 0

    def test_low_remaining_budget_widens_interval(self):
        limiter = RateLimiter(initial_interval=1.0)
        limiter.update_rules_from_headers(httpx.Headers({"X-RateLimit-Remaining": "1", "X-RateLimit-Limit": "100"}))
        assert limiter.current_interval == 1.5
        limiter.update_rules_from_headers(httpx.Headers({"X-RateLimit-Remaining": "90", "X-RateLimit-Limit": "100"}))
        assert limiter.current_interval == 1.0


# =============================================================================
# Manager over REST
# =============================================================================


class TestManagerOverRest:
    """The manager works unchanged on top of the REST store."""

    @pytest.mark.asyncio
    async def test_refresh_builds_tree_from_rows(self, checklist_settings):
        rows = [row("child", 0, parent_id="root"), row("root", 0), row("orphan", 1, parent_id="missing")]
        store, _ = make_store(httpx.Response(200, json=rows))
        manager = ChecklistManager(store, TASK_ID, settings=checklist_settings)
        assert await manager.refresh()
        assert [node.id for node in manager.roots] == ["root", "orphan"]
        assert [node.id for node in manager.roots[0].children] == ["child"]
        assert manager.roots[0].created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_http_failure_surfaces_as_error(self, checklist_settings):
        store, _ = make_store(httpx.Response(500, json={"message": "boom"}))
        manager = ChecklistManager(store, TASK_ID, settings=checklist_settings)
        assert await manager.refresh() is False
        assert "HTTP status 500" in manager.error


def test_build_store_selects_rest_backend(checklist_settings):
    from checktree.config import ApplicationSettings
    from checktree.core.services import build_store

    settings = ApplicationSettings(store=StoreSettings(backend="rest", base_url=BASE_URL, api_key="service-key"), checklist=checklist_settings)
    store = build_store(settings)
    assert isinstance(store, RestItemStore)
    assert store.client.base_api_url == f"{BASE_URL}/"
