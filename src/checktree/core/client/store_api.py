# ♥♥─── Store API Client Core ──────────────────────────────────────────────────────
"""Core asynchronous HTTP client for a PostgREST-style checklist table API."""

from __future__ import annotations

import json
import time
from typing import TYPE_CHECKING, Any, Self, NoReturn
import asyncio

import httpx
from pydantic import BaseModel, ValidationError

from checktree.custom_logger import log

from .api_models import StoreAPIError, StoreErrorResponse, SuccessfulResponseData
from .rate_limiter import RateLimiter, RequestExecutionStats, interval_for


if TYPE_CHECKING:
    from checktree.config import StoreSettings
# ─── Constants ─────────────────────────────────────────────────────────────────
CODE_RATE_LIMIT_EXCEEDED = 429
CODE_SUCCESS_NO_MSG = 204
MAX_RATE_LIMIT_RETRIES = 3


# ─── Store API ─────────────────────────────────────────────────────────────────
class RestStoreAPI:
    """Asynchronous base client for the REST checklist table."""

    base_api_url: str
    table: str
    _client: httpx.AsyncClient | None = None
    api_headers: dict[str, str]
    rate_limiter: RateLimiter
    request_stats: RequestExecutionStats

    def __init__(self, store_settings: StoreSettings | None = None, rate_limiter: RateLimiter | None = None, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Initialize the REST store client.

        :param store_settings: Store configuration; loaded from the environment if None.
        :param rate_limiter: Limiter shared by every request (built from ``requests_per_minute`` if None).
        :param transport: Optional httpx transport, used to route requests in tests.
        """
        if store_settings is None:
            from checktree.config import get_settings  # noqa: PLC0415

            store_settings = get_settings().store
        if not (store_settings.base_url and store_settings.api_key):
            log.critical("RestStoreAPI: base_url or api_key is missing.")
            msg = "STORE_BASE_URL and STORE_API_KEY are required for the REST store."
            raise ValueError(msg)
        api_key = store_settings.api_key.get_secret_value()
        self.base_api_url = store_settings.base_url
        self.table = store_settings.table
        self.timeout_seconds = store_settings.timeout_seconds
        self._transport = transport
        self.api_headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Prefer": "return=representation",
        }
        self.rate_limiter = rate_limiter or RateLimiter(interval_for(store_settings.requests_per_minute))
        self.request_stats = RequestExecutionStats()
        log.debug("RestStoreAPI initialized. Base URL: {} table: {}", self.base_api_url, self.table)

    @property
    def async_http_client(self) -> httpx.AsyncClient:
        """Provide access to the `httpx.AsyncClient` instance, creating it if necessary.

        :returns: The httpx.AsyncClient instance.
        """
        if self._client is None or self._client.is_closed:
            log.debug("Initializing new httpx.AsyncClient instance.")
            self._client = httpx.AsyncClient(
                headers=self.api_headers,
                base_url=self.base_api_url,
                timeout=httpx.Timeout(self.timeout_seconds, connect=min(self.timeout_seconds, 10.0)),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close_client_session(self) -> None:
        """Close the underlying `httpx.AsyncClient` session if it's open."""
        if self._client and not self._client.is_closed:
            log.debug("Closing httpx.AsyncClient session.")
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> Self:
        """Enable use as an asynchronous context manager, returns self."""
        return self

    async def __aexit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: object) -> None:
        """Close the client session when exiting the async context manager."""
        await self.close_client_session()

    def get_current_rate_limit_info(self) -> dict[str, Any]:
        """Return current rate limit status and request statistics."""
        return {"current_request_interval_s": self.rate_limiter.current_interval, "time_since_last_request_s": round(time.monotonic() - self.rate_limiter.last_request_time, 3), "request_stats": self.request_stats.get_summary_dict()}

    @staticmethod
    def _prepare_request_data(data: Any | None) -> Any:
        """Prepare data for an HTTP request body, serializing Pydantic models.

        :param data: A Pydantic model, a list of models, a dictionary, or None.
        :returns: JSON-ready data.
        """
        if data is None:
            return None
        if isinstance(data, BaseModel):
            return data.model_dump(mode="json")
        if isinstance(data, list):
            return [item.model_dump(mode="json") if isinstance(item, BaseModel) else item for item in data]
        return data

    async def _execute_request(self, http_method: str, api_endpoint: str, operation: str | None = None, _attempt: int = 0, **kwargs: Any) -> SuccessfulResponseData:
        """Core method for making an HTTP request. Handles rate limiting, request execution, response, error.

        :param http_method: The HTTP method (e.g., "GET", "POST").
        :param api_endpoint: The endpoint path, relative to the base URL.
        :param operation: Store operation name carried by raised errors.
        :param kwargs: Additional arguments for `httpx.AsyncClient.request()`.
        :returns: The decoded JSON body, or None for empty responses.
        :raises StoreAPIError: If the request fails for any reason.
        """
        await self.rate_limiter.wait_if_needed()
        start_time_mono = time.monotonic()
        normalized_endpoint = api_endpoint.lstrip("/")

        try:
            response = await self._make_http_request(http_method, normalized_endpoint, **kwargs)
            if response.status_code == CODE_RATE_LIMIT_EXCEEDED and _attempt < MAX_RATE_LIMIT_RETRIES:
                return await self._handle_rate_limit_and_retry(http_method, api_endpoint, response, operation, _attempt, **kwargs)
            response.raise_for_status()
            request_duration_s = time.monotonic() - start_time_mono
            if response.status_code == CODE_SUCCESS_NO_MSG or not response.content:
                self.request_stats.record_successful_request(request_duration_s)
                log.debug("Success ({}): {} {} in {:.3f}s", response.status_code, http_method.upper(), normalized_endpoint, request_duration_s)
                return None
            payload = self._parse_response_json(response, http_method, normalized_endpoint, operation)
            self.request_stats.record_successful_request(request_duration_s)
            log.debug("Success ({}) : {} {} in {:.3f}s", response.status_code, http_method.upper(), normalized_endpoint, request_duration_s)
            return payload

        except StoreAPIError:
            raise
        except httpx.HTTPStatusError as http_err:
            self._handle_http_status_error(http_err, http_method, normalized_endpoint, operation)
        except httpx.RequestError as transport_err:
            self._handle_transport_error(transport_err, http_method, normalized_endpoint, operation)
        except Exception as e:
            self._handle_unexpected_error(e, normalized_endpoint, operation)

    async def _make_http_request(self, http_method: str, normalized_endpoint: str, **kwargs: Any) -> httpx.Response:
        """Make the actual HTTP request and update rate limiter."""
        log.debug("Requesting: {} {} with params: {}", http_method.upper(), f"{self.base_api_url}{normalized_endpoint}", kwargs.get("params"))
        response = await self.async_http_client.request(method=http_method.upper(), url=normalized_endpoint, **kwargs)
        self.rate_limiter.update_rules_from_headers(response.headers)
        return response

    async def _handle_rate_limit_and_retry(self, http_method: str, api_endpoint: str, response: httpx.Response, operation: str | None, attempt: int, **kwargs: Any) -> SuccessfulResponseData:
        """Handle rate limit exceeded response and retry the request."""
        retry_after_str = response.headers.get("Retry-After", str(self.rate_limiter.current_interval * 1.5))
        try:
            retry_wait_seconds = float(retry_after_str)
        except ValueError:
            retry_wait_seconds = self.rate_limiter.current_interval * 1.5
        log.warning("Rate limit exceeded (HTTP 429). Retrying after {:.2f} seconds for {}.", retry_wait_seconds, api_endpoint.lstrip("/"))
        await asyncio.sleep(retry_wait_seconds)
        return await self._execute_request(http_method, api_endpoint, operation=operation, _attempt=attempt + 1, **kwargs)

    def _parse_response_json(self, response: httpx.Response, http_method: str, normalized_endpoint: str, operation: str | None) -> Any:
        """Decode a JSON response body."""
        try:
            return response.json()
        except json.JSONDecodeError as json_err:
            self.request_stats.record_failed_request()
            log.error("JSONDecodeError for {} {}: {}. Response text: {}", http_method.upper(), normalized_endpoint, json_err, response.text[:200])
            raise StoreAPIError(
                message=f"Failed to decode JSON response from API: {json_err}",
                status_code=response.status_code,
                response_data=response.text,
                operation=operation,
            ) from json_err

    def _handle_http_status_error(self, http_err: httpx.HTTPStatusError, http_method: str, normalized_endpoint: str, operation: str | None) -> NoReturn:
        """Translate an error status into a :class:`StoreAPIError`."""
        self.request_stats.record_failed_request()
        error_response_data: Any = None
        error_code: str | None = None
        error_message_detail = http_err.response.text[:200]

        try:
            error_response_data = http_err.response.json()
            if isinstance(error_response_data, dict):
                error_body = StoreErrorResponse.model_validate(error_response_data)
                error_message_detail = error_body.message or error_body.details or error_message_detail
                error_code = error_body.code
        except (json.JSONDecodeError, ValidationError):
            pass

        log.warning("HTTPStatusError for {} {}: {} - {}", http_method.upper(), normalized_endpoint, http_err.response.status_code, error_message_detail)

        raise StoreAPIError(
            message=f"API request failed with HTTP status {http_err.response.status_code}: {error_message_detail}",
            status_code=http_err.response.status_code,
            error_code=error_code,
            response_data=error_response_data or http_err.response.text,
            operation=operation,
        ) from http_err

    def _handle_transport_error(self, transport_err: Exception, http_method: str, normalized_endpoint: str, operation: str | None) -> NoReturn:
        """Handle transport and timeout errors."""
        self.request_stats.record_failed_request()
        log.error("Transport/Timeout error for {} {}: {}", http_method.upper(), normalized_endpoint, transport_err)
        raise StoreAPIError(message=f"API request transport error: {transport_err.__class__.__name__} - {transport_err}", operation=operation) from transport_err

    def _handle_unexpected_error(self, error: Exception, normalized_endpoint: str, operation: str | None) -> NoReturn:
        """Handle unexpected errors."""
        self.request_stats.record_failed_request()
        log.exception("Unexpected error during API request to {}: {}", normalized_endpoint, error)
        raise StoreAPIError(message=f"An unexpected error occurred: {error}", operation=operation) from error

    # ─── HTTP Methods ─────────────────────────────────────────────────────
    async def get(self, api_endpoint: str, params: dict[str, Any] | None = None, *, operation: str | None = None, **kwargs: Any) -> SuccessfulResponseData:
        """Make a GET request to the specified endpoint.

        :param api_endpoint: The endpoint path.
        :param params: Optional dictionary of query parameters.
        :param operation: Store operation name carried by raised errors.
        :returns: The decoded response body.
        """
        return await self._execute_request("GET", api_endpoint, operation=operation, params=params, **kwargs)

    async def post(self, api_endpoint: str, data: Any | None = None, params: dict[str, Any] | None = None, *, operation: str | None = None, **kwargs: Any) -> SuccessfulResponseData:
        """Make a POST request, serializing Pydantic models in `data` if provided.

        :param api_endpoint: The endpoint path.
        :param data: The request body.
        :param params: Optional dictionary of query parameters.
        :param operation: Store operation name carried by raised errors.
        :returns: The decoded response body.
        """
        return await self._execute_request("POST", api_endpoint, operation=operation, json=self._prepare_request_data(data), params=params, **kwargs)

    async def patch(self, api_endpoint: str, data: Any | None = None, params: dict[str, Any] | None = None, *, operation: str | None = None, **kwargs: Any) -> SuccessfulResponseData:
        """Make a PATCH request, serializing Pydantic models in `data` if provided.

        :param api_endpoint: The endpoint path.
        :param data: The fields to write.
        :param params: Row filter as query parameters.
        :param operation: Store operation name carried by raised errors.
        :returns: The decoded response body.
        """
        return await self._execute_request("PATCH", api_endpoint, operation=operation, json=self._prepare_request_data(data), params=params, **kwargs)

    async def delete(self, api_endpoint: str, params: dict[str, Any] | None = None, *, operation: str | None = None, **kwargs: Any) -> SuccessfulResponseData:
        """Make a DELETE request.

        :param api_endpoint: The endpoint path.
        :param params: Row filter as query parameters.
        :param operation: Store operation name carried by raised errors.
        :returns: The decoded response body.
        """
        return await self._execute_request("DELETE", api_endpoint, operation=operation, params=params, **kwargs)
