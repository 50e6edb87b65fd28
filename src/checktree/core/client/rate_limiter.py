# ♥♥─── Rate Limiter ─────────────────────────────────────────────────────────────
from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any
import asyncio
from dataclasses import field, dataclass

from checktree.custom_logger import log


if TYPE_CHECKING:
    import httpx
# ─── Constants ──────────────────────────────────────────────────────────────────
DEFAULT_REQUESTS_PER_MINUTE: int = 120


def interval_for(requests_per_minute: int) -> float:
    """Minimum spacing between requests for a per-minute budget."""
    return 60.0 / requests_per_minute if requests_per_minute > 0 else 0.0


# ─── Rate Limiter ───────────────────────────────────────────────────────────────
class RateLimiter:
    """A simple asynchronous rate limiter that spaces requests apart.

    Concurrent callers reserve consecutive slots, so a batch of concurrent
    position updates is spread over the interval rather than fired at once.
    """

    def __init__(self, initial_interval: float = interval_for(DEFAULT_REQUESTS_PER_MINUTE)) -> None:
        """Initialize the RateLimiter.

        :param initial_interval: The initial minimum interval between requests in seconds.
        """
        self.base_interval: float = initial_interval
        self.current_interval: float = initial_interval
        self.last_request_time: float = 0.0
        log.debug("RateLimiter initialized with interval: {:.2f}s", self.current_interval)

    async def wait_if_needed(self) -> None:
        """Pause execution if the time since the last request is less than the current interval."""
        current_time = time.monotonic()
        scheduled = max(current_time, self.last_request_time + self.current_interval)
        self.last_request_time = scheduled
        wait_duration = scheduled - current_time
        if wait_duration > 0:
            log.debug("RateLimiter: Waiting for {:.2f}s to respect rate limit.", wait_duration)
            await asyncio.sleep(wait_duration)

    def update_rules_from_headers(self, response_headers: httpx.Headers) -> None:
        """Update the rate limiting interval based on information from API response headers.

        :param response_headers: The HTTP response headers.
        """
        retry_after_seconds = response_headers.get("Retry-After")
        if retry_after_seconds:
            try:
                new_interval = float(retry_after_seconds)
            except ValueError:
                log.warning("RateLimiter: Could not parse Retry-After header value: '{}'.", retry_after_seconds)
            else:
                self.current_interval = max(self.base_interval, new_interval)
                log.warning("RateLimiter: Retry-After received. Adjusted interval to {:.2f}s.", self.current_interval)
                return
        remaining_requests_str = response_headers.get("X-RateLimit-Remaining")
        limit_per_window_str = response_headers.get("X-RateLimit-Limit")
        if remaining_requests_str and limit_per_window_str:
            try:
                remaining = int(remaining_requests_str)
                limit = int(limit_per_window_str)
            except ValueError:
                log.warning("RateLimiter: Could not parse X-RateLimit headers.")
                return
            lowest_threshold = 0.1
            if limit > 0 and (remaining / limit) < lowest_threshold:
                self.current_interval = max(self.current_interval, self.base_interval * 1.5)
                log.warning("RateLimiter: Low requests remaining ({}/{}). Proactively adjusted interval to {:.2f}s.", remaining, limit, self.current_interval)
            else:
                self.current_interval = self.base_interval


# ─── Request Execution Stats ──────────────────────────────────────────────────
@dataclass
class RequestExecutionStats:
    """Counters for requests sent by one client."""

    successful_requests: int = 0
    failed_requests: int = 0
    total_response_time_seconds: float = field(default=0.0, repr=False)

    @property
    def total_requests(self) -> int:
        return self.successful_requests + self.failed_requests

    def record_successful_request(self, duration_seconds: float) -> None:
        self.successful_requests += 1
        self.total_response_time_seconds += duration_seconds

    def record_failed_request(self) -> None:
        self.failed_requests += 1

    def get_summary_dict(self) -> dict[str, Any]:
        """Counts plus the mean duration of successful requests, in seconds."""
        average = self.total_response_time_seconds / self.successful_requests if self.successful_requests else 0.0
        return {"total_requests": self.total_requests, "successful_requests": self.successful_requests, "failed_requests": self.failed_requests, "average_response_time_seconds": round(average, 3)}
