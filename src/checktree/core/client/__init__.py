# ♥♥─── Store Client Package ─────────────────────────────────────────────────────
from __future__ import annotations

from .api_models import StoreAPIError, StoreErrorResponse
from .store_api import RestStoreAPI
from .rate_limiter import RateLimiter, RequestExecutionStats, interval_for
from .store_client import RestItemStore, ChecklistStoreClient


__all__ = ["ChecklistStoreClient", "RateLimiter", "RequestExecutionStats", "RestItemStore", "RestStoreAPI", "StoreAPIError", "StoreErrorResponse", "interval_for"]
