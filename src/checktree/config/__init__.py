from __future__ import annotations

from .app_config import get_settings, reset_settings_cache, get_application_settings
from .app_config_model import StoreSettings, StorageSettings, ChecklistSettings, ApplicationSettings


__all__ = ["ApplicationSettings", "ChecklistSettings", "StorageSettings", "StoreSettings", "get_application_settings", "get_settings", "reset_settings_cache"]
