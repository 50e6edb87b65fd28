# ♥♥─── App Config ───────────────────────────────────────────────────────────────
from __future__ import annotations

from pydantic import ValidationError

from checktree.custom_logger import log

from .app_config_model import ApplicationSettings

# ─── Factory Function And Singleton Instance ──────────────────────────────────
_cached_settings: ApplicationSettings | None = None


# ─── Get Settings ─────────────────────────────────────────────────────────────
def get_application_settings() -> ApplicationSettings:
    """Factory function to create, load, and initialize the ApplicationSettings instance.

    :returns: The initialized :class:`ApplicationSettings` instance.
    :raises SystemExit: If configuration loading or validation fails, the application exits with a critical error.
    """
    global _cached_settings  # noqa: PLW0603

    if _cached_settings is not None:
        return _cached_settings

    log.debug("Initializing application configuration...")

    try:
        app_settings_instance = ApplicationSettings()
    except ValidationError as e:
        log.critical("CRITICAL: Application configuration validation failed.\n{}", e)
        error_details = "\n".join([f"  - {err['loc']}: {err['msg']} (input was: {err.get('input', 'N/A')})" for err in e.errors()])
        log.error("Validation error details:\n{}", error_details)
        error = "FATAL: Application configuration error. Please check your config files."
        raise SystemExit(error) from e

    log.debug("Config Directory: {}", app_settings_instance.paths.config_dir)
    log.debug("Store backend: {}", app_settings_instance.store.backend)
    _cached_settings = app_settings_instance

    return _cached_settings


def get_settings() -> ApplicationSettings:
    """Convenient alias for getting application settings.

    :returns: The initialized :class:`ApplicationSettings` instance.
    """
    return get_application_settings()


def reset_settings_cache() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _cached_settings  # noqa: PLW0603
    _cached_settings = None
