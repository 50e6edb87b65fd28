"""Tests for the pydantic-settings configuration layer."""

import pytest
from pydantic import ValidationError

from checktree.config import ChecklistSettings, StoreSettings, StorageSettings, get_settings, reset_settings_cache


@pytest.fixture
def fresh_settings(monkeypatch):
    for name in ("STORE_BACKEND", "STORE_BASE_URL", "STORE_API_KEY", "CHECKLIST_DELETE_POLICY", "CHECKLIST_IMPORT_BATCH_SIZE"):
        monkeypatch.delenv(name, raising=False)
    reset_settings_cache()
    yield monkeypatch
    reset_settings_cache()


class TestStoreSettings:
    """Validation of the store backend section."""

    def test_defaults(self):
        settings = StoreSettings(backend="sqlite", base_url=None, api_key=None)
        assert settings.table == "task_checklist_items"
        assert settings.requests_per_minute == 120

    def test_rest_requires_url(self):
        with pytest.raises(ValidationError, match="STORE_BASE_URL"):
            StoreSettings(backend="rest", base_url=None, api_key="key")

    def test_rest_requires_key(self):
        with pytest.raises(ValidationError, match="STORE_API_KEY"):
            StoreSettings(backend="rest", base_url="https://db.example.com", api_key="  ")

    def test_base_url_gets_trailing_slash(self):
        settings = StoreSettings(backend="rest", base_url=" https://db.example.com/rest/v1 ", api_key="key")
        assert settings.base_url == "https://db.example.com/rest/v1/"
        assert settings.api_key.get_secret_value() == "key"

    def test_base_url_must_be_http(self):
        with pytest.raises(ValidationError):
            StoreSettings(base_url="ftp://db.example.com")


class TestChecklistSettings:
    """Validation of checklist limits and policies."""

    def test_defaults(self, fresh_settings):
        settings = ChecklistSettings()
        assert settings.import_batch_size == 50
        assert settings.reorder_batch_size == 10
        assert settings.max_import_items == 500
        assert settings.notice_seconds == 5.0
        assert settings.delete_policy == "cascade"

    def test_invalid_delete_policy(self):
        with pytest.raises(ValidationError):
            ChecklistSettings(delete_policy="shred")

    @pytest.mark.parametrize("field", ["import_batch_size", "reorder_batch_size", "max_import_items"])
    def test_sizes_must_be_positive(self, field):
        with pytest.raises(ValidationError):
            ChecklistSettings(**{field: 0})

    def test_environment_override(self, fresh_settings):
        fresh_settings.setenv("CHECKLIST_DELETE_POLICY", "orphan")
        fresh_settings.setenv("CHECKLIST_IMPORT_BATCH_SIZE", "7")
        settings = ChecklistSettings()
        assert settings.delete_policy == "orphan"
        assert settings.import_batch_size == 7


class TestStorageSettings:
    def test_database_url_points_at_file(self):
        settings = StorageSettings(db_dir="db_test", db_filename="lists.sqlite")
        assert settings.get_database_file_path().name == "lists.sqlite"
        assert settings.get_database_file_path().parent.name == "db_test"

    def test_invalid_filename(self):
        with pytest.raises(ValidationError):
            StorageSettings(db_filename="lists.txt")


class TestApplicationSettings:
    """Loading and caching of the composed settings."""

    def test_cached_instance(self, fresh_settings):
        assert get_settings() is get_settings()

    def test_summary_hides_key(self, fresh_settings):
        fresh_settings.setenv("STORE_BACKEND", "rest")
        fresh_settings.setenv("STORE_BASE_URL", "https://db.example.com")
        fresh_settings.setenv("STORE_API_KEY", "very-secret")
        summary = get_settings().get_configuration_summary()
        assert summary["store_backend"] == "rest"
        assert summary["store_key_configured"] is True
        assert "very-secret" not in str(summary)

    def test_invalid_environment_exits(self, fresh_settings):
        fresh_settings.setenv("STORE_BACKEND", "rest")
        with pytest.raises(SystemExit, match="configuration error"):
            get_settings()
