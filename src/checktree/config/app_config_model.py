# ♥♥─── Settings Model ───────────────────────────────────────────────────────────
from __future__ import annotations

from typing import Any, Self, Literal
from pathlib import Path
from functools import lru_cache

from pydantic import Field, SecretStr, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


PROJECT_MARKERS = ("pyproject.toml", "requirements.txt", ".git")


@lru_cache
def find_project_root() -> Path:
	"""Closest directory at or above the cwd that holds a project marker."""
	cwd = Path.cwd()
	return next((folder for folder in (cwd, *cwd.parents) if any((folder / marker).exists() for marker in PROJECT_MARKERS)), cwd)


APP_DATA_DIR = find_project_root() / "app_data"
ENV_FILE = APP_DATA_DIR / "config" / ".env"


# ─── Default Content Constants ────────────────────────────────────────────────
ENV_DEFAULT_CONTENT = """# CheckTree Configuration File
# ─── Store Configuration ───────────────────────────────────────────
# STORE_BACKEND=sqlite
# STORE_BASE_URL=https://your-project.example.com/rest/v1/
# STORE_API_KEY=your-service-key
# STORE_TABLE=task_checklist_items
# ─── Local Database ────────────────────────────────────────────────
# STORAGE_DB_DIR=database
# STORAGE_DB_FILENAME=checktree.db
# ─── Checklist Behaviour ───────────────────────────────────────────
# CHECKLIST_IMPORT_BATCH_SIZE=50
# CHECKLIST_REORDER_BATCH_SIZE=10
# CHECKLIST_MAX_IMPORT_ITEMS=500
# CHECKLIST_NOTICE_SECONDS=5
# CHECKLIST_DELETE_POLICY=cascade
# CHECKLIST_DEFAULT_TASK_ID=inbox
"""


def _section_config(prefix: str) -> SettingsConfigDict:
	"""Settings config shared by every section: one env prefix, the common .env file."""
	return SettingsConfigDict(env_prefix=prefix, env_file=ENV_FILE, env_file_encoding="utf-8", case_sensitive=False, extra="ignore")


# ─── Configuration Paths Component ────────────────────────────────────────────
class ConfigPaths(BaseSettings):
	"""Where configuration lives; the config directory is created on load."""

	model_config = _section_config("CONFIG_")

	@computed_field
	@property
	def app_data_dir(self) -> Path:
		"""Root of everything the application writes (config, database, logs)."""
		return APP_DATA_DIR

	@computed_field
	@property
	def config_dir(self) -> Path:
		return ENV_FILE.parent

	@computed_field
	@property
	def env_file_path(self) -> Path:
		return ENV_FILE

	def model_post_init(self, __context: Any | None = None, /) -> None:
		self.config_dir.mkdir(parents=True, exist_ok=True)

	def write_default_env_file(self) -> bool:
		"""Write a commented template .env file if none exists.

		:return: True if a new file was written.
		"""
		if self.env_file_path.exists():
			return False
		self.env_file_path.write_text(ENV_DEFAULT_CONTENT, encoding="utf-8")
		return True


# ─── Local Database ──────────────────────────────────────────────────────────
class StorageSettings(BaseSettings):
	"""Location of the SQLite file used by the local checklist store."""

	model_config = _section_config("STORAGE_")
	db_dir: str = Field(
		default="database",
		min_length=1,
		max_length=255,
		pattern=r"^[\w\-.]+$",
		title="Database Folder",
		description="Folder under app_data holding the database",
	)
	db_filename: str = Field(
		default="checktree.db",
		min_length=1,
		max_length=255,
		pattern=r"^[\w\-.]+\.(db|sqlite|sqlite3)$",
		title="Database File",
		description="SQLite file name",
		examples=["checktree.db", "checklists.sqlite"],
	)

	def get_database_file_path(self) -> Path:
		"""Absolute path of the SQLite file."""
		return APP_DATA_DIR / self.db_dir / self.db_filename

	def get_database_url(self) -> str:
		"""SQLAlchemy URL for the database file; its folder is created on demand."""
		path = self.get_database_file_path()
		path.parent.mkdir(parents=True, exist_ok=True)
		return f"sqlite:///{path}"


# ─── Remote Store Configuration ──────────────────────────────────────────────
class StoreSettings(BaseSettings):
	"""Configuration for the ordered item store backend."""

	model_config = _section_config("STORE_")
	backend: Literal["sqlite", "rest"] = Field(
		default="sqlite",
		title="Store Backend",
		description="Where checklist rows are persisted",
		examples=["sqlite", "rest"],
	)
	base_url: str | None = Field(
		default=None,
		title="REST Base URL",
		description="Base URL of the REST table API",
		examples=["https://your-project.example.com/rest/v1/"],
	)
	api_key: SecretStr | None = Field(
		default=None,
		title="REST API Key",
		description="Service key sent as the apikey header and bearer token. \nKeep this secret and secure.",
	)
	table: str = Field(
		default="task_checklist_items",
		title="Checklist Table",
		description="Table (endpoint) holding checklist rows",
		pattern=r"^[a-zA-Z0-9_]+$",
	)
	requests_per_minute: int = Field(
		default=120,
		ge=1,
		le=6000,
		title="Request Rate",
		description="Maximum REST requests per minute",
		examples=[60, 120, 600],
	)
	timeout_seconds: float = Field(
		default=30.0,
		gt=0,
		le=600,
		title="Request Timeout (Seconds)",
		description="Timeout applied to each REST request",
	)

	@field_validator("base_url")
	@classmethod
	def normalize_base_url(cls, v: str | None) -> str | None:
		"""Ensure the base URL is an http(s) URL ending with a slash."""
		if v is None or not v.strip():
			return None
		v = v.strip()
		if not v.startswith(("http://", "https://")):
			msg = "base_url must start with http:// or https://"
			raise ValueError(msg)
		return v if v.endswith("/") else f"{v}/"

	@model_validator(mode="after")
	def _check_rest_credentials(self) -> Self:
		if self.backend == "rest":
			if self.base_url is None:
				msg = "STORE_BASE_URL is required when STORE_BACKEND=rest."
				raise ValueError(msg)
			if self.api_key is None or not self.api_key.get_secret_value().strip():
				msg = "STORE_API_KEY is required when STORE_BACKEND=rest."
				raise ValueError(msg)
		return self


# ─── Checklist Behaviour ─────────────────────────────────────────────────────
class ChecklistSettings(BaseSettings):
	"""Tunable limits and policies for checklist mutations."""

	model_config = _section_config("CHECKLIST_")
	import_batch_size: int = Field(
		default=50,
		ge=1,
		le=1000,
		title="Import Batch Size",
		description="Rows inserted per request during bulk import",
	)
	reorder_batch_size: int = Field(
		default=10,
		ge=1,
		le=100,
		title="Reorder Batch Size",
		description="Concurrent position updates per batch",
	)
	max_import_items: int = Field(
		default=500,
		ge=1,
		le=10_000,
		title="Import Ceiling",
		description="Maximum lines accepted by a single bulk import",
	)
	notice_seconds: float = Field(
		default=5.0,
		ge=0,
		le=120,
		title="Notice Lifetime (Seconds)",
		description="How long success notices stay visible",
	)
	delete_policy: Literal["cascade", "orphan"] = Field(
		default="cascade",
		title="Delete Policy",
		description="cascade removes descendants, orphan leaves them as roots",
	)
	default_task_id: str = Field(
		default="inbox",
		min_length=1,
		title="Default Task",
		description="Task whose checklist opens when none is given",
	)


# ─── Application Settings ─────────────────────────────────────────────────────
class ApplicationSettings(BaseSettings):
	"""Main application settings model for CheckTree."""

	model_config = SettingsConfigDict(title="CheckTree Application Configuration", env_file=ENV_FILE, env_file_encoding="utf-8", case_sensitive=False, extra="ignore")
	paths: ConfigPaths = Field(default_factory=ConfigPaths, title="Application Paths Configuration")
	storage: StorageSettings = Field(default_factory=StorageSettings, title="Storage Configuration")
	store: StoreSettings = Field(default_factory=StoreSettings, title="Store Backend Configuration")
	checklist: ChecklistSettings = Field(default_factory=ChecklistSettings, title="Checklist Configuration")

	def get_configuration_summary(self) -> dict[str, Any]:
		"""Return a summary of the current configuration (excluding sensitive data).

		:return: A dictionary summarizing the configuration.
		"""
		return {
			"config_directory": str(self.paths.config_dir),
			"env_file": str(self.paths.env_file_path),
			"store_backend": self.store.backend,
			"store_url": self.store.base_url,
			"store_key_configured": self.store.api_key is not None,
			"database_file": str(self.storage.get_database_file_path()),
			"import_batch_size": self.checklist.import_batch_size,
			"reorder_batch_size": self.checklist.reorder_batch_size,
			"max_import_items": self.checklist.max_import_items,
			"delete_policy": self.checklist.delete_policy,
		}
