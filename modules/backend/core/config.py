"""
Configuration Management.

Loads environment overrides from config/.env and settings from
config/settings/*.yaml. No hardcoded values in code: all configuration
comes from these sources.

Environment (.env, optional):
    STORAGE_ROOT  - overrides storage.yaml `root`
    REDIS_URL     - required only when tasks.yaml selects the redis broker

Settings (YAML):
    application.yaml - App identity, server, cors, API prefix
    logging.yaml     - Logging configuration
    storage.yaml     - Storage root, default folders, limits, preview URLs
    tasks.yaml       - Preview queue broker, retries, failure history
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from modules.backend.core.config_schema import (
    ApplicationSchema,
    LoggingSchema,
    StorageSchema,
    TasksSchema,
)


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def validate_project_root() -> Path:
    """
    Validate that the project root can be found.

    Raises SystemExit with a clear message if .project_root is not found.
    Use this in entry scripts before any configuration loading.
    """
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from config/settings/."""
    project_root = find_project_root()
    config_path = project_root / "config" / "settings" / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Environment overrides loaded from config/.env or the process environment."""

    storage_root: str | None = None
    redis_url: str | None = None

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type, filename: str) -> Any:
    """Load YAML and validate against schema. Returns typed model instance."""
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(
            f"Invalid configuration in {filename}:\n{e}"
        ) from e


class AppConfig:
    """
    Application configuration loaded from YAML files.

    Each YAML file is validated against its Pydantic schema at load time.
    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self) -> None:
        self._application = _load_validated(ApplicationSchema, "application.yaml")
        self._logging = _load_validated(LoggingSchema, "logging.yaml")
        self._storage = _load_validated(StorageSchema, "storage.yaml")
        self._tasks = _load_validated(TasksSchema, "tasks.yaml")

    @property
    def application(self) -> ApplicationSchema:
        """Application settings."""
        return self._application

    @property
    def logging(self) -> LoggingSchema:
        """Logging settings."""
        return self._logging

    @property
    def storage(self) -> StorageSchema:
        """Storage layout, limits and preview URL settings."""
        return self._storage

    @property
    def tasks(self) -> TasksSchema:
        """Preview queue settings."""
        return self._tasks


@lru_cache
def get_settings() -> Settings:
    """Get cached environment settings. Resolves .env path from project root."""
    env_path = find_project_root() / "config" / ".env"
    return Settings(_env_file=str(env_path))


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()


def get_storage_root() -> Path:
    """
    Resolve the storage root directory.

    STORAGE_ROOT from the environment wins over storage.yaml. Relative
    paths are resolved against the project root.
    """
    configured = get_settings().storage_root or get_app_config().storage.root
    root = Path(configured).expanduser()
    if not root.is_absolute():
        root = find_project_root() / root
    return root


def get_redis_url() -> str:
    """
    Get the Redis URL used by the redis preview broker.

    Raises:
        RuntimeError: If REDIS_URL is not configured
    """
    redis_url = get_settings().redis_url
    if not redis_url:
        raise RuntimeError(
            "REDIS_URL not configured. Set REDIS_URL environment variable "
            "or configure it in config/.env"
        )
    return redis_url


def get_server_base_url() -> str:
    """Get the backend server base URL from application.yaml."""
    server = get_app_config().application.server
    return f"http://{server.host}:{server.port}"
