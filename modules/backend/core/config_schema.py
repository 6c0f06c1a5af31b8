"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    LoggingSchema      → logging.yaml
    StorageSchema      → storage.yaml
    TasksSchema        → tasks.yaml
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class ServerSchema(_StrictBase):
    host: str
    port: int


class CorsSchema(_StrictBase):
    origins: list[str]


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str
    debug: bool
    api_prefix: str
    docs_enabled: bool
    server: ServerSchema
    cors: CorsSchema


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: Literal["json", "console"]
    handlers: HandlersSchema


# =============================================================================
# storage.yaml
# =============================================================================


class LimitsSchema(_StrictBase):
    document_title_max_length: int = Field(gt=0)
    folder_name_max_length: int = Field(gt=0)


class PreviewsSchema(_StrictBase):
    url_prefix: str
    placeholder_url: str


class StorageSchema(_StrictBase):
    root: str
    io_workers: int = Field(ge=1)
    default_folders: list[str]
    seed_on_startup: bool
    limits: LimitsSchema
    previews: PreviewsSchema


# =============================================================================
# tasks.yaml
# =============================================================================


class TasksSchema(_StrictBase):
    broker: Literal["memory", "redis"]
    queue_name: str
    await_inplace: bool
    max_retries: int = Field(ge=0)
    result_expiry_seconds: int = Field(gt=0)
    failure_history_size: int = Field(ge=1)
