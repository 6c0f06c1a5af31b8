"""
Base Schemas.

Shared response pieces and the camelCase base model used by every
request/response schema (the browser client speaks camelCase JSON).
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from modules.backend.core.utils import utc_now


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys; snake_case names work in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ResponseMetadata(BaseModel):
    """Metadata included in error responses."""

    timestamp: datetime = Field(default_factory=utc_now)
    request_id: str | None = None


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str
    message: str
    details: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    success: bool = False
    error: ErrorDetail
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


class OperationResponse(CamelModel):
    """Base for mutation responses: `{success, message, ...}`."""

    success: bool = True
    message: str
