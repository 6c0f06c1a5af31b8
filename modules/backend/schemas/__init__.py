# Pydantic schemas package
from modules.backend.schemas.base import (
    CamelModel,
    ErrorDetail,
    ErrorResponse,
    OperationResponse,
    ResponseMetadata,
)

__all__ = [
    "CamelModel",
    "ErrorDetail",
    "ErrorResponse",
    "OperationResponse",
    "ResponseMetadata",
]
