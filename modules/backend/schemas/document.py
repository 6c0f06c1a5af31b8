"""
Document Schemas.

Pydantic schemas for document API request/response validation.
"""

from typing import Any

from pydantic import Field

from modules.backend.schemas.base import CamelModel, OperationResponse


class DocumentCreate(CamelModel):
    """Schema for creating a new document."""

    title: str | None = Field(
        default=None,
        description="Document title. Unsafe characters are removed; defaults to 'Untitled Document'",
        examples=["Meeting notes"],
    )
    content: dict[str, Any] | None = Field(
        default=None,
        description="Editor payload. An empty document is created when omitted",
    )
    folder_id: str | None = Field(
        default=None,
        description="Folder to create the document in; root when omitted",
        examples=["folder_1718000000000_a1b2c3"],
    )


class DocumentUpdate(CamelModel):
    """Schema for updating a document. Omitted fields keep their value."""

    title: str | None = Field(default=None, description="New title")
    content: dict[str, Any] | None = Field(default=None, description="New editor payload")


class DocumentMove(CamelModel):
    """Schema for moving a document. folderId is required; null moves it to root."""

    folder_id: str | None = Field(
        ...,
        description="Target folder, or null for root",
    )


class DocumentSummary(CamelModel):
    """Schema for a document in listings."""

    id: str
    title: str
    created_at: str
    modified_at: str
    size: int
    type: str
    folder_id: str | None = None
    preview_url: str
    activity: str
    date: str


class DocumentListResponse(CamelModel):
    documents: list[DocumentSummary]


class DocumentCreateResponse(OperationResponse):
    document_id: str
    title: str
    file_path: str


class DocumentUpdateResponse(OperationResponse):
    document_id: str
    title: str
    modified_at: str


class DocumentDeleteResponse(OperationResponse):
    document_id: str


class DocumentMoveResponse(OperationResponse):
    document: dict[str, Any] = Field(description="Updated metadata record")
