"""
Folder Schemas.

Pydantic schemas for folder API request/response validation.
"""

from pydantic import Field

from modules.backend.schemas.base import CamelModel, OperationResponse


class FolderCreate(CamelModel):
    """Schema for creating a new folder."""

    name: str = Field(
        ...,
        description="Folder name. Unsafe characters are removed; at most 50 characters are kept",
        examples=["Projects"],
    )
    parent_folder_id: str | None = Field(
        default=None,
        description="Parent folder; root when omitted",
    )


class FolderUpdate(CamelModel):
    """Schema for renaming a folder. An omitted name leaves it unchanged."""

    name: str | None = Field(default=None, description="New folder name")


class FolderResponse(CamelModel):
    """Schema for a folder in API responses."""

    id: str = Field(description="Folder unique identifier")
    name: str = Field(description="Folder name")
    parent_folder_id: str | None = Field(description="Parent folder, null at root")
    created_at: str = Field(description="Creation timestamp")
    modified_at: str = Field(description="Last update timestamp")
    document_count: int = Field(description="Documents directly inside this folder")


class FolderDocumentEntry(CamelModel):
    """Schema for a document listed inside a folder."""

    id: str
    title: str
    created_at: str
    modified_at: str
    size: int
    type: str
    preview_url: str


class FolderListResponse(CamelModel):
    folders: list[FolderResponse]


class FolderDetailResponse(CamelModel):
    folder: FolderResponse
    subfolders: list[FolderResponse]
    documents: list[FolderDocumentEntry]


class FolderMutationResponse(OperationResponse):
    folder: FolderResponse


class FolderDeleteResponse(OperationResponse):
    deleted_folders: int
    deleted_documents: int
