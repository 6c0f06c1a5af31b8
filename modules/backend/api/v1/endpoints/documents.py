"""
Documents API Endpoints.

REST API endpoints for document management.
"""

from typing import Any

from fastapi import APIRouter

from modules.backend.core.dependencies import (
    DocumentServiceDep,
    MoveServiceDep,
    RequestId,
    Storage,
)
from modules.backend.schemas.document import (
    DocumentCreate,
    DocumentCreateResponse,
    DocumentDeleteResponse,
    DocumentListResponse,
    DocumentMove,
    DocumentMoveResponse,
    DocumentUpdate,
    DocumentUpdateResponse,
)

router = APIRouter()


@router.get(
    "",
    response_model=DocumentListResponse,
    summary="List documents",
    description="All documents, most recently modified first, with preview URLs.",
)
async def list_documents(service: DocumentServiceDep) -> DocumentListResponse:
    """List all documents."""
    return DocumentListResponse(documents=await service.list_documents())


@router.post(
    "",
    response_model=DocumentCreateResponse,
    summary="Create a document",
    description="Create a document with optional title, content and folder. The preview is rendered in the background.",
)
async def create_document(
    data: DocumentCreate,
    service: DocumentServiceDep,
    paths: Storage,
    request_id: RequestId,
) -> DocumentCreateResponse:
    """Create a new document."""
    document = await service.create_document(
        title=data.title,
        content=data.content,
        folder_id=data.folder_id,
    )
    return DocumentCreateResponse(
        message="Document saved successfully",
        document_id=document.id,
        title=document.title,
        file_path=str(paths.document_path(document.id)),
    )


@router.get(
    "/{document_id}",
    summary="Get a document",
    description="The full stored document record.",
)
async def get_document(document_id: str, service: DocumentServiceDep) -> dict[str, Any]:
    """Get a document by ID."""
    return await service.get_document(document_id)


@router.put(
    "/{document_id}",
    response_model=DocumentUpdateResponse,
    summary="Update a document",
    description="Update title and/or content. Omitted fields keep their current value.",
)
async def update_document(
    document_id: str,
    data: DocumentUpdate,
    service: DocumentServiceDep,
    request_id: RequestId,
) -> DocumentUpdateResponse:
    """Update a document."""
    document = await service.update_document(
        document_id,
        title=data.title,
        content=data.content,
    )
    return DocumentUpdateResponse(
        message="Document updated successfully",
        document_id=document.id,
        title=document.title,
        modified_at=document.modified_at,
    )


@router.delete(
    "/{document_id}",
    response_model=DocumentDeleteResponse,
    summary="Delete a document",
    description="Permanently delete a document and its preview.",
)
async def delete_document(
    document_id: str,
    service: DocumentServiceDep,
    request_id: RequestId,
) -> DocumentDeleteResponse:
    """Delete a document."""
    await service.delete_document(document_id)
    return DocumentDeleteResponse(
        message="Document deleted successfully",
        document_id=document_id,
    )


@router.put(
    "/{document_id}/move",
    response_model=DocumentMoveResponse,
    summary="Move a document",
    description="Move a document into a folder, or to root with a null folderId.",
)
async def move_document(
    document_id: str,
    data: DocumentMove,
    service: MoveServiceDep,
    request_id: RequestId,
) -> DocumentMoveResponse:
    """Move a document."""
    metadata = await service.move_document(document_id, data.folder_id)
    return DocumentMoveResponse(
        message="Document moved successfully",
        document=metadata.to_record(),
    )


@router.post(
    "/{document_id}/duplicate",
    response_model=DocumentCreateResponse,
    summary="Duplicate a document",
    description="Copy a document into the same folder with ' (Copy)' appended to the title.",
)
async def duplicate_document(
    document_id: str,
    service: DocumentServiceDep,
    paths: Storage,
    request_id: RequestId,
) -> DocumentCreateResponse:
    """Duplicate a document."""
    document = await service.duplicate_document(document_id)
    return DocumentCreateResponse(
        message="Document duplicated successfully",
        document_id=document.id,
        title=document.title,
        file_path=str(paths.document_path(document.id)),
    )
