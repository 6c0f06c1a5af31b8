"""
Folders API Endpoints.

REST API endpoints for folder management.
"""

from fastapi import APIRouter

from modules.backend.core.dependencies import FolderServiceDep, RequestId
from modules.backend.schemas.folder import (
    FolderCreate,
    FolderDeleteResponse,
    FolderDetailResponse,
    FolderDocumentEntry,
    FolderListResponse,
    FolderMutationResponse,
    FolderResponse,
    FolderUpdate,
)

router = APIRouter()


@router.get(
    "",
    response_model=FolderListResponse,
    summary="List root folders",
    description="Folders without a parent, oldest first.",
)
async def list_folders(service: FolderServiceDep) -> FolderListResponse:
    """List root-level folders."""
    folders = await service.list_folders()
    return FolderListResponse(
        folders=[FolderResponse.model_validate(folder.model_dump()) for folder in folders]
    )


@router.post(
    "",
    response_model=FolderMutationResponse,
    summary="Create a folder",
    description="Create a folder at root or inside a parent folder.",
)
async def create_folder(
    data: FolderCreate,
    service: FolderServiceDep,
    request_id: RequestId,
) -> FolderMutationResponse:
    """Create a new folder."""
    folder = await service.create_folder(data.name, data.parent_folder_id)
    return FolderMutationResponse(
        message="Folder created successfully",
        folder=FolderResponse.model_validate(folder.model_dump()),
    )


@router.get(
    "/{folder_id}",
    response_model=FolderDetailResponse,
    summary="Get a folder",
    description="A folder with its direct subfolders and documents, newest first.",
)
async def get_folder(folder_id: str, service: FolderServiceDep) -> FolderDetailResponse:
    """Get a folder by ID."""
    contents = await service.get_folder(folder_id)
    return FolderDetailResponse(
        folder=FolderResponse.model_validate(contents.folder.model_dump()),
        subfolders=[FolderResponse.model_validate(sub.model_dump()) for sub in contents.subfolders],
        documents=[
            FolderDocumentEntry(
                id=document.id,
                title=document.title,
                created_at=document.created_at,
                modified_at=document.modified_at,
                size=document.size,
                type=document.type,
                preview_url=contents.preview_urls[document.id],
            )
            for document in contents.documents
        ],
    )


@router.put(
    "/{folder_id}",
    response_model=FolderMutationResponse,
    summary="Rename a folder",
    description="Rename a folder. An omitted name leaves it unchanged.",
)
async def update_folder(
    folder_id: str,
    data: FolderUpdate,
    service: FolderServiceDep,
    request_id: RequestId,
) -> FolderMutationResponse:
    """Rename a folder."""
    folder = await service.rename_folder(folder_id, data.name)
    return FolderMutationResponse(
        message="Folder updated successfully",
        folder=FolderResponse.model_validate(folder.model_dump()),
    )


@router.delete(
    "/{folder_id}",
    response_model=FolderDeleteResponse,
    summary="Delete a folder",
    description="Delete a folder with all of its subfolders and documents.",
)
async def delete_folder(
    folder_id: str,
    service: FolderServiceDep,
    request_id: RequestId,
) -> FolderDeleteResponse:
    """Delete a folder tree."""
    deletion = await service.delete_folder(folder_id)
    return FolderDeleteResponse(
        message="Folder and all contents deleted successfully",
        deleted_folders=deletion.deleted_folders,
        deleted_documents=deletion.deleted_documents,
    )
