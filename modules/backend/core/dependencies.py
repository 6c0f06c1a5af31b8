"""
FastAPI Dependencies.

Shared dependencies for request handling. Every service is built per
request over the storage layout from ``get_storage_paths``; tests
override that one dependency to point at a temporary directory.
"""

from typing import Annotated

from fastapi import Depends, Header

from modules.backend.core.logging import get_logger
from modules.backend.core.storage import StoragePaths, get_storage_paths
from modules.backend.services.document import DocumentService
from modules.backend.services.folder import FolderService
from modules.backend.services.move import DocumentMoveService
from modules.backend.services.preview import PreviewService
from modules.backend.tasks.previews import PreviewQueue

logger = get_logger(__name__)

# Type alias for storage layout dependency
Storage = Annotated[StoragePaths, Depends(get_storage_paths)]


async def get_request_id(x_request_id: str | None = Header(None)) -> str:
    """
    Extract or generate request ID from headers.

    Used for request tracing and correlation.
    """
    import uuid

    return x_request_id or str(uuid.uuid4())


RequestId = Annotated[str, Depends(get_request_id)]


def get_preview_queue(paths: Storage) -> PreviewQueue:
    return PreviewQueue(paths)


def get_document_service(
    paths: Storage,
    queue: Annotated[PreviewQueue, Depends(get_preview_queue)],
) -> DocumentService:
    return DocumentService(paths, preview_queue=queue)


def get_folder_service(paths: Storage) -> FolderService:
    return FolderService(paths)


def get_move_service(paths: Storage) -> DocumentMoveService:
    return DocumentMoveService(paths)


def get_preview_service(paths: Storage) -> PreviewService:
    return PreviewService(paths)


DocumentServiceDep = Annotated[DocumentService, Depends(get_document_service)]
FolderServiceDep = Annotated[FolderService, Depends(get_folder_service)]
MoveServiceDep = Annotated[DocumentMoveService, Depends(get_move_service)]
PreviewServiceDep = Annotated[PreviewService, Depends(get_preview_service)]
