"""
Document Move Service.

Moves a document between folders (or to root) and brings the stored
documentCount of both affected folders up to date.
"""

from modules.backend.core.concurrency import entity_lock
from modules.backend.core.exceptions import NotFoundError
from modules.backend.core.storage import StoragePaths
from modules.backend.core.utils import iso_now
from modules.backend.models.document import DocumentMetadata
from modules.backend.repositories.document import DocumentMetadataRepository
from modules.backend.repositories.folder import FolderRepository
from modules.backend.services.base import BaseService
from modules.backend.services.folder import FolderService


class DocumentMoveService(BaseService):
    """Service for reassigning a document's folder."""

    def __init__(self, paths: StoragePaths) -> None:
        super().__init__(paths)
        self.metadata_repo = DocumentMetadataRepository(paths)
        self.folder_repo = FolderRepository(paths)
        self.folders = FolderService(paths)

    async def move_document(self, document_id: str, folder_id: str | None) -> DocumentMetadata:
        """
        Move a document into ``folder_id``, or to root when it is None.

        After the metadata is saved, every folder's stored count is
        checked against a fresh metadata scan and the old and new folder
        records are rewritten.

        Args:
            document_id: Document to move
            folder_id: Target folder, or None for root

        Returns:
            The updated metadata record

        Raises:
            ValidationError: If either id is malformed
            NotFoundError: If the target folder or the document does not exist
        """
        self._require_document_id(document_id)
        if folder_id is not None:
            self._require_folder_id(folder_id)
            if not await self.folder_repo.exists(folder_id):
                raise NotFoundError("Target folder not found")

        async with entity_lock("document", document_id):
            metadata = await self.metadata_repo.get_by_id(document_id)
            previous_folder_id = metadata.folder_id

            metadata.folder_id = folder_id
            metadata.modified_at = iso_now()
            await self.metadata_repo.save(metadata)

        self._log_operation(
            "Moved document",
            document_id=document_id,
            from_folder_id=previous_folder_id,
            to_folder_id=folder_id,
        )

        index = await self.metadata_repo.build_index()
        await self.folders.reconcile_counts(index, touched=(previous_folder_id, folder_id))
        return metadata
