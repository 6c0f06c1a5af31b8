"""
Document Service.

Business logic layer for documents. A document is a content record and a
metadata record written together; content changes enqueue a preview
render that runs after the request returns.
"""

import copy
from typing import Any

from modules.backend.core.concurrency import entity_lock
from modules.backend.core.config import get_app_config
from modules.backend.core.exceptions import NotFoundError
from modules.backend.core.ids import new_document_id
from modules.backend.core.storage import StoragePaths
from modules.backend.core.utils import format_short_date, iso_now, parse_timestamp
from modules.backend.models.document import (
    DEFAULT_TITLE,
    DOCUMENT_TYPE,
    DocumentContent,
    DocumentMetadata,
    default_content,
)
from modules.backend.repositories.document import (
    DocumentContentRepository,
    DocumentMetadataRepository,
)
from modules.backend.repositories.folder import FolderRepository
from modules.backend.schemas.document import DocumentSummary
from modules.backend.services.base import BaseService
from modules.backend.services.folder import FolderService
from modules.backend.services.preview import PreviewService
from modules.backend.tasks.previews import PreviewQueue

ACTIVITY_LABEL = "You created"
COPY_SUFFIX = " (Copy)"


class DocumentService(BaseService):
    """
    Service for document business logic.

    Owns the document lifecycle. Folder counts are delegated to
    FolderService and previews to the preview queue.
    """

    def __init__(self, paths: StoragePaths, preview_queue: PreviewQueue | None = None) -> None:
        super().__init__(paths)
        self.content_repo = DocumentContentRepository(paths)
        self.metadata_repo = DocumentMetadataRepository(paths)
        self.folder_repo = FolderRepository(paths)
        self.folders = FolderService(paths)
        self.previews = PreviewService(paths)
        self.preview_queue = preview_queue or PreviewQueue(paths)
        self.limits = get_app_config().storage.limits

    def _clean_title(self, title: object) -> str:
        return self._sanitize(
            title, "title", self.limits.document_title_max_length,
            default=DEFAULT_TITLE,
        )

    async def _require_folder(self, folder_id: str) -> None:
        self._require_folder_id(folder_id)
        if not await self.folder_repo.exists(folder_id):
            raise NotFoundError("Folder not found")

    @staticmethod
    def _metadata_for(
        document: DocumentContent,
        previous: DocumentMetadata | None = None,
        folder_id: str | None = None,
    ) -> DocumentMetadata:
        """
        Derive the metadata record from a content record.

        Keys of ``previous`` that are not derived here (folderId and any
        unknown keys) are carried over.
        """
        carried = previous.to_record() if previous is not None else {}
        if folder_id is not None:
            carried["folderId"] = folder_id
        return DocumentMetadata.model_validate(
            {
                **carried,
                "id": document.id,
                "title": document.title,
                "createdAt": document.created_at,
                "modifiedAt": document.modified_at,
                "size": document.serialized_size(),
                "type": DOCUMENT_TYPE,
            }
        )

    async def _write(self, document: DocumentContent, metadata: DocumentMetadata) -> None:
        await self.content_repo.save(document)
        await self.metadata_repo.save(metadata)

    async def list_documents(self) -> list[DocumentSummary]:
        """
        Summaries of every document, most recently modified first.

        Metadata records that cannot be parsed are skipped.
        """
        records = await self.metadata_repo.get_all()
        records.sort(key=lambda m: parse_timestamp(m.modified_at), reverse=True)
        preview_urls = await self.previews.get_preview_urls([m.id for m in records])

        return [
            DocumentSummary(
                id=record.id,
                title=record.title,
                created_at=record.created_at,
                modified_at=record.modified_at,
                size=record.size,
                type=record.type,
                folder_id=record.folder_id,
                preview_url=preview_urls[record.id],
                activity=ACTIVITY_LABEL,
                date=format_short_date(record.modified_at),
            )
            for record in records
        ]

    async def get_document(self, document_id: str) -> dict[str, Any]:
        """
        Get the full document record.

        Returns:
            The content record, with size, type and folderId from the
            metadata record when it exists

        Raises:
            ValidationError: If the id is not ``doc_...``
            NotFoundError: If the content file is absent
            CorruptedRecordError: If the content file cannot be parsed
        """
        self._require_document_id(document_id)
        document = await self.content_repo.get_by_id(document_id)
        record = document.to_record()

        metadata = await self.metadata_repo.get_by_id_or_none(document_id)
        if metadata is not None:
            record["size"] = metadata.size
            record["type"] = metadata.type
            if metadata.folder_id:
                record["folderId"] = metadata.folder_id
        return record

    async def create_document(
        self,
        title: object | None = None,
        content: dict[str, Any] | None = None,
        folder_id: str | None = None,
    ) -> DocumentContent:
        """
        Create a document, at root or inside ``folder_id``.

        Args:
            title: Raw title; sanitized, "Untitled Document" when empty
            content: Editor payload; an empty skeleton when omitted
            folder_id: Optional folder to create the document in

        Raises:
            ValidationError: If the title is not a string or folder_id is
                malformed
            NotFoundError: If the folder does not exist
            StorageError: If either file cannot be written
        """
        clean_title = DEFAULT_TITLE if title is None else self._clean_title(title)
        if folder_id is not None:
            await self._require_folder(folder_id)

        now = iso_now()
        document = DocumentContent(
            id=new_document_id(),
            title=clean_title,
            content=content if content is not None else default_content(),
            created_at=now,
            modified_at=now,
        )
        metadata = self._metadata_for(document, folder_id=folder_id)

        self._log_operation("Creating document", document_id=document.id, folder_id=folder_id)
        await self._write(document, metadata)

        if folder_id is not None:
            index = await self.metadata_repo.build_index()
            await self.folders.reconcile_counts(index, folder_ids=[folder_id])

        await self.preview_queue.enqueue(document.id, document.content)
        return document

    async def update_document(
        self,
        document_id: str,
        title: object | None = None,
        content: dict[str, Any] | None = None,
    ) -> DocumentContent:
        """
        Update title and/or content of a document.

        An omitted title keeps the current one; an omitted content keeps
        the current content. modifiedAt and size are always refreshed.

        Raises:
            ValidationError: If the id is malformed or the title is not a
                string
            NotFoundError: If the document does not exist
        """
        self._require_document_id(document_id)
        clean_title = None if title is None else self._clean_title(title)

        async with entity_lock("document", document_id):
            document = await self.content_repo.get_by_id(document_id)
            previous = await self.metadata_repo.get_by_id_or_none(document_id)

            if clean_title is not None:
                document.title = clean_title
            if content is not None:
                document.content = content
            document.modified_at = iso_now()

            self._log_operation(
                "Updating document",
                document_id=document_id,
                title_changed=clean_title is not None,
                content_changed=content is not None,
            )
            await self._write(document, self._metadata_for(document, previous))

        if content is not None:
            await self.preview_queue.enqueue(document_id, document.content)
        return document

    async def delete_document(self, document_id: str) -> None:
        """
        Delete a document's content, metadata and preview files.

        Missing preview files are not an error. The folder's stored
        documentCount is left as is.

        Raises:
            ValidationError: If the id is malformed
            NotFoundError: If the document does not exist
        """
        self._require_document_id(document_id)

        async with entity_lock("document", document_id):
            await self.content_repo.delete(document_id)
            await self.metadata_repo.delete_if_exists(document_id)
            await self.previews.delete_previews(document_id)

        self._log_operation("Deleted document", document_id=document_id)

    async def duplicate_document(self, document_id: str) -> DocumentContent:
        """
        Copy a document into the same folder with " (Copy)" appended to its title.

        Raises:
            ValidationError: If the id is malformed
            NotFoundError: If the document does not exist
        """
        self._require_document_id(document_id)
        source = await self.content_repo.get_by_id(document_id)
        source_metadata = await self.metadata_repo.get_by_id_or_none(document_id)

        folder_id = source_metadata.folder_id if source_metadata is not None else None
        if folder_id is not None and not await self.folder_repo.exists(folder_id):
            folder_id = None

        self._log_debug("Duplicating document", document_id=document_id)
        return await self.create_document(
            title=f"{source.title}{COPY_SUFFIX}",
            content=copy.deepcopy(source.content),
            folder_id=folder_id,
        )
