"""
Folder Service.

Business logic layer for folders: default seeding, tree queries, rename,
cascading delete, and the stored documentCount cache.

documentCount in API payloads is always computed from a DocumentIndex.
The copy stored in each folder record is written only by
``reconcile_counts``.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from modules.backend.core.concurrency import entity_lock
from modules.backend.core.config import get_app_config
from modules.backend.core.exceptions import CorruptedRecordError, NotFoundError
from modules.backend.core.ids import is_folder_id, new_folder_id
from modules.backend.core.storage import StoragePaths
from modules.backend.core.utils import iso_now, parse_timestamp
from modules.backend.models.document import DocumentMetadata
from modules.backend.models.folder import Folder
from modules.backend.repositories.document import (
    DocumentContentRepository,
    DocumentIndex,
    DocumentMetadataRepository,
)
from modules.backend.repositories.folder import FolderRepository
from modules.backend.services.base import BaseService
from modules.backend.services.preview import PreviewService


@dataclass
class FolderContents:
    """A folder with its direct subfolders and member documents."""

    folder: Folder
    subfolders: list[Folder]
    documents: list[DocumentMetadata]
    preview_urls: dict[str, str]


@dataclass
class FolderDeletion:
    deleted_folders: int
    deleted_documents: int


class FolderService(BaseService):
    """
    Service for folder business logic.

    Sole writer of folder records, including their cached documentCount.
    """

    def __init__(self, paths: StoragePaths) -> None:
        super().__init__(paths)
        self.folder_repo = FolderRepository(paths)
        self.metadata_repo = DocumentMetadataRepository(paths)
        self.content_repo = DocumentContentRepository(paths)
        self.previews = PreviewService(paths)
        self.limits = get_app_config().storage.limits

    @staticmethod
    def _with_live_count(folder: Folder, index: DocumentIndex) -> Folder:
        return folder.model_copy(update={"document_count": index.count(folder.id)})

    async def ensure_default_folders(self, names: Iterable[str] | None = None) -> list[Folder]:
        """
        Create the default root folders if no folder exists yet.

        Args:
            names: Folder names to seed; defaults to storage.yaml
                ``default_folders``

        Returns:
            The folders created (empty if folders already existed)
        """
        if await self.folder_repo.count() > 0:
            return []

        if names is None:
            names = get_app_config().storage.default_folders

        created = []
        for name in names:
            now = iso_now()
            folder = Folder(
                id=new_folder_id(),
                name=name,
                parent_folder_id=None,
                created_at=now,
                modified_at=now,
                document_count=0,
            )
            created.append(await self.folder_repo.save(folder))

        self._log_operation("Seeded default folders", names=[f.name for f in created])
        return created

    async def list_folders(self) -> list[Folder]:
        """
        Root-level folders, oldest first.

        Has no side effects.
        """
        folders = await self.folder_repo.get_root_folders()
        index = await self.metadata_repo.build_index()
        folders.sort(key=lambda f: parse_timestamp(f.created_at))
        return [self._with_live_count(folder, index) for folder in folders]

    async def get_folder(self, folder_id: str) -> FolderContents:
        """
        Get a folder with its subfolders and documents.

        Brings the folder's stored documentCount up to date when it has
        drifted. Subfolders and documents are newest first.

        Raises:
            ValidationError: If the id is not ``folder_...``
            NotFoundError: If the folder does not exist
        """
        self._require_folder_id(folder_id)
        folder = await self.folder_repo.get_by_id(folder_id)

        index = await self.metadata_repo.build_index()
        if await self.reconcile_counts(index, folder_ids=[folder_id]):
            folder = await self.folder_repo.get_by_id(folder_id)

        subfolders = await self.folder_repo.get_children(folder_id)
        subfolders.sort(key=lambda f: parse_timestamp(f.modified_at), reverse=True)

        documents = index.in_folder(folder_id)
        documents.sort(key=lambda d: parse_timestamp(d.modified_at), reverse=True)
        preview_urls = await self.previews.get_preview_urls([d.id for d in documents])

        return FolderContents(
            folder=self._with_live_count(folder, index),
            subfolders=[self._with_live_count(sub, index) for sub in subfolders],
            documents=documents,
            preview_urls=preview_urls,
        )

    async def create_folder(self, name: object, parent_folder_id: str | None = None) -> Folder:
        """
        Create a folder, at root or inside ``parent_folder_id``.

        Raises:
            ValidationError: If the name is empty after sanitization or
                the parent id is malformed
            NotFoundError: If the parent folder does not exist
        """
        clean_name = self._sanitize(
            name, "name", self.limits.folder_name_max_length,
            empty_message="Invalid folder name",
        )

        if parent_folder_id is not None:
            self._require_folder_id(parent_folder_id, "parentFolderId")
            if not await self.folder_repo.exists(parent_folder_id):
                raise NotFoundError("Parent folder not found")

        now = iso_now()
        folder = Folder(
            id=new_folder_id(),
            name=clean_name,
            parent_folder_id=parent_folder_id,
            created_at=now,
            modified_at=now,
            document_count=0,
        )

        self._log_operation("Creating folder", folder_id=folder.id, parent_folder_id=parent_folder_id)
        return await self.folder_repo.save(folder)

    async def rename_folder(self, folder_id: str, name: object | None) -> Folder:
        """
        Rename a folder. A ``None`` name leaves the folder unchanged.

        Raises:
            ValidationError: If the id is malformed or the name is empty
                after sanitization
            NotFoundError: If the folder does not exist
        """
        self._require_folder_id(folder_id)

        async with entity_lock("folder", folder_id):
            folder = await self.folder_repo.get_by_id(folder_id)
            if name is not None:
                folder.name = self._sanitize(
                    name, "name", self.limits.folder_name_max_length,
                    empty_message="Invalid folder name",
                )
                folder.modified_at = iso_now()
                self._log_operation("Renaming folder", folder_id=folder_id)
                await self.folder_repo.save(folder)

        index = await self.metadata_repo.build_index()
        return self._with_live_count(folder, index)

    def _collect_subtree(self, root_id: str, children: dict[str, list[str]]) -> list[str]:
        """Folder ids of the subtree under ``root_id`` in preorder, each once."""
        order: list[str] = []
        visited: set[str] = set()
        stack = [root_id]
        while stack:
            folder_id = stack.pop()
            visited.add(folder_id)
            order.append(folder_id)
            for child_id in children.get(folder_id, []):
                if child_id in visited:
                    self._logger.warning(
                        "Folder cycle detected",
                        extra={"folder_id": folder_id, "child_id": child_id},
                    )
                    continue
                stack.append(child_id)
        return order

    async def delete_folder(self, folder_id: str) -> FolderDeletion:
        """
        Delete a folder with all its subfolders and documents.

        Folders are removed children before parents. For each folder its
        documents' content and metadata files go first (previews stay),
        then the folder record. Nothing is rolled back if a step fails.

        Raises:
            ValidationError: If the id is malformed
            NotFoundError: If the folder does not exist
        """
        self._require_folder_id(folder_id)
        if not await self.folder_repo.exists(folder_id):
            raise NotFoundError("Folder not found")

        subtree = self._collect_subtree(folder_id, await self.folder_repo.get_children_map())
        index = await self.metadata_repo.build_index()

        deleted_documents = 0
        deleted_folders = 0
        for current_id in reversed(subtree):
            async with entity_lock("folder", current_id):
                for document in index.in_folder(current_id):
                    async with entity_lock("document", document.id):
                        await self.content_repo.delete_if_exists(document.id)
                        if await self.metadata_repo.delete_if_exists(document.id):
                            deleted_documents += 1
                if await self.folder_repo.delete_if_exists(current_id):
                    deleted_folders += 1

        self._log_operation(
            "Deleted folder tree",
            folder_id=folder_id,
            deleted_folders=deleted_folders,
            deleted_documents=deleted_documents,
        )
        return FolderDeletion(deleted_folders=deleted_folders, deleted_documents=deleted_documents)

    async def reconcile_counts(
        self,
        index: DocumentIndex,
        folder_ids: Iterable[str] | None = None,
        touched: Iterable[str | None] = (),
    ) -> list[str]:
        """
        Write live document counts into stored folder records.

        Args:
            index: Document index to count from
            folder_ids: Folders to check; None checks every folder
            touched: Folders whose membership just changed. These are
                always rewritten, even when the count is unchanged.

        Returns:
            Ids of the folder records that were written
        """
        touched_ids = {folder_id for folder_id in touched if is_folder_id(folder_id)}
        if folder_ids is None:
            candidates = set(await self.folder_repo.ids())
        else:
            candidates = set(folder_ids)
        candidates |= touched_ids

        written = []
        for folder_id in sorted(candidates):
            async with entity_lock("folder", folder_id):
                try:
                    folder = await self.folder_repo.get_by_id_or_none(folder_id)
                except CorruptedRecordError as e:
                    self._logger.warning(
                        "Skipping unreadable folder record",
                        extra={"folder_id": folder_id, "error": e.message},
                    )
                    continue
                if folder is None:
                    continue
                live_count = index.count(folder_id)
                if folder_id not in touched_ids and folder.document_count == live_count:
                    continue
                folder.document_count = live_count
                folder.modified_at = iso_now()
                await self.folder_repo.save(folder)
                written.append(folder_id)

        if written:
            self._log_debug("Folder counts reconciled", folder_ids=written)
        return written
