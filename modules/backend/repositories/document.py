"""
Document Repositories.

Data access for the two halves of a document (content and metadata) and
the folder membership index built from a metadata scan.
"""

from collections import defaultdict
from dataclasses import dataclass, field

from modules.backend.core.storage import JsonFileStore, StoragePaths
from modules.backend.models.document import DocumentContent, DocumentMetadata
from modules.backend.repositories.base import BaseRepository


class DocumentContentRepository(BaseRepository[DocumentContent]):
    """Repository for ``documents/<id>.json``."""

    model = DocumentContent
    entity_name = "Document"

    def __init__(self, paths: StoragePaths) -> None:
        super().__init__(JsonFileStore(paths.documents, "document"))


@dataclass
class DocumentIndex:
    """
    Documents grouped by folder, built from one metadata scan.

    Documents without a folderId are grouped under ``None`` (root).
    """

    by_folder: dict[str | None, list[DocumentMetadata]] = field(default_factory=dict)

    @classmethod
    def from_metadata(cls, records: list[DocumentMetadata]) -> "DocumentIndex":
        grouped: dict[str | None, list[DocumentMetadata]] = defaultdict(list)
        for record in records:
            grouped[record.folder_id or None].append(record)
        return cls(by_folder=dict(grouped))

    def in_folder(self, folder_id: str | None) -> list[DocumentMetadata]:
        return list(self.by_folder.get(folder_id, []))

    def count(self, folder_id: str) -> int:
        return len(self.by_folder.get(folder_id, []))


class DocumentMetadataRepository(BaseRepository[DocumentMetadata]):
    """Repository for ``metadata/<id>.json``."""

    model = DocumentMetadata
    entity_name = "Document"

    def __init__(self, paths: StoragePaths) -> None:
        super().__init__(JsonFileStore(paths.metadata, "metadata"))

    async def get_by_folder(self, folder_id: str | None) -> list[DocumentMetadata]:
        """Documents directly inside a folder (``None`` for root)."""
        index = await self.build_index()
        return index.in_folder(folder_id)

    async def build_index(self) -> DocumentIndex:
        """Scan all metadata records and group them by folder."""
        return DocumentIndex.from_metadata(await self.get_all())
