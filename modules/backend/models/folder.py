"""
Folder Model.
"""

from modules.backend.models.base import StoredRecord


class Folder(StoredRecord):
    """
    Folder record: ``folders/<id>.json``.

    ``document_count`` is a cached copy of the number of documents whose
    metadata points at this folder. It is only written by
    ``FolderService.reconcile_counts``; API responses use the live count.
    """

    id: str
    name: str
    parent_folder_id: str | None = None
    created_at: str
    modified_at: str
    document_count: int = 0

    def __repr__(self) -> str:
        return f"<Folder(id={self.id}, name={self.name!r})>"
