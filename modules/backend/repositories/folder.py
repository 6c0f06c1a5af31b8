"""
Folder Repository.

Data access layer for folder records.
"""

from collections import defaultdict

from modules.backend.core.storage import JsonFileStore, StoragePaths
from modules.backend.models.folder import Folder
from modules.backend.repositories.base import BaseRepository


class FolderRepository(BaseRepository[Folder]):
    """
    Repository for ``folders/<id>.json``.

    Inherits standard CRUD operations from BaseRepository and adds
    tree-shaped queries. Every query is a full scan of the folder
    directory.
    """

    model = Folder
    entity_name = "Folder"

    def __init__(self, paths: StoragePaths) -> None:
        super().__init__(JsonFileStore(paths.folders, "folder"))

    async def get_root_folders(self) -> list[Folder]:
        """Folders without a parent."""
        return [folder for folder in await self.get_all() if not folder.parent_folder_id]

    async def get_children(self, parent_id: str) -> list[Folder]:
        """Direct subfolders of ``parent_id``."""
        return [folder for folder in await self.get_all() if folder.parent_folder_id == parent_id]

    async def get_children_map(self) -> dict[str, list[str]]:
        """Map of parent id to direct child ids, from one scan."""
        children: dict[str, list[str]] = defaultdict(list)
        for folder in await self.get_all():
            if folder.parent_folder_id:
                children[folder.parent_folder_id].append(folder.id)
        return dict(children)
