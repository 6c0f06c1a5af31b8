"""
Base Repository.

Base class for all repositories with common CRUD operations over one
directory of JSON records. File I/O runs in the shared I/O pool.
"""

from typing import Any, Generic, TypeVar

from pydantic import ValidationError as PydanticValidationError

from modules.backend.core.concurrency import run_blocking
from modules.backend.core.exceptions import CorruptedRecordError, NotFoundError
from modules.backend.core.logging import get_logger
from modules.backend.core.storage import JsonFileStore
from modules.backend.models.base import StoredRecord

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=StoredRecord)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with common CRUD operations.

    Subclasses set the model class and a human readable entity name:

        class FolderRepository(BaseRepository[Folder]):
            model = Folder
            entity_name = "Folder"
    """

    model: type[ModelType]
    entity_name: str = "Record"

    def __init__(self, store: JsonFileStore) -> None:
        self.store = store

    def _parse(self, record_id: str, data: dict[str, Any]) -> ModelType:
        try:
            return self.model.model_validate(data)
        except PydanticValidationError as e:
            raise CorruptedRecordError(f"Corrupted {self.entity_name.lower()} file") from e

    async def get_by_id(self, id: str) -> ModelType:
        """
        Get a single record by ID.

        Raises:
            NotFoundError: If record not found
            CorruptedRecordError: If the record file cannot be parsed
        """
        instance = await self.get_by_id_or_none(id)
        if instance is None:
            raise NotFoundError(f"{self.entity_name} not found")
        return instance

    async def get_by_id_or_none(self, id: str) -> ModelType | None:
        """Get a single record by ID, returning None if not found."""
        data = await run_blocking(self.store.read_or_none, id)
        if data is None:
            return None
        return self._parse(id, data)

    async def get_all(self) -> list[ModelType]:
        """Get all readable records. Unparseable records are skipped."""
        rows = await run_blocking(lambda: list(self.store.scan()))
        instances = []
        for record_id, data in rows:
            try:
                instances.append(self._parse(record_id, data))
            except CorruptedRecordError:
                logger.warning(
                    "Skipping invalid record",
                    extra={"kind": self.store.kind, "record_id": record_id},
                )
        return instances

    async def save(self, instance: ModelType) -> ModelType:
        """Create or overwrite a record."""
        await run_blocking(self.store.write, instance.id, instance.to_record())
        return instance

    async def delete(self, id: str) -> None:
        """
        Delete a record by ID.

        Raises:
            NotFoundError: If record not found
        """
        removed = await run_blocking(self.store.delete, id)
        if not removed:
            raise NotFoundError(f"{self.entity_name} not found")

    async def delete_if_exists(self, id: str) -> bool:
        """Delete a record by ID. Returns False if it did not exist."""
        return await run_blocking(self.store.delete, id)

    async def exists(self, id: str) -> bool:
        """Check if a record exists by ID."""
        return await run_blocking(self.store.exists, id)

    async def ids(self) -> list[str]:
        """Ids of all record files present."""
        return await run_blocking(self.store.ids)

    async def count(self) -> int:
        """Number of record files present."""
        return len(await self.ids())
