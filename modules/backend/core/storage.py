"""
Storage Configuration.

On-disk layout and JSON record files. Every entity is one pretty-printed
JSON file named ``<id>.json`` inside its kind's directory:

    <root>/documents/<docId>.json     document content record
    <root>/metadata/<docId>.json      document metadata record
    <root>/folders/<folderId>.json    folder record
    <root>/previews/<docId>.svg       preview thumbnail

Writes go to a temporary file in the same directory and are moved into
place with ``os.replace``, so readers never observe a half-written record.

All functions here are blocking; repositories call them through
``run_blocking``.
"""

import json
import os
import tempfile
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from modules.backend.core.exceptions import CorruptedRecordError, NotFoundError, StorageError
from modules.backend.core.logging import get_logger

logger = get_logger(__name__)

RECORD_SUFFIX = ".json"


@dataclass(frozen=True)
class StoragePaths:
    """Directory layout under a storage root."""

    root: Path

    @property
    def documents(self) -> Path:
        return self.root / "documents"

    @property
    def metadata(self) -> Path:
        return self.root / "metadata"

    @property
    def folders(self) -> Path:
        return self.root / "folders"

    @property
    def previews(self) -> Path:
        return self.root / "previews"

    def document_path(self, document_id: str) -> Path:
        return self.documents / f"{document_id}{RECORD_SUFFIX}"

    def metadata_path(self, document_id: str) -> Path:
        return self.metadata / f"{document_id}{RECORD_SUFFIX}"

    def folder_path(self, folder_id: str) -> Path:
        return self.folders / f"{folder_id}{RECORD_SUFFIX}"

    def preview_path(self, document_id: str, suffix: str = ".svg") -> Path:
        return self.previews / f"{document_id}{suffix}"

    def ensure(self) -> None:
        """Create all storage directories."""
        for directory in (self.documents, self.metadata, self.folders, self.previews):
            directory.mkdir(parents=True, exist_ok=True)


def get_storage_paths() -> StoragePaths:
    """
    Dependency that provides the configured storage layout.

    Tests override this dependency to point at a temporary directory.
    """
    from modules.backend.core.config import get_storage_root

    return StoragePaths(get_storage_root())


def write_file_atomic(path: Path, data: bytes) -> None:
    """Write bytes to ``path`` through a temp file and ``os.replace``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class JsonFileStore:
    """
    One directory of ``<id>.json`` records.

    Raises:
        CorruptedRecordError: when a record file is not valid JSON
        StorageError: when the filesystem call itself fails
    """

    def __init__(self, directory: Path, kind: str) -> None:
        self.directory = directory
        self.kind = kind

    def path_for(self, record_id: str) -> Path:
        return self.directory / f"{record_id}{RECORD_SUFFIX}"

    def exists(self, record_id: str) -> bool:
        return self.path_for(record_id).is_file()

    def read_or_none(self, record_id: str) -> dict[str, Any] | None:
        path = self.path_for(record_id)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {self.kind} {record_id}: {e}") from e
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptedRecordError(f"Corrupted {self.kind} file") from e
        if not isinstance(data, dict):
            raise CorruptedRecordError(f"Corrupted {self.kind} file")
        return data

    def read(self, record_id: str) -> dict[str, Any]:
        data = self.read_or_none(record_id)
        if data is None:
            raise NotFoundError(f"{self.kind.capitalize()} not found")
        return data

    def write(self, record_id: str, record: dict[str, Any]) -> None:
        try:
            payload = json.dumps(record, indent=2, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise StorageError(f"Failed to serialize {self.kind} {record_id}: {e}") from e
        try:
            write_file_atomic(self.path_for(record_id), payload)
        except OSError as e:
            raise StorageError(f"Failed to write {self.kind} {record_id}: {e}") from e

    def delete(self, record_id: str) -> bool:
        """Remove a record file. Returns False if it was already gone."""
        try:
            self.path_for(record_id).unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete {self.kind} {record_id}: {e}") from e
        return True

    def ids(self) -> list[str]:
        """Ids of all records present, in directory order."""
        if not self.directory.is_dir():
            return []
        try:
            return [
                entry.name[: -len(RECORD_SUFFIX)]
                for entry in os.scandir(self.directory)
                if entry.is_file()
                and entry.name.endswith(RECORD_SUFFIX)
                and not entry.name.startswith(".")
            ]
        except OSError as e:
            raise StorageError(f"Failed to list {self.kind} records: {e}") from e

    def scan(self) -> Iterator[tuple[str, dict[str, Any]]]:
        """
        Yield ``(id, record)`` for every readable record.

        Records that fail to read or parse are logged and skipped.
        """
        for record_id in self.ids():
            try:
                record = self.read_or_none(record_id)
            except (CorruptedRecordError, StorageError) as e:
                logger.warning(
                    "Skipping unreadable record",
                    extra={"kind": self.kind, "record_id": record_id, "error": e.message},
                )
                continue
            if record is not None:
                yield record_id, record
