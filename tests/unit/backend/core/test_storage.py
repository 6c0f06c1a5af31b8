"""
Unit Tests for the JSON File Store.
"""

import json
import os

import pytest

from modules.backend.core.exceptions import CorruptedRecordError, NotFoundError, StorageError
from modules.backend.core.storage import JsonFileStore, StoragePaths, write_file_atomic


class TestStoragePaths:
    def test_layout(self, tmp_path):
        paths = StoragePaths(tmp_path)

        assert paths.document_path("doc_1") == tmp_path / "documents" / "doc_1.json"
        assert paths.metadata_path("doc_1") == tmp_path / "metadata" / "doc_1.json"
        assert paths.folder_path("folder_1") == tmp_path / "folders" / "folder_1.json"
        assert paths.preview_path("doc_1") == tmp_path / "previews" / "doc_1.svg"
        assert paths.preview_path("doc_1", ".png") == tmp_path / "previews" / "doc_1.png"

    def test_ensure_creates_directories(self, tmp_path):
        paths = StoragePaths(tmp_path / "root")
        paths.ensure()
        paths.ensure()

        for name in ("documents", "metadata", "folders", "previews"):
            assert (tmp_path / "root" / name).is_dir()


class TestWriteFileAtomic:
    def test_writes_and_leaves_no_temp_files(self, tmp_path):
        target = tmp_path / "nested" / "record.json"

        write_file_atomic(target, b"first")
        write_file_atomic(target, b"second")

        assert target.read_bytes() == b"second"
        assert os.listdir(target.parent) == ["record.json"]


class TestJsonFileStore:
    @pytest.fixture
    def store(self, storage_paths: StoragePaths) -> JsonFileStore:
        return JsonFileStore(storage_paths.folders, "folder")

    def test_write_then_read(self, store):
        store.write("folder_1", {"id": "folder_1", "name": "Notes"})

        assert store.read("folder_1") == {"id": "folder_1", "name": "Notes"}
        assert store.exists("folder_1")

    def test_records_are_pretty_printed(self, store):
        store.write("folder_1", {"id": "folder_1", "name": "Grüße"})

        text = store.path_for("folder_1").read_text(encoding="utf-8")
        assert text == json.dumps({"id": "folder_1", "name": "Grüße"}, indent=2, ensure_ascii=False)

    def test_read_missing(self, store):
        assert store.read_or_none("folder_missing") is None
        with pytest.raises(NotFoundError, match="Folder not found"):
            store.read("folder_missing")

    def test_read_invalid_json(self, store):
        store.path_for("folder_bad").write_text("{not json", encoding="utf-8")

        with pytest.raises(CorruptedRecordError, match="Corrupted folder file"):
            store.read("folder_bad")

    def test_read_non_object_json(self, store):
        store.path_for("folder_list").write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(CorruptedRecordError):
            store.read_or_none("folder_list")

    def test_unserializable_record(self, store):
        with pytest.raises(StorageError):
            store.write("folder_1", {"value": object()})
        assert not store.exists("folder_1")

    def test_delete(self, store):
        store.write("folder_1", {"id": "folder_1"})

        assert store.delete("folder_1") is True
        assert store.delete("folder_1") is False
        assert not store.exists("folder_1")

    def test_ids_ignore_hidden_and_foreign_files(self, store):
        store.write("folder_1", {"id": "folder_1"})
        store.write("folder_2", {"id": "folder_2"})
        (store.directory / ".folder_3.json.tmp").write_text("{}")
        (store.directory / "notes.txt").write_text("")

        assert sorted(store.ids()) == ["folder_1", "folder_2"]

    def test_ids_of_missing_directory(self, tmp_path):
        assert JsonFileStore(tmp_path / "absent", "folder").ids() == []

    def test_scan_skips_unreadable_records(self, store):
        store.write("folder_1", {"id": "folder_1"})
        store.path_for("folder_bad").write_text("{", encoding="utf-8")

        assert list(store.scan()) == [("folder_1", {"id": "folder_1"})]
