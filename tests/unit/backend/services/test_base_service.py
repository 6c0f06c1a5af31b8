"""
Unit Tests for Base Service.

Tests the BaseService validation and logging helpers.
"""

import pytest
from unittest.mock import MagicMock

from modules.backend.core.exceptions import ValidationError
from modules.backend.core.storage import StoragePaths
from modules.backend.services.base import BaseService


@pytest.fixture
def service(tmp_path) -> BaseService:
    """Create a BaseService instance."""
    return BaseService(StoragePaths(tmp_path))


class TestBaseServiceInit:
    """Tests for BaseService initialization."""

    def test_init_stores_paths(self, tmp_path):
        """Should store the provided storage layout."""
        paths = StoragePaths(tmp_path)

        service = BaseService(paths)

        assert service._paths is paths
        assert service.paths is paths

    def test_init_creates_logger(self, service):
        """Should create a logger for the service."""
        assert service._logger is not None


class TestRequireIds:
    """Tests for id shape validation."""

    def test_document_id_passes(self, service):
        assert service._require_document_id("doc_1718000000000_a1b2c3") == "doc_1718000000000_a1b2c3"

    @pytest.mark.parametrize("value", [None, 12, "", "doc_", "folder_1", "doc_1/../x"])
    def test_document_id_rejected(self, service, value):
        with pytest.raises(ValidationError) as exc_info:
            service._require_document_id(value)

        assert exc_info.value.message == "Invalid document ID"
        assert "documentId" in exc_info.value.details

    def test_folder_id_passes(self, service):
        assert service._require_folder_id("folder_1_x") == "folder_1_x"

    def test_folder_id_rejected_with_field_name(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service._require_folder_id("doc_1", field_name="parentFolderId")

        assert exc_info.value.message == "Invalid folder ID"
        assert "parentFolderId" in exc_info.value.details


class TestSanitize:
    """Tests for _sanitize method."""

    def test_strips_unsafe_characters(self, service):
        assert service._sanitize(' My "Notes" ', "name", 50) == "My Notes"

    def test_truncates(self, service):
        assert service._sanitize("abcdef", "name", 3) == "abc"

    def test_non_string_rejected(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service._sanitize(42, "name", 50)

        assert exc_info.value.message == "Name must be a string"

    def test_empty_uses_default(self, service):
        assert service._sanitize("***", "title", 50, default="Untitled") == "Untitled"

    def test_empty_without_default_rejected(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service._sanitize("   ", "name", 50)

        assert exc_info.value.message == "Name is required"

    def test_custom_empty_message(self, service):
        with pytest.raises(ValidationError, match="Folder name is required"):
            service._sanitize("", "name", 50, empty_message="Folder name is required")


class TestLoggingMethods:
    """Tests for logging helper methods."""

    def test_log_operation_includes_service_name(self, service):
        """Should include service class name in log context."""
        service._logger = MagicMock()

        service._log_operation("Creating folder", folder_id="folder_1")

        service._logger.info.assert_called_once()
        extra = service._logger.info.call_args[1]["extra"]
        assert extra["service"] == "BaseService"
        assert extra["folder_id"] == "folder_1"

    def test_log_debug_includes_service_name(self, service):
        """Should include service class name in debug log context."""
        service._logger = MagicMock()

        service._log_debug("Processing step", step=1)

        extra = service._logger.debug.call_args[1]["extra"]
        assert extra["service"] == "BaseService"
        assert extra["step"] == 1


class TestServiceInheritance:
    """Tests for service inheritance patterns."""

    def test_subclass_inherits_validation_methods(self, tmp_path):
        """Subclass should inherit validation methods."""
        class LabelService(BaseService):
            def clean_label(self, value):
                return self._sanitize(value, "label", 10)

        service = LabelService(StoragePaths(tmp_path))

        assert service.clean_label("ok?") == "ok"
        with pytest.raises(ValidationError):
            service.clean_label("?")
