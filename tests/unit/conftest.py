"""
Unit Test Fixtures.

Fixtures for unit tests. Services run against a temporary storage root;
the preview queue is mocked so no broker is involved.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from modules.backend.core.storage import StoragePaths
from modules.backend.services.document import DocumentService
from modules.backend.services.folder import FolderService
from modules.backend.services.move import DocumentMoveService
from modules.backend.services.preview import PreviewService


# =============================================================================
# Queue Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_preview_queue() -> MagicMock:
    """
    Mock preview queue for unit tests.

    Usage:
        async def test_create(document_service, mock_preview_queue):
            document = await document_service.create_document(title="A")
            mock_preview_queue.enqueue.assert_awaited_once()
    """
    queue = MagicMock()
    queue.enqueue = AsyncMock(return_value=True)
    return queue


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def document_service(storage_paths: StoragePaths, mock_preview_queue: MagicMock) -> DocumentService:
    return DocumentService(storage_paths, preview_queue=mock_preview_queue)


@pytest.fixture
def folder_service(storage_paths: StoragePaths) -> FolderService:
    return FolderService(storage_paths)


@pytest.fixture
def move_service(storage_paths: StoragePaths) -> DocumentMoveService:
    return DocumentMoveService(storage_paths)


@pytest.fixture
def preview_service(storage_paths: StoragePaths) -> PreviewService:
    return PreviewService(storage_paths)


# =============================================================================
# Logging Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_logger() -> MagicMock:
    """
    Mock logger for testing logging calls.

    Usage:
        def test_logging(mock_logger):
            with patch("module.logger", mock_logger):
                # Test code that logs
                mock_logger.info.assert_called_once()
    """
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    return logger
