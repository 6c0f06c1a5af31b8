"""
Base Service.

Base class for all services providing common patterns for business logic.
Services orchestrate repositories, validate input and implement business
rules. They never touch files directly.

Usage:
    from modules.backend.services.base import BaseService

    class FolderService(BaseService):
        def __init__(self, paths: StoragePaths) -> None:
            super().__init__(paths)
            self.folder_repo = FolderRepository(paths)

        async def get_folder(self, folder_id: str) -> Folder:
            self._require_folder_id(folder_id)
            return await self.folder_repo.get_by_id(folder_id)
"""

from typing import Any

from modules.backend.core.exceptions import ValidationError
from modules.backend.core.ids import is_document_id, is_folder_id
from modules.backend.core.logging import get_logger
from modules.backend.core.storage import StoragePaths
from modules.backend.core.utils import sanitize_name

logger = get_logger(__name__)


class BaseService:
    """
    Base class for all services.

    Provides:
    - Storage layout access
    - Logging context
    - Id shape and name validation

    Subclasses should:
    - Call super().__init__(paths) in their __init__
    - Initialize repositories in __init__
    - Implement business logic methods
    """

    def __init__(self, paths: StoragePaths) -> None:
        """
        Initialize the service with a storage layout.

        Args:
            paths: Directory layout of the storage root to operate on
        """
        self._paths = paths
        self._logger = get_logger(self.__class__.__module__)

    @property
    def paths(self) -> StoragePaths:
        """Get the storage layout."""
        return self._paths

    def _require_document_id(self, value: Any, field_name: str = "documentId") -> str:
        """
        Validate that a value is shaped like a document id.

        Raises:
            ValidationError: If the value is not ``doc_...``
        """
        if not is_document_id(value):
            raise ValidationError(
                "Invalid document ID",
                details={field_name: "Expected an id of the form doc_<...>"},
            )
        return value

    def _require_folder_id(self, value: Any, field_name: str = "folderId") -> str:
        """
        Validate that a value is shaped like a folder id.

        Raises:
            ValidationError: If the value is not ``folder_...``
        """
        if not is_folder_id(value):
            raise ValidationError(
                "Invalid folder ID",
                details={field_name: "Expected an id of the form folder_<...>"},
            )
        return value

    def _sanitize(
        self,
        value: Any,
        field_name: str,
        max_length: int,
        default: str | None = None,
        empty_message: str | None = None,
    ) -> str:
        """
        Validate and sanitize a user-supplied name.

        Args:
            value: Raw value from the request
            field_name: Name of the field for error messages
            max_length: Maximum length after sanitization
            default: Value used when nothing is left after sanitization.
                If None, an empty result is rejected.
            empty_message: Error message for a rejected empty result

        Raises:
            ValidationError: If the value is not a string, or is empty
                after sanitization and no default is given
        """
        if not isinstance(value, str):
            raise ValidationError(
                f"{field_name.capitalize()} must be a string",
                details={field_name: "Expected a string"},
            )
        cleaned = sanitize_name(value, max_length)
        if cleaned:
            return cleaned
        if default is None:
            raise ValidationError(
                empty_message or f"{field_name.capitalize()} is required",
                details={field_name: "Empty after removing unsupported characters"},
            )
        return default

    def _log_operation(
        self,
        operation: str,
        **context: Any,
    ) -> None:
        """
        Log a service operation with context.

        Args:
            operation: Description of the operation
            **context: Additional context to include in log
        """
        self._logger.info(
            operation,
            extra={"service": self.__class__.__name__, **context},
        )

    def _log_debug(
        self,
        message: str,
        **context: Any,
    ) -> None:
        """
        Log debug information.

        Args:
            message: Debug message
            **context: Additional context to include in log
        """
        self._logger.debug(
            message,
            extra={"service": self.__class__.__name__, **context},
        )
