"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when a document, folder or preview cannot be found."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class ValidationError(ApplicationError):
    """Raised when input is malformed: bad id shape, bad name, bad filename."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class CorruptedRecordError(ApplicationError):
    """Raised when a stored JSON record exists but cannot be parsed."""

    def __init__(self, message: str = "Corrupted record") -> None:
        super().__init__(message, code="SYS_CORRUPTED_RECORD")


class StorageError(ApplicationError):
    """Raised when a filesystem read or write fails."""

    def __init__(self, message: str = "Storage error") -> None:
        super().__init__(message, code="SYS_STORAGE_ERROR")
