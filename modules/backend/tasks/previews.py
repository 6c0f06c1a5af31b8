"""
Preview Background Tasks.

Preview rendering runs as a Taskiq task so document writes never wait on
it. Failed runs are retried by SimpleRetryMiddleware and every failed
attempt is recorded by PreviewFailureMiddleware, which keeps the latest
failures for ``GET /api/previews/failures``.

Usage:
    # From a service
    queue = PreviewQueue(paths)
    await queue.enqueue(document_id, content)

    # Direct call, no broker involved
    result = await generate_document_preview(str(paths.root), document_id, content)
"""

from collections import deque
from pathlib import Path
from typing import Any

from taskiq import AsyncBroker, TaskiqMessage, TaskiqMiddleware, TaskiqResult

from modules.backend.core.config import get_app_config
from modules.backend.core.logging import get_logger, log_with_source
from modules.backend.core.storage import StoragePaths
from modules.backend.core.utils import iso_now
from modules.backend.services.preview import PreviewService

logger = get_logger(__name__)

PREVIEW_TASK_NAME = "generate_document_preview"

_failures: deque[dict[str, Any]] | None = None


def _failure_log() -> deque[dict[str, Any]]:
    """Failure ring, sized from tasks.failure_history_size on first use."""
    global _failures
    if _failures is None:
        _failures = deque(maxlen=get_app_config().tasks.failure_history_size)
    return _failures


async def generate_document_preview(
    storage_root: str,
    document_id: str,
    content: dict[str, Any],
) -> dict[str, Any]:
    """
    Render and store the preview for one document.

    Args:
        storage_root: Storage root the document lives under
        document_id: Document ID
        content: Document content payload

    Returns:
        Dict with the document id and the new preview URL
    """
    service = PreviewService(StoragePaths(Path(storage_root)))
    preview_url = await service.generate_preview(document_id, content)

    log_with_source(
        logger, "tasks", "info",
        "Preview rendered",
        document_id=document_id,
    )

    return {"documentId": document_id, "previewUrl": preview_url}


class PreviewFailureMiddleware(TaskiqMiddleware):
    """Log failed task executions and keep the most recent ones."""

    def on_error(
        self,
        message: TaskiqMessage,
        result: TaskiqResult[Any],
        exception: BaseException,
    ) -> None:
        document_id = message.args[1] if len(message.args) > 1 else message.kwargs.get("document_id")
        failure = {
            "taskId": message.task_id,
            "taskName": message.task_name,
            "documentId": document_id,
            "attempt": int(message.labels.get("_retries", 0)) + 1,
            "error": f"{type(exception).__name__}: {exception}",
            "failedAt": iso_now(),
        }
        _failure_log().append(failure)

        log_with_source(
            logger, "tasks", "error",
            "Preview generation failed",
            task_id=message.task_id,
            document_id=document_id,
            attempt=failure["attempt"],
            error=failure["error"],
        )


def get_recent_failures() -> list[dict[str, Any]]:
    """Recorded failures, newest first."""
    return list(reversed(_failure_log()))


def clear_failures() -> None:
    """Drop recorded failures. The ring is re-sized from config on next use."""
    global _failures
    _failures = None


def register_preview_tasks(broker: AsyncBroker) -> dict[str, Any]:
    """
    Register preview task functions with a Taskiq broker.

    Returns:
        Dict mapping task names to registered task objects
    """
    max_retries = get_app_config().tasks.max_retries

    registered = {
        PREVIEW_TASK_NAME: broker.task(
            task_name=PREVIEW_TASK_NAME,
            retry_on_error=max_retries > 0,
            max_retries=max_retries,
        )(generate_document_preview),
    }

    logger.debug(
        "Tasks registered with broker",
        extra={"task_count": len(registered), "tasks": list(registered.keys())},
    )

    return registered


class PreviewQueue:
    """
    Enqueues preview rendering for documents under one storage root.

    Enqueueing never fails the caller: broker errors are logged and
    reported through the return value.
    """

    def __init__(self, paths: StoragePaths) -> None:
        self.paths = paths

    async def enqueue(self, document_id: str, content: dict[str, Any]) -> bool:
        from modules.backend.tasks.broker import get_task

        try:
            task = get_task(PREVIEW_TASK_NAME)
            await task.kiq(str(self.paths.root), document_id, content)
        except Exception as e:
            logger.error(
                "Failed to enqueue preview generation",
                extra={"document_id": document_id, "error": str(e)},
            )
            return False
        return True
