"""
Background Tasks Package.

Provides Taskiq-based preview rendering, in-process by default or through
Redis with a separate worker.

Usage:
    from modules.backend.tasks import PreviewQueue, get_broker

    broker = get_broker()
    await broker.startup()

    # Fire and forget
    await PreviewQueue(paths).enqueue(document_id, content)

Usage (without a broker - testing):
    from modules.backend.tasks import generate_document_preview

    result = await generate_document_preview(str(paths.root), document_id, content)

CLI Commands:
    # Start worker (redis broker only)
    python run.py --action worker

    # Or directly with taskiq
    taskiq worker modules.backend.tasks.broker:broker
"""

from modules.backend.tasks.broker import create_broker, get_broker, get_task, set_broker
from modules.backend.tasks.previews import (
    PREVIEW_TASK_NAME,
    PreviewFailureMiddleware,
    PreviewQueue,
    clear_failures,
    generate_document_preview,
    get_recent_failures,
    register_preview_tasks,
)

__all__ = [
    # Broker
    "create_broker",
    "get_broker",
    "get_task",
    "set_broker",
    # Preview tasks
    "PREVIEW_TASK_NAME",
    "PreviewFailureMiddleware",
    "PreviewQueue",
    "clear_failures",
    "generate_document_preview",
    "get_recent_failures",
    "register_preview_tasks",
]


def __getattr__(name: str):
    """Lazy attribute access for broker."""
    if name == "broker":
        return get_broker()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
