"""
Taskiq Broker Configuration.

Configures the message broker for preview rendering.

Two backends, selected by tasks.yaml `broker`:
    memory - InMemoryBroker. Tasks run in the server's own event loop.
             With `await_inplace` they run inside `kiq()` itself, which
             tests and scripts use to get synchronous previews.
    redis  - ListQueueBroker from taskiq-redis. Tasks run in a separate
             worker process and REDIS_URL must be configured.

Usage:
    # Start worker process (redis broker only)
    python run.py --action worker

    # Or directly with taskiq
    taskiq worker modules.backend.tasks.broker:broker
"""

from typing import Any

from taskiq import AsyncBroker, InMemoryBroker, SimpleRetryMiddleware, TaskiqEvents

from modules.backend.core.config import get_app_config, get_redis_url
from modules.backend.core.logging import get_logger

logger = get_logger(__name__)


def create_broker(await_inplace: bool | None = None) -> AsyncBroker:
    """
    Create and configure the Taskiq broker from tasks.yaml.

    Args:
        await_inplace: Override for the in-memory broker's inline
            execution. None uses the configured value.

    Returns:
        Configured broker with retry and failure middlewares
    """
    from modules.backend.tasks.previews import PreviewFailureMiddleware

    config = get_app_config().tasks

    if config.broker == "redis":
        from taskiq_redis import ListQueueBroker, RedisAsyncResultBackend

        redis_url = get_redis_url()
        result_backend = RedisAsyncResultBackend(
            redis_url=redis_url,
            result_ex_time=config.result_expiry_seconds,
        )
        broker: AsyncBroker = ListQueueBroker(
            url=redis_url,
            queue_name=config.queue_name,
        ).with_result_backend(result_backend)
    else:
        inplace = config.await_inplace if await_inplace is None else await_inplace
        broker = InMemoryBroker(await_inplace=inplace)

    broker.add_middlewares(
        SimpleRetryMiddleware(default_retry_count=config.max_retries),
        PreviewFailureMiddleware(),
    )

    @broker.on_event(TaskiqEvents.WORKER_STARTUP)
    async def on_startup(state: Any) -> None:
        logger.info("Taskiq worker starting up", extra={"broker": config.broker})

    @broker.on_event(TaskiqEvents.WORKER_SHUTDOWN)
    async def on_shutdown(state: Any) -> None:
        logger.info("Taskiq worker shutting down", extra={"broker": config.broker})

    logger.debug(
        "Taskiq broker configured",
        extra={
            "broker": config.broker,
            "queue_name": config.queue_name,
            "max_retries": config.max_retries,
        },
    )

    return broker


# Lazy broker initialization
_broker: AsyncBroker | None = None
_tasks: dict[str, Any] = {}


def set_broker(broker: AsyncBroker) -> AsyncBroker:
    """
    Install ``broker`` as the process broker and register all tasks on it.

    Tests use this to swap in an inline in-memory broker.
    """
    global _broker
    from modules.backend.tasks.previews import register_preview_tasks

    _broker = broker
    _tasks.clear()
    _tasks.update(register_preview_tasks(broker))
    return broker


def get_broker() -> AsyncBroker:
    """
    Get the broker instance, creating it if necessary.

    Returns:
        Configured broker instance
    """
    if _broker is None:
        set_broker(create_broker())
    return _broker


def get_task(name: str) -> Any:
    """
    Get a registered task by name.

    Raises:
        KeyError: If no task with that name is registered
    """
    get_broker()
    return _tasks[name]


# For direct access (e.g., taskiq worker command)
# This uses __getattr__ for lazy initialization
def __getattr__(name: str):
    """Lazy attribute access for broker."""
    if name == "broker":
        return get_broker()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
