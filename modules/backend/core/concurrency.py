"""
Concurrency Infrastructure.

Thread pool for blocking file I/O and per-entity write locks.

Pool:
    _io_pool - TracedThreadPoolExecutor for blocking filesystem calls.
               Created lazily, sized by storage.yaml `io_workers`.

Entity locks:
    Every read-modify-write of a stored record runs under the lock for
    that record, so two requests touching the same document or folder
    are applied one after the other instead of overwriting each other.
    Locks live in a weak registry and disappear once nobody holds them.

Usage:
    from modules.backend.core.concurrency import entity_lock, run_blocking

    record = await run_blocking(store.read, document_id)

    async with entity_lock("folder", folder_id):
        folder = await repo.get_by_id(folder_id)
        folder.name = "Renamed"
        await repo.save(folder)
"""

import asyncio
import contextvars
import weakref
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from functools import partial
from typing import Any, AsyncIterator, Callable, TypeVar

from modules.backend.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_io_pool: ThreadPoolExecutor | None = None
_entity_locks: "weakref.WeakValueDictionary[tuple[str, str], asyncio.Lock]" = (
    weakref.WeakValueDictionary()
)


class TracedThreadPoolExecutor(ThreadPoolExecutor):
    """ThreadPoolExecutor that propagates contextvars to worker threads.

    Standard ThreadPoolExecutor does not carry the structlog request
    context into worker threads. This subclass copies the current context
    before dispatching.
    """

    def submit(self, fn, /, *args, **kwargs):
        ctx = contextvars.copy_context()
        return super().submit(ctx.run, fn, *args, **kwargs)


def get_io_pool() -> TracedThreadPoolExecutor:
    """Get the shared thread pool for blocking file operations."""
    global _io_pool
    if _io_pool is None:
        from modules.backend.core.config import get_app_config
        max_workers = get_app_config().storage.io_workers
        _io_pool = TracedThreadPoolExecutor(max_workers=max_workers)
        logger.info("Thread pool created", extra={"max_workers": max_workers})
    return _io_pool


async def run_blocking(fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking callable in the shared I/O pool."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(get_io_pool(), partial(fn, *args, **kwargs))


def _get_entity_lock(kind: str, entity_id: str) -> asyncio.Lock:
    key = (kind, entity_id)
    lock = _entity_locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _entity_locks[key] = lock
    return lock


@asynccontextmanager
async def entity_lock(kind: str, entity_id: str) -> AsyncIterator[None]:
    """Hold the write lock for one stored record (``kind`` is e.g. "document")."""
    lock = _get_entity_lock(kind, entity_id)
    async with lock:
        yield


async def shutdown_pools() -> None:
    """Shut down the I/O pool. Called during application shutdown."""
    global _io_pool

    if _io_pool is not None:
        await asyncio.to_thread(_io_pool.shutdown, wait=True)
        logger.info("Thread pool shut down")
        _io_pool = None
