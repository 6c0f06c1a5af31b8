"""
Health Check Endpoints.

Provides liveness, readiness, and detailed health checks.

Endpoints:
- /health: Liveness check (process running)
- /health/ready: Readiness check (storage writable, broker reachable)
- /health/detailed: Component-by-component status (for debugging)
"""

import asyncio
import tempfile
from typing import Any

from fastapi import APIRouter, HTTPException

from modules.backend.core.config import get_app_config
from modules.backend.core.dependencies import Storage
from modules.backend.core.logging import get_logger
from modules.backend.core.storage import StoragePaths
from modules.backend.core.utils import utc_now

router = APIRouter()
logger = get_logger(__name__)

READY_TIMEOUT_SECONDS = 5.0


def _probe_storage(paths: StoragePaths) -> None:
    for directory in (paths.documents, paths.metadata, paths.folders, paths.previews):
        with tempfile.TemporaryFile(dir=directory):
            pass


async def check_storage(paths: StoragePaths) -> dict[str, Any]:
    """
    Check that every storage directory accepts writes.

    Returns:
        Dict with status, latency, and optional error message
    """
    try:
        start = utc_now()
        await asyncio.to_thread(_probe_storage, paths)
        latency_ms = int((utc_now() - start).total_seconds() * 1000)
        return {"status": "healthy", "latency_ms": latency_ms, "root": str(paths.root)}
    except OSError as e:
        logger.warning("Storage health check failed", extra={"error": str(e)})
        return {"status": "unhealthy", "error": str(e)}


async def check_redis() -> dict[str, Any]:
    """
    Check Redis connectivity when the preview queue uses Redis.

    Returns:
        Dict with status, latency, and optional error message
    """
    if get_app_config().tasks.broker != "redis":
        return {"status": "not_configured"}

    try:
        from modules.backend.core.config import get_redis_url
        import redis.asyncio as redis

        redis_url = get_redis_url()

        start = utc_now()
        client = redis.from_url(redis_url)
        await client.ping()
        await client.aclose()

        latency_ms = int((utc_now() - start).total_seconds() * 1000)

        return {
            "status": "healthy",
            "latency_ms": latency_ms,
        }

    except Exception as e:
        logger.warning("Redis health check failed", extra={"error": str(e)})
        return {
            "status": "unhealthy",
            "error": str(e),
        }


async def _run_checks(paths: StoragePaths) -> dict[str, dict[str, Any]]:
    storage_result: dict[str, Any] = {"status": "error", "error": "check did not run"}
    redis_result: dict[str, Any] = {"status": "error", "error": "check did not run"}

    try:
        async with asyncio.timeout(READY_TIMEOUT_SECONDS):
            async with asyncio.TaskGroup() as tg:
                storage_task = tg.create_task(check_storage(paths))
                redis_task = tg.create_task(check_redis())
            storage_result = storage_task.result()
            redis_result = redis_task.result()
    except* Exception as eg:
        for exc in eg.exceptions:
            logger.warning("Health check task failed", extra={"error": str(exc)})

    return {"storage": storage_result, "redis": redis_result}


@router.get("/health")
async def health_check() -> dict[str, str]:
    """
    Liveness check.

    Returns 200 if the process is running.
    No dependency checks - this endpoint should always respond quickly.
    """
    return {"status": "healthy"}


@router.get("/health/ready")
async def readiness_check(paths: Storage) -> dict[str, Any]:
    """
    Readiness check.

    Returns 503 if storage is not writable or the Redis broker is down.
    """
    checks = await _run_checks(paths)

    unhealthy_checks = [
        name for name, check in checks.items()
        if check.get("status") in ("unhealthy", "error")
    ]

    if unhealthy_checks:
        logger.warning(
            "Readiness check failed",
            extra={"unhealthy": unhealthy_checks, "checks": checks},
        )
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "checks": checks,
                "timestamp": utc_now().isoformat(),
            },
        )

    return {
        "status": "healthy",
        "checks": checks,
        "timestamp": utc_now().isoformat(),
    }


@router.get("/health/detailed")
async def detailed_health_check(paths: Storage) -> dict[str, Any]:
    """
    Detailed health check.

    Returns dependency checks, application info and pool metrics.
    """
    checks = await _run_checks(paths)

    app_settings = get_app_config().application
    app_info = {
        "name": app_settings.name,
        "env": app_settings.environment,
        "debug": app_settings.debug,
        "version": app_settings.version,
    }

    statuses = [check.get("status") for check in checks.values()]
    overall_status = "unhealthy" if "unhealthy" in statuses or "error" in statuses else "healthy"

    return {
        "status": overall_status,
        "application": app_info,
        "checks": checks,
        "pools": _get_pool_status(),
        "timestamp": utc_now().isoformat(),
    }


def _get_pool_status() -> dict[str, Any]:
    """Collect current pool and lock metrics for health reporting."""
    from modules.backend.core.concurrency import _entity_locks, _io_pool

    pools: dict[str, Any] = {"entity_locks": len(_entity_locks)}

    if _io_pool is not None:
        pools["thread_pool"] = {
            "max_workers": _io_pool._max_workers,
        }

    return pools
