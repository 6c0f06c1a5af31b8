"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Test Storage:
    Every test gets its own storage root under pytest's ``tmp_path``, so
    no test sees another test's documents, folders or previews. The
    configured storage root (config/settings/storage.yaml) is never
    touched by the test suite.

Preview Queue:
    ``inline_broker`` installs an in-memory Taskiq broker that runs tasks
    inside ``kiq()``, so a preview exists as soon as the create/update
    call returns.
"""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
from taskiq import AsyncBroker

from modules.backend.core.storage import StoragePaths
import modules.backend.tasks.broker as broker_module
from modules.backend.tasks.broker import create_broker, set_broker
from modules.backend.tasks.previews import clear_failures


# =============================================================================
# Storage Fixtures
# =============================================================================


@pytest.fixture
def storage_paths(tmp_path) -> StoragePaths:
    """
    Provide an empty storage layout rooted in a temporary directory.

    Usage:
        async def test_save(storage_paths: StoragePaths):
            repo = FolderRepository(storage_paths)
    """
    paths = StoragePaths(tmp_path / "storage")
    paths.ensure()
    return paths


# =============================================================================
# Task Queue Fixtures
# =============================================================================


@pytest.fixture
async def inline_broker() -> AsyncGenerator[AsyncBroker, None]:
    """
    Install an in-memory broker that executes tasks inline.

    The process broker is reset after the test so the next caller of
    ``get_broker()`` builds a fresh one from configuration.
    """
    broker = set_broker(create_broker(await_inplace=True))
    await broker.startup()
    clear_failures()

    yield broker

    await broker.shutdown()
    clear_failures()
    broker_module._broker = None
    broker_module._tasks.clear()


# =============================================================================
# Record Helpers
# =============================================================================


def text_content(data_stream: str) -> dict[str, Any]:
    """Editor payload whose body is ``data_stream``."""
    return {
        "body": {
            "dataStream": data_stream,
            "textRuns": [],
            "paragraphs": [{"startIndex": 0}],
        },
    }


@pytest.fixture
def make_content():
    """Provide the ``text_content`` helper to tests."""
    return text_content


# =============================================================================
# Utility Fixtures
# =============================================================================


@pytest.fixture
def anyio_backend() -> str:
    """Specify the async backend for anyio."""
    return "asyncio"
