#!/usr/bin/env python3
"""
Application Entry Script.

Main entry point for docshelf. All functionality is accessible through
command-line options.

Usage:
    python run.py --help
    python run.py --action server --verbose
    python run.py --action worker
    python run.py --action generate-previews
    python run.py --action seed-folders
    python run.py --action health --debug
    python run.py --action config
    python run.py --action test --test-type unit
"""

import asyncio
import subprocess
import sys
from pathlib import Path

import click

# Ensure project root is in path for absolute imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from modules.backend.core.logging import get_logger, log_with_source, setup_logging


def validate_project_root() -> Path:
    """Validate that we're running from the project root."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.echo(
            click.style("Error: .project_root not found. Run from project root.", fg="red"),
            err=True,
        )
        sys.exit(1)
    return PROJECT_ROOT


@click.command()
@click.option(
    "--action",
    type=click.Choice([
        "server", "worker", "generate-previews", "seed-folders",
        "health", "config", "test", "info",
    ]),
    default="info",
    help="Action to perform.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output (INFO level logging).",
)
@click.option(
    "--debug", "-d",
    is_flag=True,
    help="Enable debug output (DEBUG level logging).",
)
@click.option(
    "--host",
    default=None,
    help="Server host (for server action).",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Server port (for server action).",
)
@click.option(
    "--reload",
    is_flag=True,
    help="Enable auto-reload (for server action).",
)
@click.option(
    "--test-type",
    type=click.Choice(["all", "unit", "integration"]),
    default="all",
    help="Test type to run (for test action).",
)
@click.option(
    "--coverage",
    is_flag=True,
    help="Run tests with coverage (for test action).",
)
def main(
    action: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
    test_type: str,
    coverage: bool,
) -> None:
    """
    docshelf Entry Point.

    Run the API server or the preview worker, maintain storage, view
    configuration, or run tests.

    Examples:

        # Start development server
        python run.py --action server --reload --verbose

        # Render previews for documents that have none
        python run.py --action generate-previews

        # Run unit tests with coverage
        python run.py --action test --test-type unit --coverage
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console")
    logger = get_logger(__name__)

    logger.debug("Starting application", extra={"action": action, "log_level": log_level})

    if action == "server":
        run_server(logger, host, port, reload)
    elif action == "worker":
        run_worker(logger)
    elif action == "generate-previews":
        generate_previews(logger)
    elif action == "seed-folders":
        seed_folders(logger)
    elif action == "health":
        check_health(logger)
    elif action == "config":
        show_config(logger)
    elif action == "test":
        run_tests(logger, test_type, coverage)
    elif action == "info":
        show_info(logger)


def run_server(logger, host: str | None, port: int | None, reload: bool) -> None:
    """Start the FastAPI development server."""
    from modules.backend.core.config import get_app_config

    server = get_app_config().application.server
    server_host = host or server.host
    server_port = port or server.port

    logger.info(
        "Starting server",
        extra={"host": server_host, "port": server_port, "reload": reload},
    )

    cmd = [
        sys.executable, "-m", "uvicorn",
        "modules.backend.main:app",
        "--host", server_host,
        "--port", str(server_port),
    ]

    if reload:
        cmd.append("--reload")

    click.echo(f"Starting server at http://{server_host}:{server_port}")
    click.echo("Press Ctrl+C to stop\n")

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Server failed to start", extra={"exit_code": e.returncode})
        sys.exit(e.returncode)


def run_worker(logger) -> None:
    """Start a Taskiq worker for the Redis preview queue."""
    from modules.backend.core.config import get_app_config

    if get_app_config().tasks.broker != "redis":
        click.echo(
            click.style(
                "The preview queue uses the in-memory broker; tasks run inside the server.\n"
                "Set `broker: redis` in config/settings/tasks.yaml to use a worker.",
                fg="yellow",
            ),
            err=True,
        )
        sys.exit(1)

    cmd = [sys.executable, "-m", "taskiq", "worker", "modules.backend.tasks.broker:broker"]
    logger.info("Starting worker", extra={"command": " ".join(cmd)})

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Worker stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Worker failed", extra={"exit_code": e.returncode})
        sys.exit(e.returncode)


def generate_previews(logger) -> None:
    """Render previews for all documents that have no SVG preview."""
    from modules.backend.core.concurrency import shutdown_pools
    from modules.backend.core.storage import get_storage_paths
    from modules.backend.services.preview import PreviewService

    async def _run() -> dict[str, int]:
        paths = get_storage_paths()
        paths.ensure()
        try:
            return await PreviewService(paths).generate_missing()
        finally:
            await shutdown_pools()

    stats = asyncio.run(_run())
    log_with_source(logger, "cli", "info", "Preview generation complete", **stats)

    click.echo(f"Found {stats['total']} documents")
    click.echo("Preview generation complete:")
    click.echo(f"- Generated: {stats['generated']}")
    click.echo(f"- Skipped (existing): {stats['skipped']}")
    click.echo(f"- Errors: {stats['errors']}")

    if stats["errors"]:
        sys.exit(1)


def seed_folders(logger) -> None:
    """Create the default folders if storage has no folders yet."""
    from modules.backend.core.concurrency import shutdown_pools
    from modules.backend.core.storage import get_storage_paths
    from modules.backend.services.folder import FolderService

    async def _run() -> list:
        paths = get_storage_paths()
        paths.ensure()
        try:
            return await FolderService(paths).ensure_default_folders()
        finally:
            await shutdown_pools()

    created = asyncio.run(_run())
    log_with_source(logger, "cli", "info", "Seed folders finished", created=len(created))

    if created:
        for folder in created:
            click.echo(f"Created folder {folder.name} ({folder.id})")
    else:
        click.echo("Folders already exist; nothing to seed.")


def check_health(logger) -> None:
    """Check application health by testing imports, configuration and storage."""
    click.echo("Checking application health...\n")

    checks = []

    # Check 1: Configuration loading
    try:
        from modules.backend.core.config import get_app_config, get_settings
        app_config = get_app_config()
        get_settings()
        checks.append(("YAML configuration", True, f"App: {app_config.application.name}"))
        logger.debug("Configuration loaded", extra={"app_name": app_config.application.name})
    except Exception as e:
        checks.append(("YAML configuration", False, str(e)))
        logger.error("Configuration failed", extra={"error": str(e)})

    # Check 2: Storage directories
    try:
        from modules.backend.core.storage import get_storage_paths
        paths = get_storage_paths()
        paths.ensure()
        checks.append(("Storage", True, str(paths.root)))
        logger.debug("Storage ready", extra={"root": str(paths.root)})
    except Exception as e:
        checks.append(("Storage", False, str(e)))
        logger.error("Storage check failed", extra={"error": str(e)})

    # Check 3: FastAPI app
    try:
        from modules.backend.main import get_app
        app = get_app()
        checks.append(("FastAPI application", True, f"Title: {app.title}"))
        logger.debug("FastAPI app loaded", extra={"title": app.title})
    except Exception as e:
        checks.append(("FastAPI application", False, str(e)))
        logger.error("FastAPI app failed", extra={"error": str(e)})

    # Check 4: Preview broker
    try:
        from modules.backend.tasks.broker import get_broker
        broker = get_broker()
        checks.append(("Preview broker", True, type(broker).__name__))
        logger.debug("Broker configured", extra={"broker": type(broker).__name__})
    except Exception as e:
        checks.append(("Preview broker", False, str(e)))
        logger.error("Broker failed", extra={"error": str(e)})

    click.echo("Health Check Results:")
    click.echo("-" * 50)

    all_passed = True
    for name, passed, detail in checks:
        status = click.style("✓ PASS", fg="green") if passed else click.style("✗ FAIL", fg="red")
        detail_str = f" ({detail})" if detail else ""
        click.echo(f"  {status}  {name}{detail_str}")
        if not passed:
            all_passed = False

    click.echo("-" * 50)

    if all_passed:
        click.echo(click.style("\nAll checks passed!", fg="green"))
    else:
        click.echo(click.style("\nSome checks failed. See details above.", fg="yellow"))
        sys.exit(1)


def _echo_section(title: str, values: dict, indent: int = 2) -> None:
    if title:
        click.echo(f"\n{title}")
        click.echo("-" * 40)
    for key, value in values.items():
        if isinstance(value, dict):
            click.echo(f"{' ' * indent}{key}:")
            _echo_section("", value, indent + 2)
        else:
            click.echo(f"{' ' * indent}{key}: {value}")


def show_config(logger) -> None:
    """Display loaded configuration."""
    click.echo("Application Configuration:")

    try:
        from modules.backend.core.config import get_app_config, get_storage_root

        app_config = get_app_config()

        _echo_section("Application Settings (application.yaml):", app_config.application.model_dump())
        _echo_section("Storage Settings (storage.yaml):", app_config.storage.model_dump())
        click.echo(f"  resolved root: {get_storage_root()}")
        _echo_section("Task Queue Settings (tasks.yaml):", app_config.tasks.model_dump())
        _echo_section("Logging Settings (logging.yaml):", app_config.logging.model_dump())

        logger.info("Configuration displayed successfully")

    except Exception as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"))
        sys.exit(1)


def run_tests(logger, test_type: str, coverage: bool) -> None:
    """Run the test suite."""
    logger.info("Running tests", extra={"type": test_type, "coverage": coverage})

    cmd = [sys.executable, "-m", "pytest"]

    if test_type == "unit":
        cmd.append("tests/unit")
    elif test_type == "integration":
        cmd.append("tests/integration")
    else:
        cmd.append("tests/")

    cmd.append("-v")

    if coverage:
        cmd.extend(["--cov=modules/backend", "--cov-report=term-missing"])

    click.echo(f"Running: {' '.join(cmd)}\n")

    try:
        result = subprocess.run(cmd)
        sys.exit(result.returncode)
    except FileNotFoundError:
        logger.error("pytest not found. Install with: pip install -e '.[test]'")
        sys.exit(1)


def show_info(logger) -> None:
    """Display application information."""
    from modules.backend.core.config import get_app_config, get_server_base_url

    app_settings = get_app_config().application
    click.echo("docshelf")
    click.echo("=" * 40)
    click.echo(f"Name: {app_settings.name}")
    click.echo(f"Version: {app_settings.version}")
    click.echo(f"Description: {app_settings.description}")
    click.echo(f"Server: {get_server_base_url()}")

    click.echo()
    click.echo("Available Actions:")
    click.echo("  --action server             Start the development server")
    click.echo("  --action worker             Start the preview worker (redis broker)")
    click.echo("  --action generate-previews  Render missing document previews")
    click.echo("  --action seed-folders       Create the default folders")
    click.echo("  --action health             Check application health")
    click.echo("  --action config             Display configuration")
    click.echo("  --action test               Run test suite")
    click.echo("  --action info               Show this information")
    click.echo()
    click.echo("Logging Options:")
    click.echo("  --verbose, -v     Enable INFO level logging")
    click.echo("  --debug, -d       Enable DEBUG level logging")

    logger.debug("Info displayed")


if __name__ == "__main__":
    main()
