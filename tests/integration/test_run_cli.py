"""
Integration Tests for run.py CLI.

Tests the CLI as a whole with real execution paths. Storage is pointed
at a temporary directory through STORAGE_ROOT.
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest


# Project root for running commands
PROJECT_ROOT = Path(__file__).parent.parent.parent


@pytest.fixture
def run_cli(tmp_path):
    """Run run.py in a subprocess with storage under tmp_path."""
    env = {**os.environ, "STORAGE_ROOT": str(tmp_path / "storage")}

    def _run(*args: str, cwd: Path = PROJECT_ROOT) -> subprocess.CompletedProcess:
        return subprocess.run(
            [sys.executable, str(PROJECT_ROOT / "run.py"), *args],
            cwd=cwd,
            env=env,
            capture_output=True,
            text=True,
        )

    return _run


class TestRunCLI:
    """Integration tests for run.py command-line interface."""

    def test_help_returns_zero_exit_code(self, run_cli):
        result = run_cli("--help")

        assert result.returncode == 0
        assert "Usage:" in result.stdout
        assert "--action" in result.stdout

    def test_info_action_succeeds(self, run_cli):
        result = run_cli("--action", "info")

        assert result.returncode == 0
        assert "Name: docshelf" in result.stdout

    def test_config_action_displays_yaml_settings(self, run_cli, tmp_path):
        result = run_cli("--action", "config")

        assert result.returncode == 0
        assert "Application Settings" in result.stdout
        assert f"resolved root: {tmp_path / 'storage'}" in result.stdout

    def test_health_action_checks_components(self, run_cli):
        result = run_cli("--action", "health")

        assert result.returncode == 0
        assert "Health Check Results" in result.stdout
        assert "Storage" in result.stdout
        assert "FAIL" not in result.stdout

    def test_seed_then_generate_previews(self, run_cli, tmp_path):
        seeded = run_cli("--action", "seed-folders")
        generated = run_cli("--action", "generate-previews")

        assert seeded.returncode == 0
        assert len(list((tmp_path / "storage" / "folders").glob("*.json"))) == 2
        assert generated.returncode == 0
        assert "Found 0 documents" in generated.stdout

    def test_invalid_action_shows_error(self, run_cli):
        result = run_cli("--action", "invalid")

        assert result.returncode != 0
        assert "Invalid value" in result.stderr


class TestRunCLIFromDifferentDirectory:
    """Test that CLI works when run from different directories."""

    def test_runs_outside_project_directory(self, run_cli, tmp_path):
        """PROJECT_ROOT is the script location, not the working directory."""
        result = run_cli("--action", "info", cwd=tmp_path)

        assert result.returncode == 0
