"""
Unit Tests for run.py Entry Script.

Tests individual actions with storage pointed at a temporary directory.
"""

import json
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from run import main, validate_project_root


@pytest.fixture
def runner():
    """Create Click test runner."""
    return CliRunner()


@pytest.fixture
def patched_storage(storage_paths):
    """Point every action at the test storage root and skip log file setup."""
    with (
        patch("modules.backend.core.storage.get_storage_paths", return_value=storage_paths),
        patch("run.setup_logging"),
    ):
        yield storage_paths


class TestValidateProjectRoot:
    """Tests for validate_project_root function."""

    def test_validate_project_root_succeeds_when_marker_exists(self, tmp_path):
        """Should return path when .project_root exists."""
        (tmp_path / ".project_root").touch()

        with patch("run.PROJECT_ROOT", tmp_path):
            assert validate_project_root() == tmp_path

    def test_validate_project_root_exits_when_marker_missing(self, tmp_path):
        """Should exit with error when .project_root is missing."""
        with patch("run.PROJECT_ROOT", tmp_path):
            with pytest.raises(SystemExit) as exc_info:
                validate_project_root()
            assert exc_info.value.code == 1


class TestMainCLI:
    """Tests for main CLI entry point."""

    def test_help_displays_usage(self, runner):
        """Should display help text with --help."""
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "docshelf Entry Point" in result.output
        assert "--action" in result.output
        assert "generate-previews" in result.output

    def test_info_action_displays_app_info(self, runner, patched_storage):
        """Should display application info with --action info."""
        result = runner.invoke(main, ["--action", "info"])

        assert result.exit_code == 0
        assert "Name: docshelf" in result.output
        assert "Server: http://127.0.0.1:8000" in result.output
        assert "Available Actions:" in result.output

    def test_verbose_flag_sets_info_logging(self, runner):
        """Should configure INFO level logging with --verbose."""
        with patch("run.setup_logging") as mock_setup:
            runner.invoke(main, ["--action", "info", "--verbose"])

        mock_setup.assert_called_once_with(level="INFO", format_type="console")

    def test_debug_flag_sets_debug_logging(self, runner):
        """Should configure DEBUG level logging with --debug."""
        with patch("run.setup_logging") as mock_setup:
            runner.invoke(main, ["--action", "info", "--debug"])

        mock_setup.assert_called_once_with(level="DEBUG", format_type="console")

    def test_invalid_action_rejected(self, runner):
        result = runner.invoke(main, ["--action", "explode"])

        assert result.exit_code != 0
        assert "Invalid value" in result.output


class TestConfigAction:
    def test_shows_sections(self, runner, patched_storage):
        result = runner.invoke(main, ["--action", "config"])

        assert result.exit_code == 0
        assert "Application Settings (application.yaml):" in result.output
        assert "Storage Settings (storage.yaml):" in result.output
        assert "Task Queue Settings (tasks.yaml):" in result.output
        assert "resolved root:" in result.output


class TestSeedFoldersAction:
    def test_seeds_once(self, runner, patched_storage):
        first = runner.invoke(main, ["--action", "seed-folders"])
        second = runner.invoke(main, ["--action", "seed-folders"])

        assert first.exit_code == 0
        assert "Created folder Notes" in first.output
        assert "Created folder Journal" in first.output
        assert len(list(patched_storage.folders.glob("*.json"))) == 2
        assert "nothing to seed" in second.output


class TestGeneratePreviewsAction:
    def _write_document(self, paths, document_id: str) -> None:
        record = {
            "id": document_id,
            "title": document_id,
            "content": {"body": {"dataStream": f"Body of {document_id}"}},
            "createdAt": "2025-01-01T00:00:00.000Z",
            "modifiedAt": "2025-01-01T00:00:00.000Z",
        }
        paths.document_path(document_id).write_text(json.dumps(record), encoding="utf-8")

    def test_reports_stats(self, runner, patched_storage):
        self._write_document(patched_storage, "doc_1")
        self._write_document(patched_storage, "doc_2")
        patched_storage.preview_path("doc_2").write_text("<svg/>")

        result = runner.invoke(main, ["--action", "generate-previews"])

        assert result.exit_code == 0
        assert "Found 2 documents" in result.output
        assert "- Generated: 1" in result.output
        assert "- Skipped (existing): 1" in result.output
        assert "- Errors: 0" in result.output
        assert patched_storage.preview_path("doc_1").exists()

    def test_exits_nonzero_on_errors(self, runner, patched_storage):
        patched_storage.document_path("doc_bad").write_text("{", encoding="utf-8")

        result = runner.invoke(main, ["--action", "generate-previews"])

        assert result.exit_code == 1
        assert "- Errors: 1" in result.output


class TestWorkerAction:
    def test_refuses_memory_broker(self, runner, patched_storage):
        with patch("run.subprocess.run") as mock_run:
            result = runner.invoke(main, ["--action", "worker"])

        assert result.exit_code == 1
        mock_run.assert_not_called()
