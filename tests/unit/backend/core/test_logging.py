"""
Unit Tests for Centralized Logging.

Tests the logging configuration, structured fields, and source handling.
"""

import logging
from unittest.mock import MagicMock, patch

import pytest


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """setup_logging replaces root handlers; put the originals back."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(level)


class TestValidSources:
    def test_valid_sources_contains_expected_values(self):
        from modules.backend.core.logging import VALID_SOURCES

        expected = frozenset({"web", "cli", "api", "tasks", "internal", "unknown"})
        assert VALID_SOURCES == expected

    def test_known_frontends_are_valid_sources(self):
        """Every source the middleware can bind must be a recognized source."""
        from modules.backend.core.logging import VALID_SOURCES
        from modules.backend.core.middleware import KNOWN_FRONTENDS

        assert KNOWN_FRONTENDS <= VALID_SOURCES


class TestLoggingConfigLoading:
    """Tests for logging configuration loading from YAML."""

    def test_load_logging_config_reads_yaml_file(self):
        from modules.backend.core import logging as logging_module

        test_config = {
            "level": "DEBUG",
            "format": "console",
            "handlers": {
                "console": {"enabled": True},
                "file": {
                    "enabled": False,
                    "path": "logs/system.jsonl",
                    "max_bytes": 5242880,
                    "backup_count": 3,
                },
            },
        }

        logging_module._logging_config = None

        with patch("modules.backend.core.logging.load_yaml_config", return_value=test_config):
            config = logging_module._load_logging_config()

            assert config["level"] == "DEBUG"
            assert config["handlers"]["file"]["backup_count"] == 3

        logging_module._logging_config = None

    def test_config_is_cached(self):
        from modules.backend.core import logging as logging_module

        logging_module._logging_config = None

        with patch(
            "modules.backend.core.logging.load_yaml_config",
            return_value={"level": "INFO", "format": "json"},
        ) as mock_load:
            config1 = logging_module._load_logging_config()
            config2 = logging_module._load_logging_config()

            assert config1 is config2
            mock_load.assert_called_once_with("logging.yaml")

        logging_module._logging_config = None


class TestSetupLogging:
    """Tests for setup_logging function."""

    @pytest.fixture
    def mock_logging_config(self):
        return {
            "level": "INFO",
            "format": "json",
            "handlers": {
                "console": {"enabled": True},
                "file": {
                    "enabled": True,
                    "path": "logs/system.jsonl",
                    "max_bytes": 10485760,
                    "backup_count": 5,
                },
            },
        }

    def test_setup_logging_configures_root_logger(self, mock_logging_config):
        from modules.backend.core.logging import setup_logging

        with patch("modules.backend.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging(level="DEBUG", format_type="json", enable_file_logging=False)

            assert logging.getLogger().level == logging.DEBUG

    def test_setup_logging_with_file_logging_disabled(self, mock_logging_config):
        from modules.backend.core.logging import setup_logging

        with patch("modules.backend.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging(level="INFO", format_type="console", enable_file_logging=False)

            handler_types = [type(h).__name__ for h in logging.getLogger().handlers]
            assert handler_types == ["StreamHandler"]

    def test_setup_logging_with_file_logging_enabled(self, tmp_path, mock_logging_config):
        from modules.backend.core.logging import setup_logging

        log_file = tmp_path / "logs" / "system.jsonl"

        with patch("modules.backend.core.logging._load_logging_config", return_value=mock_logging_config), \
             patch("modules.backend.core.logging._resolve_log_path", return_value=log_file):
            setup_logging(level="INFO", format_type="json", enable_file_logging=True)

            handler_types = [type(h).__name__ for h in logging.getLogger().handlers]
            assert "RotatingFileHandler" in handler_types
            assert log_file.parent.is_dir()

    def test_setup_logging_uses_config_defaults(self, mock_logging_config):
        from modules.backend.core.logging import setup_logging

        with patch("modules.backend.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging(enable_file_logging=False)

            assert logging.getLogger().level == logging.INFO

    def test_setup_logging_quiets_taskiq(self, mock_logging_config):
        from modules.backend.core.logging import setup_logging

        with patch("modules.backend.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging(level="DEBUG", enable_file_logging=False)

            assert logging.getLogger("taskiq").level == logging.WARNING


class TestGetLogger:
    def test_get_logger_returns_structlog_logger(self):
        from modules.backend.core.logging import get_logger

        logger = get_logger("test.module")
        assert hasattr(logger, "bind")
        assert hasattr(logger, "info")


class TestLogWithSource:
    """Tests for log_with_source helper function."""

    def test_log_with_source_adds_source_field(self):
        from modules.backend.core.logging import log_with_source

        logger = MagicMock()

        log_with_source(logger, "tasks", "info", "Preview rendered", document_id="doc_1")

        logger.info.assert_called_once_with(
            "Preview rendered",
            source="tasks",
            document_id="doc_1",
        )

    def test_log_with_source_raises_on_invalid_level(self):
        """Should raise AttributeError for invalid log levels (no fallback)."""
        from modules.backend.core.logging import get_logger, log_with_source

        logger = get_logger("test")

        with pytest.raises(AttributeError):
            log_with_source(logger, "web", "nonexistent_level", "Test")


class TestResolveLogPath:
    def test_resolve_log_path_relative_to_project_root(self, tmp_path):
        from modules.backend.core.logging import _resolve_log_path

        with patch("modules.backend.core.logging.find_project_root", return_value=tmp_path):
            result = _resolve_log_path("logs/system.jsonl")
            assert result == tmp_path / "logs" / "system.jsonl"
