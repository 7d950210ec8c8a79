"""Tests for logging utilities.

Test coverage includes:
    - Logger instance creation and naming
    - Level configuration from values, names and the environment
    - Log message emission
"""

import logging
from unittest.mock import patch

from hanavectordb.utils.logging import LoggerFactory


class TestLoggerFactory:
    """Test suite for LoggerFactory."""

    def test_logger_factory_creates_logger(self) -> None:
        """Test that LoggerFactory creates a logger instance."""
        logger = LoggerFactory(logger_name=__name__).get_logger()

        assert isinstance(logger, logging.Logger)
        assert logger.name == __name__

    def test_logger_factory_sets_level(self) -> None:
        """Test the level is applied to the logger."""
        logger = LoggerFactory("test_debug", log_level=logging.DEBUG).get_logger()

        assert logger.level == logging.DEBUG

    def test_logger_factory_logs_info(self, caplog) -> None:
        """Test that logger can emit info messages."""
        with caplog.at_level(logging.INFO):
            logger = LoggerFactory(logger_name="test_info").get_logger()
            logger.info("Test info message")

        assert "Test info message" in caplog.text

    def test_basic_config_runs_once(self) -> None:
        """Test repeated factories do not reconfigure the root logger."""
        with patch("hanavectordb.utils.logging.logging.basicConfig") as basic_config:
            LoggerFactory._is_logger_initialized = False
            LoggerFactory("first")
            LoggerFactory("second")

        basic_config.assert_called_once()


class TestParseLevel:
    """Test suite for LoggerFactory.parse_level."""

    def test_names(self) -> None:
        """Test level names are case-insensitive."""
        assert LoggerFactory.parse_level("debug") == logging.DEBUG
        assert LoggerFactory.parse_level("WARNING") == logging.WARNING

    def test_numbers_pass_through(self) -> None:
        """Test numeric levels are returned unchanged."""
        assert LoggerFactory.parse_level(logging.ERROR) == logging.ERROR

    def test_unknown_falls_back(self) -> None:
        """Test unknown names use the default."""
        assert LoggerFactory.parse_level("verbose") == logging.INFO
        assert LoggerFactory.parse_level(None, logging.WARNING) == logging.WARNING


class TestConfigureFromEnv:
    """Test suite for LoggerFactory.configure_from_env."""

    def test_reads_level(self, monkeypatch) -> None:
        """Test LOG_LEVEL sets the logger level."""
        monkeypatch.setenv("LOG_LEVEL", "ERROR")

        logger = LoggerFactory.configure_from_env("test_env").get_logger()

        assert logger.level == logging.ERROR

    def test_custom_variable(self, monkeypatch) -> None:
        """Test a different variable can be used."""
        monkeypatch.setenv("HANA_LOG_LEVEL", "DEBUG")

        factory = LoggerFactory.configure_from_env("test_env_custom", "HANA_LOG_LEVEL")

        assert factory.log_level == logging.DEBUG
