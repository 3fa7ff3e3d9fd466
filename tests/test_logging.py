"""Unit tests for the logging configuration module.

This test module validates the structured logging configuration,
context binding, and run ID management.
"""

import logging

import pytest
import structlog

from src.log_config import (
    bind_context,
    bind_run_id,
    configure_logging,
    get_logger,
    unbind_context,
    unbind_run_id,
)


class TestLoggingConfiguration:
    """Test cases for logging configuration."""

    def test_configure_logging_info_level(self):
        """Test logging configuration with INFO level."""
        configure_logging(level="INFO", json_logs=True)

        assert logging.getLogger().level == logging.INFO

    def test_configure_logging_debug_level(self):
        """Test logging configuration with DEBUG level."""
        configure_logging(level="debug", json_logs=True)

        assert logging.getLogger().level == logging.DEBUG

    def test_configure_logging_invalid_level(self):
        """Test logging configuration with invalid level."""
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(level="INVALID", json_logs=True)

    def test_configure_logging_json_renderer(self):
        """Test that JSON rendering is the last processor."""
        configure_logging(level="INFO", json_logs=True)

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_configure_logging_console_renderer(self):
        """Test logging configuration with console renderer."""
        configure_logging(level="INFO", json_logs=False)

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_get_logger_with_name(self):
        """Test getting a logger with a specific name."""
        configure_logging(level="INFO", json_logs=True)
        logger = get_logger(__name__)
        assert logger is not None

    def test_get_logger_without_name(self):
        """Test getting a logger without a name."""
        configure_logging(level="INFO", json_logs=True)
        logger = get_logger()
        assert logger is not None


class TestContextBinding:
    """Test cases for context binding functionality."""

    def setup_method(self):
        """Set up test environment before each test."""
        configure_logging(level="INFO", json_logs=True)
        structlog.contextvars.clear_contextvars()  # Ensure clean state

    def teardown_method(self):
        """Clean up after each test."""
        structlog.contextvars.clear_contextvars()

    def test_bind_run_id(self):
        """Test binding an explicit run ID."""
        run_id = bind_run_id("build-42")

        assert run_id == "build-42"
        assert structlog.contextvars.get_contextvars()["run_id"] == "build-42"

    def test_bind_run_id_generates_id(self):
        """Test that a run ID is generated when none is given."""
        first = bind_run_id()
        second = bind_run_id()

        assert len(first) == 32
        assert first != second
        assert structlog.contextvars.get_contextvars()["run_id"] == second

    def test_unbind_run_id(self):
        """Test removing the run ID from the context."""
        bind_run_id("build-42")
        unbind_run_id()

        assert "run_id" not in structlog.contextvars.get_contextvars()

    def test_bind_context_multiple_variables(self):
        """Test binding several variables at once."""
        bind_context(manifest="build.yaml", command="check")

        context = structlog.contextvars.get_contextvars()
        assert context["manifest"] == "build.yaml"
        assert context["command"] == "check"

    def test_unbind_context_specific_keys(self):
        """Test that unbinding leaves other keys in place."""
        bind_context(manifest="build.yaml", command="check")
        unbind_context("command")

        assert structlog.contextvars.get_contextvars() == {"manifest": "build.yaml"}


class TestStructuredLogging:
    """Test that events reach the standard library handlers."""

    def setup_method(self):
        """Set up test environment before each test."""
        configure_logging(level="INFO", json_logs=True)
        structlog.contextvars.clear_contextvars()

    def teardown_method(self):
        """Clean up after each test."""
        structlog.contextvars.clear_contextvars()

    def test_event_includes_context(self, caplog):
        """Test that bound context is rendered into the event."""
        caplog.set_level(logging.INFO)
        logger = get_logger("tests.logging")

        bind_run_id("build-42")
        logger.info("graph_loaded", artifact_count=3)

        assert "graph_loaded" in caplog.text
        assert "build-42" in caplog.text
        assert '"artifact_count": 3' in caplog.text

    def test_level_filtering(self, caplog):
        """Test that events below the configured level are dropped."""
        configure_logging(level="WARNING", json_logs=True)
        caplog.set_level(logging.WARNING)
        logger = get_logger("tests.logging")

        logger.info("hidden_event")
        logger.warning("visible_event")

        assert "hidden_event" not in caplog.text
        assert "visible_event" in caplog.text
