"""Tests for structured logging."""

import json
import logging
from pathlib import Path

import structlog

from tagnav.config.models import LoggingConfig, LogOutputConfig
from tagnav.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)


class TestRequestIdCorrelation:
    """Request ID context variable tests."""

    def setup_method(self) -> None:
        """Clear request ID before each test."""
        clear_request_id()

    def test_given_request_id_when_set_then_can_retrieve(self) -> None:
        """Request ID can be set and retrieved."""
        # Given
        request_id = "test-123"

        # When
        result = set_request_id(request_id)

        # Then
        assert result == request_id
        assert get_request_id() == request_id

    def test_given_no_id_when_set_then_generates_id(self) -> None:
        """Set generates a short uuid-based ID when none provided."""
        rid = set_request_id()

        assert rid is not None
        assert len(rid) == 12

    def test_given_set_id_when_clear_then_removes_id(self) -> None:
        """Clear removes the current request ID."""
        set_request_id("to-clear")

        clear_request_id()

        assert get_request_id() is None


class TestConfigureLogging:
    """configure_logging handler setup."""

    def teardown_method(self) -> None:
        clear_request_id()
        logging.getLogger().handlers.clear()

    def test_simple_setup_installs_one_handler(self) -> None:
        """Simple params produce a single stderr handler."""
        configure_logging(level="DEBUG")

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG

    def test_reconfigure_replaces_handlers(self) -> None:
        """Calling twice does not stack handlers."""
        configure_logging(level="INFO")
        configure_logging(level="INFO")

        assert len(logging.getLogger().handlers) == 1

    def test_watchfiles_logger_quieted(self) -> None:
        """watchfiles chatter is raised to WARNING."""
        configure_logging(level="DEBUG")

        assert logging.getLogger("watchfiles.main").level == logging.WARNING

    def test_json_file_output_includes_request_id(self, tmp_path: Path) -> None:
        """JSON file output carries event name, fields and request ID."""
        # Given
        log_file = tmp_path / "logs" / "tagnav.jsonl"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[LogOutputConfig(format="json", destination=str(log_file))],
        )
        configure_logging(config=config)
        set_request_id("req-42")

        # When
        structlog.get_logger().info("workspace_scanned", files=3)
        for handler in logging.getLogger().handlers:
            handler.flush()

        # Then
        lines = log_file.read_text().strip().splitlines()
        record = json.loads(lines[-1])
        assert record["event"] == "workspace_scanned"
        assert record["files"] == 3
        assert record["request_id"] == "req-42"
        assert record["level"] == "info"

    def test_output_level_filters(self, tmp_path: Path) -> None:
        """Per-output level drops records below it."""
        log_file = tmp_path / "warn.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[LogOutputConfig(format="json", destination=str(log_file), level="WARNING")],
        )
        configure_logging(config=config)

        logger = structlog.get_logger()
        logger.info("ignored_event")
        logger.warning("selector_shadowed", selector="app-foo")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text()
        assert "ignored_event" not in content
        assert "selector_shadowed" in content


class TestGetLogger:
    """get_logger binding."""

    def test_binds_name(self, tmp_path: Path) -> None:
        """A named logger carries its name on every event."""
        log_file = tmp_path / "named.log"
        configure_logging(
            config=LoggingConfig(
                level="INFO",
                outputs=[LogOutputConfig(format="json", destination=str(log_file))],
            )
        )

        get_logger("scanner").info("hello")
        for handler in logging.getLogger().handlers:
            handler.flush()

        record = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert record["logger"] == "scanner"
        logging.getLogger().handlers.clear()
