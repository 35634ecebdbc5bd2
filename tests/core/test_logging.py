"""Tests for structured logging."""

import json
import logging
from pathlib import Path

import structlog

from coverlink.config.models import LoggingConfig, LogOutputConfig
from coverlink.core.logging import (
    clear_run_id,
    configure_logging,
    get_log_file_path,
    get_run_id,
    set_run_id,
)


class TestRunIdCorrelation:
    """Run ID context variable tests."""

    def setup_method(self) -> None:
        clear_run_id()

    def test_given_run_id_when_set_then_can_retrieve(self) -> None:
        """Run ID can be set and retrieved."""
        # Given
        run_id = "run-123"

        # When
        result = set_run_id(run_id)

        # Then
        assert result == run_id
        assert get_run_id() == run_id

    def test_given_no_id_when_set_then_generates_uuid(self) -> None:
        """Set generates UUID-based ID when none provided."""
        rid = set_run_id()

        assert len(rid) == 12  # uuid4().hex[:12]

    def test_given_set_id_when_clear_then_removes_id(self) -> None:
        """Clear removes the current run ID."""
        set_run_id("to-clear")

        clear_run_id()

        assert get_run_id() is None


class TestLoggingConfiguration:
    """Logging configuration tests."""

    def setup_method(self) -> None:
        """Reset structlog and stdlib logging before each test."""
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()
        clear_run_id()

    def teardown_method(self) -> None:
        for handler in logging.getLogger().handlers:
            handler.close()
        logging.getLogger().handlers.clear()
        structlog.reset_defaults()
        clear_run_id()

    def test_given_file_output_when_log_then_json_lines_written(self, tmp_path: Path) -> None:
        """JSON file output carries event, fields, level and timestamp."""
        # Given
        log_file = tmp_path / "coverlink.log"
        config = LoggingConfig(
            level="INFO",
            outputs=[LogOutputConfig(format="json", destination=str(log_file))],
        )
        configure_logging(config=config)

        # When
        structlog.get_logger().info("sensor.coverage_per_test", files=3)

        # Then
        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["event"] == "sensor.coverage_per_test"
        assert data["files"] == 3
        assert data["level"] == "info"
        assert "timestamp" in data
        assert get_log_file_path() == log_file

    def test_given_run_id_when_log_then_run_id_attached(self, tmp_path: Path) -> None:
        """The active run ID is added to every event."""
        log_file = tmp_path / "run.log"
        configure_logging(
            config=LoggingConfig(
                outputs=[LogOutputConfig(format="json", destination=str(log_file))]
            )
        )
        set_run_id("abc123")

        structlog.get_logger().warning("projector.unknown_status", line=4)

        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["run_id"] == "abc123"

    def test_given_multi_output_config_when_configure_then_levels_respected(
        self, tmp_path: Path
    ) -> None:
        """Multiple outputs receive logs according to their levels."""
        # Given
        debug_file = tmp_path / "debug.log"
        info_file = tmp_path / "info.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[
                LogOutputConfig(format="json", destination=str(info_file), level="INFO"),
                LogOutputConfig(format="json", destination=str(debug_file)),
            ],
        )

        # When
        configure_logging(config=config)
        logger = structlog.get_logger()
        logger.debug("debug only")
        logger.info("info msg")

        # Then
        info_content = info_file.read_text()
        assert "info msg" in info_content
        assert "debug only" not in info_content

        debug_content = debug_file.read_text()
        assert "debug only" in debug_content
        assert "info msg" in debug_content

    def test_given_config_object_when_configure_then_takes_precedence(self, tmp_path: Path) -> None:
        """LoggingConfig object takes precedence over simple params."""
        log_file = tmp_path / "test.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[LogOutputConfig(format="json", destination=str(log_file))],
        )

        configure_logging(config=config, json_format=False, level="ERROR")
        structlog.get_logger().debug("debug msg")

        assert "debug msg" in log_file.read_text()
