"""Tests for structured logging helpers."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from rich.logging import RichHandler

from steamvault.shared.errors import ErrorCode, ErrorContext, StrategyExhaustedError
from steamvault.shared.logging import (
    StructuredFormatter,
    log_api_call,
    log_operation_error,
    log_operation_success,
    setup_structured_logger,
)


class TestStructuredFormatter:
    def test_formats_record_as_json(self) -> None:
        # Given
        record = logging.LogRecord("steamvault.test", logging.INFO, __file__, 1, "hello %s", ("x",), None)
        record.error_code = "STORE_ERROR"

        # When
        payload = json.loads(StructuredFormatter().format(record))

        # Then
        assert payload["message"] == "hello x"
        assert payload["level"] == "INFO"
        assert payload["error_code"] == "STORE_ERROR"


class TestSetupStructuredLogger:
    def test_rich_console_handler(self) -> None:
        logger = setup_structured_logger("steamvault.test.rich", level="DEBUG")

        assert logger.level == logging.DEBUG
        assert any(isinstance(h, RichHandler) for h in logger.handlers)
        assert logger.propagate is False

    def test_json_file_handler(self, tmp_path: Path) -> None:
        # Given
        log_file = tmp_path / "steamvault.log"
        logger = setup_structured_logger(
            "steamvault.test.file",
            level="INFO",
            log_file=str(log_file),
            use_rich_console=False,
        )

        # When
        logger.info("written")
        for handler in logger.handlers:
            handler.flush()
            handler.close()

        # Then
        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["message"] == "written"

    def test_repeated_setup_replaces_handlers(self) -> None:
        setup_structured_logger("steamvault.test.repeat", use_rich_console=False)
        logger = setup_structured_logger("steamvault.test.repeat", use_rich_console=False)

        assert len(logger.handlers) == 1


class TestOperationLogging:
    def test_strategy_failure_logged_as_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        # Given
        logger = logging.getLogger("svtest.ops")
        error = StrategyExhaustedError(
            "relay-a",
            "malformed",
            ErrorContext(operation="fetch_strategy", additional_data={"strategy": "relay-a"}),
        )

        # When
        with caplog.at_level(logging.WARNING, logger="svtest.ops"):
            log_operation_error(logger, error, operation="fetch_inventory", level=logging.WARNING)

        # Then
        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.error_code == ErrorCode.UPSTREAM_STRATEGY_EXHAUSTED.name
        assert record.context["additional_data"] == {"strategy": "relay-a"}
        assert record.operation == "fetch_inventory"

    def test_success_logged_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("svtest.ops")

        with caplog.at_level(logging.DEBUG, logger="svtest.ops"):
            log_operation_success(logger, "persist_snapshot", 1.5, {"item_count": 2})

        record = caplog.records[-1]
        assert record.duration_ms == 1.5
        assert record.result_info == {"item_count": 2}

    def test_api_call_error_status_is_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("svtest.api")

        with caplog.at_level(logging.DEBUG, logger="svtest.api"):
            log_api_call(logger, "direct", status_code=429)
            log_api_call(logger, "relay-a", status_code=200)

        failed, succeeded = caplog.records[-2:]
        assert failed.levelno == logging.WARNING
        assert "failed with status 429" in failed.getMessage()
        assert succeeded.levelno == logging.DEBUG
