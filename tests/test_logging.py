"""Tests for structured logging helpers."""
import io
import json
import logging

import pytest
import structlog
from structlog.testing import capture_logs

from cmdrunner.logging import configure_from_settings, configure_logging, get_logger, log_operation
from cmdrunner.models import RunnerSettings


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore structlog and stdlib logging after each test."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)


class TestConfigureLogging:
    """Test logging configuration."""

    def test_json_output(self):
        stream = io.StringIO()
        configure_logging(level="INFO", json_output=True, stream=stream)

        get_logger("cmdrunner.test").info("process.exited", exit_code=0)

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["event"] == "process.exited"
        assert record["exit_code"] == 0
        assert record["level"] == "info"
        assert record["logger"] == "cmdrunner.test"

    def test_console_output(self):
        stream = io.StringIO()
        configure_logging(level="INFO", stream=stream)

        get_logger("cmdrunner.test").warning("reader.detached", reader="cmdrunner-stdout")

        output = stream.getvalue()
        assert "reader.detached" in output
        assert "cmdrunner-stdout" in output

    def test_level_filters_debug(self):
        stream = io.StringIO()
        configure_logging(level="INFO", json_output=True, stream=stream)

        get_logger("cmdrunner.test").debug("hidden")

        assert "hidden" not in stream.getvalue()

    def test_configure_from_settings(self):
        stream = io.StringIO()
        configure_from_settings(RunnerSettings(log_level="warning", json_logs=True), stream=stream)

        log = get_logger("cmdrunner.test")
        log.info("quiet")
        log.warning("loud")

        assert logging.getLogger().level == logging.WARNING
        lines = stream.getvalue().strip().splitlines()
        assert [json.loads(line)["event"] for line in lines] == ["loud"]


class TestLogOperation:
    """Test the operation context manager."""

    def test_success(self):
        with capture_logs() as logs:
            log = structlog.get_logger("cmdrunner.test")
            with log_operation(log, "command.execute", command="ls"):
                pass

        events = [entry["event"] for entry in logs]
        assert events == ["command.execute.started", "command.execute.completed"]
        assert logs[1]["command"] == "ls"
        assert "duration_ms" in logs[1]

    def test_failure_is_logged_and_reraised(self):
        with capture_logs() as logs:
            log = structlog.get_logger("cmdrunner.test")
            with pytest.raises(ValueError):
                with log_operation(log, "command.execute"):
                    raise ValueError("boom")

        failed = logs[-1]
        assert failed["event"] == "command.execute.failed"
        assert failed["error"] == "boom"
        assert failed["error_type"] == "ValueError"
        assert failed["log_level"] == "error"

    def test_custom_level(self):
        with capture_logs() as logs:
            log = structlog.get_logger("cmdrunner.test")
            with log_operation(log, "setup", level="info"):
                pass

        assert {entry["log_level"] for entry in logs} == {"info"}
