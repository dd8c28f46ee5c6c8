"""Tests for structured logging configuration."""

import json
import logging

import pytest

from tinygraph.core.logging import configure_logging, get_logger


class TestLoggingConfig:
    def test_get_logger_returns_logger(self) -> None:
        logger = get_logger("test")
        assert hasattr(logger, "info")
        assert hasattr(logger, "error")
        assert hasattr(logger, "bind")

    def test_logger_outputs_structured(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=True)
        logger = get_logger("test")

        logger.info("test message", key="value")

        log_line = capsys.readouterr().out.strip().split("\n")[-1]
        data = json.loads(log_line)
        assert data["event"] == "test message"
        assert data["key"] == "value"
        assert data["level"] == "info"

    def test_logger_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=False)
        logger = get_logger("test")

        logger.info("test message", key="value")

        captured = capsys.readouterr()
        assert "test message" in captured.out
        assert not captured.out.strip().startswith("{")

    def test_level_applied_to_root(self) -> None:
        configure_logging(level="warning")
        assert logging.getLogger().level == logging.WARNING

    def test_unknown_level_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging(level="chatty")

    def test_noisy_third_party_loggers_silenced(self) -> None:
        configure_logging(level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG
        for name in ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine"):
            assert logging.getLogger(name).getEffectiveLevel() >= logging.WARNING

    def test_stdlib_loggers_emit_json_when_json_output_enabled(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=True)

        logging.getLogger("test.stdlib.module").info("message from stdlib logger")

        log_line = capsys.readouterr().out.strip().split("\n")[-1]
        data = json.loads(log_line)
        assert data["event"] == "message from stdlib logger"
        assert "timestamp" in data

    def test_graph_errors_reach_configured_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        from tinygraph.engine import Graph
        from tests.conftest import FailingNode

        configure_logging(json_output=True)
        Graph("json").node("A", FailingNode(RuntimeError("kaboom"))).set_start("A").run_sync()

        lines = [json.loads(line) for line in capsys.readouterr().out.strip().split("\n") if line]
        errors = [line for line in lines if line["event"] == "graph_execution_error"]
        assert len(errors) == 1
        assert errors[0]["graph"] == "json"
        assert errors[0]["error"] == "kaboom"
        assert "RuntimeError" in errors[0]["exception"]
