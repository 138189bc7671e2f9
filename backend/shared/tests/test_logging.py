import json
import logging
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from unittest.mock import patch

import pytest
import structlog

from shared.logging import _serialize_enums, resolve_json_mode, resolve_log_level, setup_logging


@pytest.fixture(autouse=True)
def _cleanup_root_logger():
    """Close and remove all handlers from the root logger after each test."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)


@pytest.fixture(autouse=True)
def _allow_file_logging():
    """Disable the _is_test guard so logging tests can create real file handlers."""
    with patch("shared.logging._is_test", return_value=False):
        yield


class TestSetupLogging:
    def test_configures_stdout_handler(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        setup_logging()
        root = logging.getLogger()

        assert root.level == logging.INFO
        assert len(root.handlers) == 1

        handler = root.handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter)

    def test_configures_file_handler_in_log_dir(self, tmp_path):
        log_dir = tmp_path / "ballsort"
        setup_logging(log_dir=log_dir)
        root = logging.getLogger()

        assert len(root.handlers) == 2

        stream_handler = root.handlers[0]
        file_handler = root.handlers[1]
        assert isinstance(stream_handler, logging.StreamHandler)
        assert isinstance(file_handler, logging.FileHandler)
        assert Path(file_handler.baseFilename).parent == log_dir

    def test_log_file_has_datetime_in_name(self, tmp_path):
        fixed_time = datetime(2025, 3, 15, 10, 30, 45, tzinfo=UTC)
        with patch("shared.logging.datetime") as mock_dt:
            mock_dt.now.return_value = fixed_time
            log_path = setup_logging(log_dir=tmp_path / "ballsort")

        assert log_path is not None
        assert log_path.name == "2025-03-15_10-30-45.log"

    def test_returns_none_without_log_dir(self):
        assert setup_logging() is None

    def test_no_file_handler_under_test_runner(self, tmp_path):
        with patch("shared.logging._is_test", return_value=True):
            result = setup_logging(log_dir=tmp_path / "ballsort")

        assert result is None
        assert not (tmp_path / "ballsort").exists()
        assert len(logging.getLogger().handlers) == 1

    def test_writes_to_file(self, tmp_path):
        log_path = setup_logging(log_dir=tmp_path / "ballsort")

        test_logger = structlog.get_logger("test.writes_to_file")
        test_logger.info("hello from test")

        assert log_path is not None
        assert "hello from test" in log_path.read_text()

    def test_stdlib_loggers_share_the_file(self, tmp_path):
        log_path = setup_logging(log_dir=tmp_path / "ballsort")

        logging.getLogger("test.stdlib").warning("plain stdlib %s", "record")

        assert log_path is not None
        assert "plain stdlib record" in log_path.read_text()

    def test_creates_log_directory(self, tmp_path):
        log_dir = tmp_path / "nested" / "dir"
        log_path = setup_logging(log_dir=str(log_dir))

        structlog.get_logger("test.creates_log_dir").info("nested log")

        assert log_dir.exists()
        assert log_path is not None
        assert "nested log" in log_path.read_text()

    def test_clears_existing_handlers_on_repeated_calls(self):
        setup_logging()
        setup_logging()

        assert len(logging.getLogger().handlers) == 1

    def test_custom_log_level(self):
        setup_logging(level=logging.WARNING)

        assert logging.getLogger().level == logging.WARNING

    def test_quiets_uvicorn_access_log(self):
        setup_logging()

        assert logging.getLogger("uvicorn.access").level == logging.WARNING

    def test_json_mode_produces_valid_json(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        log_path = setup_logging(log_dir=tmp_path / "ballsort")

        structlog.contextvars.bind_contextvars(session_id="abc123def456")
        test_logger = structlog.get_logger("test.json")
        test_logger.info("json test event", extra_field="value")
        structlog.contextvars.clear_contextvars()

        assert log_path is not None
        lines = log_path.read_text().strip().splitlines()
        assert len(lines) >= 1
        parsed = json.loads(lines[0])
        assert parsed["event"] == "json test event"
        assert parsed["session_id"] == "abc123def456"
        assert parsed["extra_field"] == "value"
        assert parsed["level"] == "info"

    def test_console_mode_produces_readable_output(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "console")
        log_path = setup_logging(log_dir=tmp_path / "ballsort")

        structlog.get_logger("test.console").info("console test event")

        assert log_path is not None
        assert "console test event" in log_path.read_text()


class TestResolveEnv:
    @pytest.mark.parametrize(("value", "expected"), [("debug", logging.DEBUG), ("ERROR", logging.ERROR)])
    def test_log_level_from_env(self, monkeypatch, value, expected):
        monkeypatch.setenv("LOG_LEVEL", value)
        assert resolve_log_level() == expected

    def test_log_level_defaults_to_info(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert resolve_log_level() == logging.INFO

    def test_invalid_log_level_raises(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "bogus")
        with pytest.raises(ValueError, match="Invalid LOG_LEVEL"):
            setup_logging()

    @pytest.mark.parametrize(("value", "expected"), [("json", True), ("JSON", True), ("console", False), ("", False)])
    def test_log_format_from_env(self, monkeypatch, value, expected):
        monkeypatch.setenv("LOG_FORMAT", value)
        assert resolve_json_mode() is expected

    def test_invalid_log_format_raises(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "invalid_value")
        with pytest.raises(ValueError, match="Invalid LOG_FORMAT"):
            setup_logging()


class TestSerializeEnums:
    class _Rule(Enum):
        ANY = "any"
        MATCH_TOP = "match_top"

    def test_replaces_enum_with_value(self):
        event_dict = {"move_rule": self._Rule.MATCH_TOP, "msg": "hello"}
        result = _serialize_enums(None, "", event_dict)
        assert result["move_rule"] == "match_top"
        assert result["msg"] == "hello"

    def test_leaves_non_enum_values_unchanged(self):
        event_dict = {"count": 42, "name": "test"}
        result = _serialize_enums(None, "", event_dict)
        assert result == {"count": 42, "name": "test"}
