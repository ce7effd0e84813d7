"""Unit tests for logging infrastructure."""

import json
import logging
import sys

import pytest

from src.utils.logger import JSONFormatter, RichTextFormatter, get_logger, truncate_for_log


def make_record(msg: str = "Test message", level: int = logging.INFO, name: str = "test_logger", exc_info=None):
    return logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestJSONFormatter:
    """Test JSONFormatter produces valid JSON output."""

    def test_json_formatter_outputs_valid_json(self):
        """Test that JSONFormatter produces valid JSON."""
        parsed = json.loads(JSONFormatter().format(make_record()))

        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "test_logger"
        assert parsed["message"] == "Test message"
        assert "timestamp" in parsed

    def test_json_formatter_includes_exception_traceback(self):
        """Test that JSONFormatter includes exception traceback when present."""
        try:
            raise ValueError("Test error")
        except ValueError:
            record = make_record("Error occurred", logging.ERROR, exc_info=sys.exc_info())

        parsed = json.loads(JSONFormatter().format(record))

        assert "exception" in parsed
        assert "ValueError" in parsed["exception"]

    def test_json_formatter_includes_context_fields(self):
        """Test that identifier, provider and model extras are emitted."""
        record = make_record()
        record.identifier = "203.0.113.7"
        record.provider = "spoonacular"
        record.model = "gemini-2.5-flash"

        parsed = json.loads(JSONFormatter().format(record))

        assert parsed["identifier"] == "203.0.113.7"
        assert parsed["provider"] == "spoonacular"
        assert parsed["model"] == "gemini-2.5-flash"

    def test_json_formatter_omits_absent_context_fields(self):
        parsed = json.loads(JSONFormatter().format(make_record()))
        assert "identifier" not in parsed
        assert "model" not in parsed

    def test_json_formatter_ignores_unknown_extras(self):
        """Test that only the known context fields are copied."""
        record = make_record()
        record.session_id = "sess-456"

        parsed = json.loads(JSONFormatter().format(record))
        assert "session_id" not in parsed


class TestRichTextFormatter:
    """Test RichTextFormatter produces colored text output."""

    @pytest.mark.parametrize(
        "level,icon",
        [
            (logging.DEBUG, "🔍"),
            (logging.INFO, "ℹ️"),
            (logging.WARNING, "⚠️"),
            (logging.ERROR, "❌"),
        ],
    )
    def test_rich_text_formatter_includes_emoji_icon(self, level, icon):
        """Test that RichTextFormatter includes emoji icons for each level."""
        assert icon in RichTextFormatter().format(make_record(level=level))

    @pytest.mark.parametrize(
        "level,color",
        [
            (logging.DEBUG, "\033[36m"),
            (logging.INFO, "\033[32m"),
            (logging.WARNING, "\033[33m"),
            (logging.ERROR, "\033[31m"),
        ],
    )
    def test_rich_text_formatter_wraps_line_in_level_color(self, level, color):
        """Test that each level gets its ANSI color and the line ends with a reset."""
        output = RichTextFormatter().format(make_record(level=level))

        assert output.startswith(color)
        assert output.endswith("\033[0m")

    def test_rich_text_formatter_timestamp_format(self):
        record = make_record()
        record.created = 0.0

        output = RichTextFormatter().format(record)
        assert RichTextFormatter().formatTime(record, "%Y-%m-%d %H:%M:%S") in output

    def test_rich_text_formatter_includes_level_name_and_message(self):
        output = RichTextFormatter().format(make_record("Custom message", name="my_logger"))

        assert "INFO" in output
        assert "my_logger" in output
        assert "Custom message" in output

    def test_rich_text_formatter_appends_context(self):
        """Test that context extras are appended as key=value pairs."""
        record = make_record()
        record.identifier = "unknown"
        record.model = "gemini-2.5-flash-lite"

        output = RichTextFormatter().format(record)
        assert "[identifier=unknown model=gemini-2.5-flash-lite]" in output

    def test_rich_text_formatter_includes_exception_traceback(self):
        """Test that RichTextFormatter includes exception traceback."""
        try:
            raise RuntimeError("Test error")
        except RuntimeError:
            record = make_record("Error occurred", logging.ERROR, exc_info=sys.exc_info())

        output = RichTextFormatter().format(record)
        assert "RuntimeError" in output
        assert "Test error" in output


class TestGetLogger:
    """Test get_logger function."""

    @staticmethod
    def _fresh(name: str) -> None:
        if name in logging.Logger.manager.loggerDict:
            logging.getLogger(name).handlers.clear()

    def test_get_logger_returns_same_instance(self):
        """Test that get_logger returns the configured instance for the same name."""
        logger1 = get_logger("test_module_2")
        logger2 = get_logger("test_module_2")

        assert logger1 is logger2
        assert len(logger2.handlers) == 1

    def test_get_logger_respects_log_level_env(self, monkeypatch):
        self._fresh("test_level_logger")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        assert get_logger("test_level_logger").level == logging.DEBUG

    def test_invalid_log_level_defaults_to_info(self, monkeypatch):
        self._fresh("test_invalid_level")
        monkeypatch.setenv("LOG_LEVEL", "INVALID")

        assert get_logger("test_invalid_level").level == logging.INFO

    def test_get_logger_respects_log_type_json(self, monkeypatch):
        """Test that get_logger uses JSONFormatter with LOG_TYPE=json."""
        self._fresh("test_json_logger")
        monkeypatch.setenv("LOG_TYPE", "json")

        test_logger = get_logger("test_json_logger")
        assert isinstance(test_logger.handlers[0].formatter, JSONFormatter)

    def test_log_type_text_default(self, monkeypatch):
        """Test that LOG_TYPE defaults to text."""
        self._fresh("test_default_type")
        monkeypatch.delenv("LOG_TYPE", raising=False)

        test_logger = get_logger("test_default_type")
        assert isinstance(test_logger.handlers[0].formatter, RichTextFormatter)


class TestModuleLevelLogger:
    """Test module-level logger instance."""

    def test_logger_is_importable(self):
        from src.utils.logger import logger as imported_logger

        assert isinstance(imported_logger, logging.Logger)
        assert imported_logger.name == "supperclub"
        assert len(imported_logger.handlers) > 0

    def test_third_party_loggers_are_quiet(self):
        assert logging.getLogger("google.genai").level == logging.WARNING
        assert logging.getLogger("aiohttp").level == logging.WARNING


class TestTruncateForLog:
    """Test shortening of user-derived text for log lines."""

    def test_short_text_is_unchanged(self):
        assert truncate_for_log("hello world") == "hello world"

    def test_whitespace_is_collapsed(self):
        assert truncate_for_log("Dish: Tacos\nVibe:  Friends") == "Dish: Tacos Vibe: Friends"

    def test_long_text_is_cut_to_limit(self):
        result = truncate_for_log("x" * 200, limit=20)

        assert len(result) == 20
        assert result.endswith("…")
