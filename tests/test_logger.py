"""Tests for the console log formatting."""

import logging

import pytest

from utils.logger import ColoredFormatter, log_error, log_node_start, logger


def make_record(level, message):
    return logging.LogRecord("DiscrepancyAnalyser", level, __file__, 1, message, None, None)


class TestColoredFormatter:
    @pytest.mark.parametrize("level,emoji", [
        (logging.DEBUG, "🔍"),
        (logging.INFO, "✅"),
        (logging.WARNING, "⚠️"),
        (logging.ERROR, "❌"),
    ])
    def test_level_emoji_and_color(self, level, emoji):
        line = ColoredFormatter().format(make_record(level, "loaded"))
        name = logging.getLevelName(level)
        assert f"{emoji} {name}: loaded" in line
        assert line.startswith(ColoredFormatter.COLORS[name])
        assert line.endswith(ColoredFormatter.RESET)


class TestHelpers:
    def test_node_and_error_prefixes(self, caplog):
        caplog.set_level(logging.DEBUG, logger=logger.name)
        log_node_start("load_snapshot", source="db")
        log_error("Row source unavailable", RuntimeError("down"))

        messages = [r.getMessage() for r in caplog.records]
        assert "🚀 NODE START: load_snapshot" in messages
        assert "   └─ source: db" in messages
        assert "❌ ERROR: Row source unavailable" in messages
        assert "   └─ RuntimeError: down" in messages
