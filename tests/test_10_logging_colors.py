"""Tests for logging color output."""
from __future__ import annotations

import logging
import os
from unittest.mock import patch

import pytest

from agent_memo.core.logging import colors
from agent_memo.core.logging.colors import Colors, colorize, get_tag_color, supports_color
from agent_memo.core.logging.formatters import ColoredConsoleFormatter


@pytest.fixture
def colors_on():
    original = colors.USE_COLORS
    colors.USE_COLORS = True
    yield
    colors.USE_COLORS = original


@pytest.fixture
def colors_off():
    original = colors.USE_COLORS
    colors.USE_COLORS = False
    yield
    colors.USE_COLORS = original


def _record(msg="memo_created", **extra):
    record = logging.LogRecord("agent-memo.test", logging.INFO, __file__, 1, msg, None, None)
    record.tag = extra.pop("tag", "INFO")
    record.request_id = extra.pop("request_id", "-")
    record.seconds = extra.pop("seconds", None)
    record.event = None
    record.extra_data = extra or None
    return record


class TestColorSupport:
    """Test color support detection."""

    def test_agent_memo_no_color(self):
        with patch.dict(os.environ, {"AGENT_MEMO_NO_COLOR": "1"}):
            assert supports_color() is False

    def test_no_color_standard_env(self):
        with patch.dict(os.environ, {"NO_COLOR": "1"}):
            assert supports_color() is False

    def test_non_tty(self):
        class Pipe:
            def isatty(self):
                return False

        env = {k: v for k, v in os.environ.items() if k not in ("NO_COLOR", "AGENT_MEMO_NO_COLOR")}
        with patch.dict(os.environ, env, clear=True), patch("sys.stdout", Pipe()):
            assert supports_color() is False

    def test_tty(self):
        class Tty:
            def isatty(self):
                return True

        env = {k: v for k, v in os.environ.items() if k not in ("NO_COLOR", "AGENT_MEMO_NO_COLOR")}
        with patch.dict(os.environ, env, clear=True), patch("sys.stdout", Tty()):
            assert supports_color() is True


class TestColorize:
    """Test ANSI color codes are applied correctly."""

    def test_enabled(self, colors_on):
        result = colorize("test", Colors.RED)
        assert result == f"{Colors.RED}test{Colors.RESET}"

    def test_disabled(self, colors_off):
        assert colorize("test", Colors.RED) == "test"


class TestTagColors:
    """Test that tags get correct colors."""

    @pytest.mark.parametrize(
        "tag,color",
        [
            ("SUCCESS", Colors.BRIGHT_GREEN),
            ("FAIL", Colors.BRIGHT_RED),
            ("ERROR", Colors.BRIGHT_RED),
            ("WARN", Colors.BRIGHT_YELLOW),
            ("INFO", Colors.BRIGHT_CYAN),
            ("debug", Colors.GRAY),
            ("OTHER", Colors.WHITE),
        ],
    )
    def test_tag_color(self, tag, color):
        assert get_tag_color(tag) == color


class TestConsoleFormatter:
    """Test ColoredConsoleFormatter output."""

    def test_plain_output(self, colors_off):
        line = ColoredConsoleFormatter().format(
            _record(tag="SUCCESS", request_id="abc123", seconds=1.5, voice="june", bytes=7818)
        )
        assert "[SUCCESS]" in line
        assert "(abc123)" in line
        assert "memo_created" in line
        assert "1.500s" in line
        assert "voice=june" in line
        assert "bytes=7818" in line
        assert "\033[" not in line

    def test_no_request_id_omitted(self, colors_off):
        line = ColoredConsoleFormatter().format(_record())
        assert "(-)" not in line

    def test_value_colors(self, colors_on):
        line = ColoredConsoleFormatter().format(_record(status=503, bytes=0, mode="paid-api"))
        assert f"{Colors.RED}status=503{Colors.RESET}" in line
        assert f"{Colors.RED}bytes=0{Colors.RESET}" in line
        assert f"{Colors.MAGENTA}mode=paid-api{Colors.RESET}" in line

    @pytest.mark.parametrize(
        "status,color",
        [(200, Colors.GREEN), (404, Colors.YELLOW), (500, Colors.RED), (None, Colors.RED)],
    )
    def test_status_color(self, status, color):
        assert ColoredConsoleFormatter()._value_color("status", status) == color

    @pytest.mark.parametrize(
        "seconds,color",
        [(0.05, Colors.GREEN), (0.5, Colors.YELLOW), (2.0, Colors.RED)],
    )
    def test_seconds_color(self, colors_on, seconds, color):
        line = ColoredConsoleFormatter().format(_record(seconds=seconds))
        assert f"{color}{seconds:.3f}s{Colors.RESET}" in line
