"""Tests for ColoredFormatter."""

import logging
from io import StringIO
from unittest.mock import patch

import pytest

from voice_jukebox.utils.logging import (
    ANSI_DIM,
    ANSI_RESET,
    LEVEL_COLORS,
    ColoredFormatter,
)


def _make_record(level: int, message: str = "test") -> logging.LogRecord:
    return logging.LogRecord(
        name="voice_jukebox.test",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )


class _TtyStream(StringIO):
    def isatty(self) -> bool:
        return True


class TestColoredFormatter:
    """Tests for ANSI color formatting."""

    @staticmethod
    def _tty_formatter() -> ColoredFormatter:
        return ColoredFormatter("%(levelname)s | %(name)s | %(message)s", stream=_TtyStream())

    @pytest.mark.parametrize("level", sorted(LEVEL_COLORS))
    def test_color_applied_per_level(self, level: int):
        """Should apply the correct ANSI color code for each level."""
        with patch.dict("os.environ", clear=True):
            output = self._tty_formatter().format(_make_record(level))

        assert output.startswith(LEVEL_COLORS[level])
        assert ANSI_RESET in output

    def test_logger_name_dimmed(self):
        with patch.dict("os.environ", clear=True):
            output = self._tty_formatter().format(_make_record(logging.INFO))

        assert f"{ANSI_DIM}voice_jukebox.test{ANSI_RESET}" in output

    def test_no_color_when_no_color_env_set(self):
        """Should not apply colors when NO_COLOR env var is set."""
        with patch.dict("os.environ", {"NO_COLOR": "1"}):
            output = self._tty_formatter().format(_make_record(logging.INFO))

        assert "\033[" not in output

    def test_no_color_when_stream_not_tty(self):
        """Should not apply colors when stream is not a TTY."""
        fmt = ColoredFormatter("%(levelname)s | %(message)s", stream=StringIO())

        assert "\033[" not in fmt.format(_make_record(logging.ERROR))

    def test_force_color_overrides_detection(self):
        fmt = ColoredFormatter("%(levelname)s", stream=StringIO(), force_color=True)

        assert LEVEL_COLORS[logging.INFO] in fmt.format(_make_record(logging.INFO))

    def test_force_color_off(self):
        fmt = ColoredFormatter("%(levelname)s", stream=_TtyStream(), force_color=False)

        assert fmt.format(_make_record(logging.INFO)) == "INFO"

    def test_original_record_not_mutated(self):
        """Should not mutate the original LogRecord."""
        record = _make_record(logging.WARNING, "hello world")

        with patch.dict("os.environ", clear=True):
            self._tty_formatter().format(record)

        assert record.levelname == "WARNING"
        assert record.name == "voice_jukebox.test"
