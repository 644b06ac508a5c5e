"""Console log formatting.

``ColoredFormatter`` is referenced from ``logging_config.json`` through the
``"()"`` factory key, so every constructor argument can be set there.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

ANSI_RESET = "\033[0m"
ANSI_DIM = "\033[2m"

LEVEL_COLORS: dict[int, str] = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}


class ColoredFormatter(logging.Formatter):
    """Colors the level name and dims the logger name on terminals.

    ``force_color`` overrides detection. Left at ``None``, color is used only
    when ``NO_COLOR`` is unset and the target stream is a TTY.
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        stream: TextIO | None = None,
        force_color: bool | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)  # type: ignore[arg-type]
        self.stream = stream
        self.force_color = force_color

    @property
    def use_color(self) -> bool:
        if self.force_color is not None:
            return self.force_color
        if "NO_COLOR" in os.environ:
            return False
        stream = self.stream or sys.stdout
        isatty = getattr(stream, "isatty", None)
        return bool(isatty and isatty())

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_color:
            return super().format(record)

        # other handlers share the record, so decorate a copy
        colored = logging.makeLogRecord(record.__dict__)
        level_color = LEVEL_COLORS.get(record.levelno, "")
        colored.levelname = f"{level_color}{record.levelname}{ANSI_RESET}"
        colored.name = f"{ANSI_DIM}{record.name}{ANSI_RESET}"
        return super().format(colored)
