#!/usr/bin/env python3
"""Command-line entry point: load settings, configure logging, run the jukebox."""

from __future__ import annotations

import argparse
import json
import logging
import logging.config
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from voice_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from voice_jukebox.config.settings import Settings

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"
_BASIC_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_BASIC_DATEFMT = "%Y-%m-%d %H:%M:%S"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="voice-jukebox",
        description="Run the shared voice-channel jukebox and its HTTP control API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                      # Run with settings from .env and the environment
  %(prog)s --check              # Validate settings and print what would run
  %(prog)s --no-web -l DEBUG    # Discord only, verbose logging
        """,
    )
    parser.add_argument(
        "--log-level",
        "-l",
        type=str.upper,
        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        help="override LOG_LEVEL from the settings",
    )
    parser.add_argument(
        "--log-config",
        type=Path,
        default=_LOGGING_CONFIG_PATH,
        help="logging dictConfig JSON file (default: %(default)s)",
    )
    parser.add_argument(
        "--no-web",
        action="store_true",
        help="do not start the HTTP control API",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="validate settings, print a summary and exit",
    )
    return parser


def setup_logging(log_level: str = "INFO", config_path: Path = _LOGGING_CONFIG_PATH) -> None:
    """Apply the dictConfig file, or a plain console format if it cannot be used."""
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    try:
        config = json.loads(Path(config_path).read_text())
        logging.config.dictConfig(config)
    except (OSError, ValueError) as e:
        logging.basicConfig(level=level, format=_BASIC_FORMAT, datefmt=_BASIC_DATEFMT)
        logging.getLogger(__name__).warning(LogTemplates.LOGGING_CONFIG_FALLBACK, config_path, e)

    logging.getLogger().setLevel(level)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Fold command-line switches into the (frozen) settings."""
    update: dict[str, object] = {}
    if args.log_level:
        update["log_level"] = args.log_level
    if args.no_web:
        update["web"] = settings.web.model_copy(update={"enabled": False})
    return settings.model_copy(update=update) if update else settings


def describe(settings: Settings) -> list[str]:
    """One line per concern, for ``--check`` and the startup log."""
    enabled = [entry.tag for entry in settings.providers.entries if entry.enabled]
    web = "disabled"
    if settings.web.enabled:
        web = f"http://{settings.web.host}:{settings.web.port}"
        if settings.web.password.get_secret_value():
            web += " (password protected)"
    return [
        f"environment: {settings.environment}",
        f"providers: {', '.join(enabled) or 'none'} (default {settings.providers.default})",
        f"play mode: {settings.playback.play_mode.label}, auto-pause: "
        f"{'on' if settings.playback.auto_pause else 'off'}",
        f"voice channel: {settings.discord.voice_channel_id or 'not configured'}",
        f"web API: {web}",
    ]


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    from voice_jukebox.config.settings import get_settings

    try:
        settings = apply_overrides(get_settings(), args)
    except ValidationError as e:
        print(ErrorMessages.INVALID_SETTINGS.format(error=e), file=sys.stderr)
        return 2

    if args.check:
        print("\n".join(describe(settings)))
        return 0

    setup_logging(settings.log_level, args.log_config)
    logger = logging.getLogger(__name__)

    token_value = settings.discord.token.get_secret_value()
    if not token_value:
        logger.error(ErrorMessages.DISCORD_TOKEN_REQUIRED)
        return 1

    logger.info(LogTemplates.BOT_STARTING.format(environment=settings.environment))
    for line in describe(settings):
        logger.info(LogTemplates.BOT_CONFIG_LINE, line)

    from voice_jukebox.config.container import create_container
    from voice_jukebox.infrastructure.discord.bot import create_bot

    container = create_container(settings)
    bot = create_bot(container, settings)

    try:
        logger.info(LogTemplates.BOT_STARTING_RUN)
        bot.run_with_graceful_shutdown(token_value)
        logger.info(LogTemplates.BOT_STOPPED)
        return 0
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
        return 0
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return 1


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
