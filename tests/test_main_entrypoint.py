"""
Tests for main.py - Main Entry Point

Tests for the main entry point including:
- Logging configuration from logging_config.json and its fallback
- Token validation
- Container and bot creation
- Exit codes for clean stops, interrupts and crashes
"""

import json
import logging
from unittest.mock import MagicMock, patch

import pytest
from pydantic import SecretStr

from voice_jukebox.config.settings import Settings, WebSettings
from voice_jukebox.main import (
    _LOGGING_CONFIG_PATH,
    apply_overrides,
    build_parser,
    describe,
    main,
    setup_logging,
)


@pytest.fixture
def mock_settings():
    settings = MagicMock()
    settings.discord.token = SecretStr("test_token_123")
    settings.log_level = "INFO"
    settings.environment = "test"
    return settings


@pytest.fixture
def patched_startup(mock_settings):
    """Patch settings loading, logging setup, container and bot creation."""
    mock_bot = MagicMock()
    with (
        patch("voice_jukebox.config.settings.get_settings", return_value=mock_settings),
        patch("voice_jukebox.main.setup_logging"),
        patch("voice_jukebox.config.container.create_container") as mock_create_container,
        patch(
            "voice_jukebox.infrastructure.discord.bot.create_bot", return_value=mock_bot
        ) as mock_create_bot,
    ):
        yield {
            "bot": mock_bot,
            "create_container": mock_create_container,
            "create_bot": mock_create_bot,
        }


class TestLoggingSetup:
    """Tests for logging configuration."""

    def test_dictconfig_called_when_json_exists(self, tmp_path):
        config = {"version": 1, "disable_existing_loggers": False}
        path = tmp_path / "logging.json"
        path.write_text(json.dumps(config))

        with patch("logging.config.dictConfig") as mock_dc:
            setup_logging(config_path=path)

        mock_dc.assert_called_once_with(config)

    def test_fallback_to_basicconfig_when_json_missing(self, tmp_path):
        with patch("logging.basicConfig") as mock_bc:
            setup_logging(config_path=tmp_path / "missing.json")

        mock_bc.assert_called_once()
        assert mock_bc.call_args[1]["level"] == logging.INFO

    def test_fallback_to_basicconfig_when_json_malformed(self, tmp_path):
        path = tmp_path / "logging.json"
        path.write_text("{invalid json")

        with patch("logging.basicConfig") as mock_bc:
            setup_logging(config_path=path)

        mock_bc.assert_called_once()

    def test_root_logger_level_overridden(self, tmp_path):
        path = tmp_path / "logging.json"
        path.write_text(json.dumps({"version": 1, "disable_existing_loggers": False}))
        root = logging.getLogger()
        previous = root.level

        try:
            setup_logging("DEBUG", config_path=path)
            assert root.level == logging.DEBUG
        finally:
            root.setLevel(previous)

    def test_shipped_config_quiets_library_loggers(self):
        config = json.loads(_LOGGING_CONFIG_PATH.read_text())

        for name in ("discord", "aiohttp.access", "httpx", "aiosqlite"):
            assert config["loggers"][name]["level"] == "WARNING"
        assert config["formatters"]["console"]["()"].endswith("ColoredFormatter")


class TestMainFunction:
    """Tests for main entry point function."""

    def test_main_returns_error_without_token(self, mock_settings):
        mock_settings.discord.token = SecretStr("")

        with (
            patch("voice_jukebox.config.settings.get_settings", return_value=mock_settings),
            patch("voice_jukebox.main.setup_logging"),
            patch("voice_jukebox.infrastructure.discord.bot.create_bot") as mock_create_bot,
        ):
            assert main([]) == 1

        mock_create_bot.assert_not_called()

    def test_main_successful_run(self, patched_startup):
        assert main([]) == 0

        patched_startup["bot"].run_with_graceful_shutdown.assert_called_once_with(
            "test_token_123"
        )

    def test_main_wires_container_and_bot(self, patched_startup, mock_settings):
        main([])

        patched_startup["create_container"].assert_called_once_with(mock_settings)
        patched_startup["create_bot"].assert_called_once_with(
            patched_startup["create_container"].return_value, mock_settings
        )

    def test_main_handles_keyboard_interrupt(self, patched_startup):
        """Should return 0 on KeyboardInterrupt (graceful shutdown)."""
        patched_startup["bot"].run_with_graceful_shutdown.side_effect = KeyboardInterrupt()

        assert main([]) == 0

    def test_main_handles_exception(self, patched_startup):
        """Should return error code on unhandled exception."""
        patched_startup["bot"].run_with_graceful_shutdown.side_effect = RuntimeError("crash")

        assert main([]) == 1


class TestCommandLine:
    """Tests for argument parsing and the settings overrides it applies."""

    @pytest.fixture
    def settings(self):
        return Settings(
            _env_file=None,
            environment="test",
            discord={"voice_channel_id": 42},
            web=WebSettings(port=9000, password=SecretStr("pw")),
        )

    def test_defaults(self):
        args = build_parser().parse_args([])

        assert args.log_level is None
        assert args.log_config == _LOGGING_CONFIG_PATH
        assert not args.no_web
        assert not args.check

    def test_log_level_is_case_insensitive(self):
        assert build_parser().parse_args(["-l", "debug"]).log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--log-level", "LOUD"])

    def test_no_overrides_keeps_instance(self, settings):
        assert apply_overrides(settings, build_parser().parse_args([])) is settings

    def test_overrides(self, settings):
        args = build_parser().parse_args(["--no-web", "--log-level", "warning"])

        overridden = apply_overrides(settings, args)

        assert overridden.web.enabled is False
        assert overridden.web.port == 9000
        assert overridden.log_level == "WARNING"
        assert settings.web.enabled is True

    def test_describe(self, settings):
        lines = describe(settings)

        assert "environment: test" in lines
        assert "providers: netease, youtube (default netease)" in lines
        assert "voice channel: 42" in lines
        assert "web API: http://0.0.0.0:9000 (password protected)" in lines

    def test_describe_web_disabled(self, settings):
        args = build_parser().parse_args(["--no-web"])

        assert describe(apply_overrides(settings, args))[-1] == "web API: disabled"

    def test_check_prints_summary_without_starting(self, settings, capsys):
        with (
            patch("voice_jukebox.config.settings.get_settings", return_value=settings),
            patch("voice_jukebox.infrastructure.discord.bot.create_bot") as mock_create_bot,
        ):
            assert main(["--check"]) == 0

        assert "providers: netease, youtube (default netease)" in capsys.readouterr().out
        mock_create_bot.assert_not_called()

    def test_invalid_settings(self, capsys):
        def broken():
            return Settings(_env_file=None, log_level="LOUD")

        with patch("voice_jukebox.config.settings.get_settings", side_effect=broken):
            assert main(["--check"]) == 2

        assert "Invalid settings" in capsys.readouterr().err

    def test_no_web_reaches_the_bot(self, patched_startup, mock_settings):
        main(["--no-web"])

        bot_settings = patched_startup["create_bot"].call_args[0][1]
        mock_settings.model_copy.assert_called_once()
        assert bot_settings is mock_settings.model_copy.return_value
