"""
Unit Tests for Bot Lifecycle

Tests for src/voice_jukebox/infrastructure/discord/bot.py:

- Initialization: intents, prefix, container wiring
- setup_hook: container init, cogs, web server start, optional command sync
- Cog loading with individual failures
- Command sync to the configured guild or globally
- Global slash-command error handler
- on_ready: auto-join of the configured voice channel and idle status
- close: voice disconnect and container shutdown
"""

from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import discord
import pytest

from voice_jukebox.infrastructure.discord.bot import COGS, JukeboxBot, create_bot


@pytest.fixture
def mock_settings():
    settings = MagicMock()
    settings.discord.command_prefix = "!"
    settings.discord.sync_on_startup = False
    settings.discord.guild_id = None
    settings.discord.voice_channel_id = None
    settings.web.enabled = False
    settings.playback.status_idle_text = "Idle"
    return settings


@pytest.fixture
def mock_container():
    container = MagicMock()
    container.initialize = AsyncMock()
    container.shutdown = AsyncMock()
    container.set_bot = MagicMock()
    container.web_server.start = AsyncMock()
    container.status_reporter.set_status_text = AsyncMock()
    container.channel_membership.current_channel_id.return_value = None
    container.channel_membership.join = AsyncMock(return_value=True)
    container.presence_tracker.resync = AsyncMock()
    return container


@pytest.fixture
def bot(mock_container, mock_settings):
    return JukeboxBot(container=mock_container, settings=mock_settings)


# =============================================================================
# Initialization
# =============================================================================


class TestBotInitialization:
    @pytest.mark.asyncio
    async def test_intents(self, bot):
        assert bot.intents.voice_states is True
        assert bot.intents.guilds is True
        assert bot.intents.members is True

    @pytest.mark.asyncio
    async def test_prefix_and_help(self, mock_container, mock_settings):
        mock_settings.discord.command_prefix = "?"

        bot = JukeboxBot(container=mock_container, settings=mock_settings)

        assert bot.command_prefix == "?"
        assert bot.help_command is None

    @pytest.mark.asyncio
    async def test_container_wiring(self, bot, mock_container, mock_settings):
        assert bot.container is mock_container
        assert bot.settings is mock_settings
        mock_container.set_bot.assert_called_once_with(bot)
        assert not bot._shutdown_event.is_set()

    @pytest.mark.asyncio
    async def test_create_bot(self, mock_container, mock_settings):
        bot = create_bot(mock_container, mock_settings)

        assert isinstance(bot, JukeboxBot)
        assert bot.container is mock_container


# =============================================================================
# setup_hook
# =============================================================================


class TestSetupHook:
    @pytest.mark.asyncio
    async def test_initializes_container_and_loads_cogs(self, bot, mock_container):
        with patch.object(bot, "_load_cogs", new_callable=AsyncMock) as mock_load:
            await bot.setup_hook()

        mock_container.initialize.assert_awaited_once()
        mock_load.assert_awaited_once()
        assert bot.tree.on_error == bot._on_app_command_error

    @pytest.mark.asyncio
    async def test_container_failure_propagates(self, bot, mock_container):
        mock_container.initialize.side_effect = RuntimeError("db locked")

        with patch.object(bot, "_load_cogs", new_callable=AsyncMock) as mock_load:
            with pytest.raises(RuntimeError, match="db locked"):
                await bot.setup_hook()

        mock_load.assert_not_called()

    @pytest.mark.asyncio
    async def test_web_server_started_when_enabled(self, bot, mock_container, mock_settings):
        mock_settings.web.enabled = True

        with patch.object(bot, "_load_cogs", new_callable=AsyncMock):
            await bot.setup_hook()

        mock_container.web_server.start.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_web_server_bind_failure_is_logged(self, bot, mock_container, mock_settings):
        mock_settings.web.enabled = True
        mock_container.web_server.start.side_effect = OSError("address in use")

        with patch.object(bot, "_load_cogs", new_callable=AsyncMock):
            await bot.setup_hook()

    @pytest.mark.asyncio
    async def test_web_server_disabled(self, bot, mock_container):
        with patch.object(bot, "_load_cogs", new_callable=AsyncMock):
            await bot.setup_hook()

        mock_container.web_server.start.assert_not_called()

    @pytest.mark.asyncio
    async def test_sync_on_startup(self, bot, mock_settings):
        mock_settings.discord.sync_on_startup = True

        with (
            patch.object(bot, "_load_cogs", new_callable=AsyncMock),
            patch.object(bot, "_sync_commands", new_callable=AsyncMock) as mock_sync,
        ):
            await bot.setup_hook()

        mock_sync.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_sync_failure_is_logged(self, bot, mock_settings):
        mock_settings.discord.sync_on_startup = True
        error = discord.HTTPException(MagicMock(status=429, reason="Too Many Requests"), "slow")

        with (
            patch.object(bot, "_load_cogs", new_callable=AsyncMock),
            patch.object(bot, "_sync_commands", new_callable=AsyncMock, side_effect=error),
        ):
            await bot.setup_hook()


class TestLoadCogs:
    @pytest.mark.asyncio
    async def test_loads_every_cog(self, bot):
        with patch.object(bot, "load_extension", new_callable=AsyncMock) as mock_load:
            await bot._load_cogs()

        assert [c.args[0] for c in mock_load.await_args_list] == list(COGS)

    @pytest.mark.asyncio
    async def test_continues_after_failure(self, bot):
        with patch.object(
            bot, "load_extension", new_callable=AsyncMock, side_effect=[Exception("bad"), None]
        ) as mock_load:
            await bot._load_cogs()

        assert mock_load.await_count == len(COGS)


class TestSyncCommands:
    @pytest.mark.asyncio
    async def test_global_sync(self, bot):
        with patch.object(bot.tree, "sync", new_callable=AsyncMock, return_value=[]) as mock_sync:
            await bot._sync_commands()

        mock_sync.assert_awaited_once_with()

    @pytest.mark.asyncio
    async def test_guild_sync(self, bot, mock_settings):
        mock_settings.discord.guild_id = 111111

        with (
            patch.object(bot.tree, "copy_global_to") as mock_copy,
            patch.object(bot.tree, "sync", new_callable=AsyncMock, return_value=[]) as mock_sync,
        ):
            await bot._sync_commands()

        assert mock_copy.call_args.kwargs["guild"].id == 111111
        assert mock_sync.call_args.kwargs["guild"].id == 111111


# =============================================================================
# Error handler
# =============================================================================


class TestAppCommandErrorHandler:
    @staticmethod
    def _interaction(done: bool = False) -> MagicMock:
        interaction = MagicMock()
        interaction.command.name = "play"
        interaction.response.is_done.return_value = done
        interaction.response.send_message = AsyncMock()
        interaction.followup.send = AsyncMock()
        return interaction

    @pytest.mark.asyncio
    async def test_sends_ephemeral_error(self, bot):
        interaction = self._interaction()

        await bot._on_app_command_error(interaction, ValueError("boom"))

        interaction.response.send_message.assert_awaited_once()
        assert "boom" in interaction.response.send_message.call_args[0][0]
        assert interaction.response.send_message.call_args.kwargs["ephemeral"] is True

    @pytest.mark.asyncio
    async def test_followup_after_response(self, bot):
        interaction = self._interaction(done=True)

        await bot._on_app_command_error(interaction, ValueError("boom"))

        interaction.followup.send.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unwraps_original(self, bot):
        interaction = self._interaction()
        wrapper = Exception("wrapper")
        wrapper.original = ValueError("inner")

        await bot._on_app_command_error(interaction, wrapper)

        assert "inner" in interaction.response.send_message.call_args[0][0]

    @pytest.mark.asyncio
    async def test_send_failure_is_swallowed(self, bot):
        interaction = self._interaction()
        interaction.response.send_message.side_effect = discord.HTTPException(
            MagicMock(status=404, reason="Not Found"), "Unknown interaction"
        )

        await bot._on_app_command_error(interaction, ValueError("boom"))


# =============================================================================
# on_ready
# =============================================================================


class TestOnReady:
    @pytest.fixture(autouse=True)
    def _user(self, bot):
        with patch.object(type(bot), "user", PropertyMock(return_value=MagicMock(id=1000))):
            yield

    @pytest.mark.asyncio
    async def test_sets_idle_status(self, bot, mock_container):
        await bot.on_ready()

        mock_container.status_reporter.set_status_text.assert_awaited_once_with("Idle")
        mock_container.channel_membership.join.assert_not_called()

    @pytest.mark.asyncio
    async def test_joins_configured_channel(self, bot, mock_container, mock_settings):
        mock_settings.discord.voice_channel_id = 10

        await bot.on_ready()

        mock_container.channel_membership.join.assert_awaited_once_with(10)
        mock_container.presence_tracker.resync.assert_awaited_once_with(10)

    @pytest.mark.asyncio
    async def test_already_in_configured_channel(self, bot, mock_container, mock_settings):
        mock_settings.discord.voice_channel_id = 10
        mock_container.channel_membership.current_channel_id.return_value = 10

        await bot.on_ready()

        mock_container.channel_membership.join.assert_not_called()

    @pytest.mark.asyncio
    async def test_join_failure_skips_resync(self, bot, mock_container, mock_settings):
        mock_settings.discord.voice_channel_id = 10
        mock_container.channel_membership.join.return_value = False

        await bot.on_ready()

        mock_container.presence_tracker.resync.assert_not_called()
        mock_container.status_reporter.set_status_text.assert_awaited_once()


# =============================================================================
# close
# =============================================================================


class TestBotClose:
    @pytest.mark.asyncio
    async def test_disconnects_voice_and_shuts_down(self, bot, mock_container):
        vc = AsyncMock()

        with patch.object(type(bot), "voice_clients", PropertyMock(return_value=[vc])):
            await bot.close()

        vc.disconnect.assert_awaited_once_with(force=True)
        mock_container.shutdown.assert_awaited_once()
        assert bot._shutdown_event.is_set()

    @pytest.mark.asyncio
    async def test_voice_disconnect_error(self, bot, mock_container):
        vc = AsyncMock()
        vc.disconnect.side_effect = discord.ClientException("Not connected")

        with patch.object(type(bot), "voice_clients", PropertyMock(return_value=[vc])):
            await bot.close()

        mock_container.shutdown.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_container_shutdown_error(self, bot, mock_container):
        mock_container.shutdown.side_effect = RuntimeError("stuck")

        with patch.object(type(bot), "voice_clients", PropertyMock(return_value=[])):
            await bot.close()

        assert bot._shutdown_event.is_set()
