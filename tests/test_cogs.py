"""
Unit Tests for the Discord Cogs

Tests for:
- EventCog: translating voice state updates into presence events
- EventCog: resync on ready and resume
- JukeboxCog: every slash command funnels through JukeboxService.run
- JukeboxCog: status, playlist and provider embeds
- Cog setup() functions
"""

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest
from discord import app_commands
from discord.ext import commands

from voice_jukebox.application.commands.command_result import CommandResult, CommandStatus
from voice_jukebox.application.queries.playback_status import (
    PlaybackStatus,
    ProviderStatus,
    TrackInfo,
)
from voice_jukebox.domain.shared.constants import QueueConstants
from voice_jukebox.domain.shared.events import (
    MemberEnteredChannel,
    MemberLeftChannel,
    MemberMovedChannel,
)
from voice_jukebox.domain.shared.messages import DiscordUIMessages, ErrorMessages
from voice_jukebox.infrastructure.discord.cogs import event_cog, jukebox_cog
from voice_jukebox.infrastructure.discord.cogs.event_cog import EventCog
from voice_jukebox.infrastructure.discord.cogs.jukebox_cog import JukeboxCog

GUILD_ID = 111111111
BOT_ID = 888888888

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mock_bot():
    bot = MagicMock(spec=commands.Bot)
    bot.user = MagicMock()
    bot.user.id = BOT_ID
    bot.add_cog = AsyncMock()
    return bot


@pytest.fixture
def mock_service():
    service = MagicMock()

    async def run(operation):
        return await operation

    service.run = AsyncMock(side_effect=run)
    for name in (
        "play_text",
        "add_text",
        "playlist_text",
        "album_text",
        "clear_playlist",
        "set_mode",
        "play_next_music",
        "start_playback",
        "stop",
        "set_paused",
        "login",
        "move_to",
        "reload",
    ):
        setattr(service, name, AsyncMock(return_value=CommandResult.success("done")))
    service.get_provider_statuses = AsyncMock(return_value=[])
    return service


@pytest.fixture
def mock_container(mock_service):
    container = MagicMock()
    container.jukebox_service = mock_service
    container.settings.discord.guild_id = GUILD_ID
    container.event_bus.publish = AsyncMock()
    container.presence_tracker.resync = AsyncMock()
    return container


@pytest.fixture
def mock_interaction():
    """Create a mock Discord Interaction."""
    interaction = MagicMock(spec=discord.Interaction)
    interaction.response = MagicMock()
    interaction.response.is_done.return_value = False
    interaction.response.send_message = AsyncMock()
    interaction.response.defer = AsyncMock(
        side_effect=lambda **_: interaction.response.is_done.configure_mock(return_value=True)
    )
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()

    interaction.guild = MagicMock()
    interaction.guild.id = GUILD_ID

    member = MagicMock(spec=discord.Member)
    member.id = 333333333
    member.voice = MagicMock()
    member.voice.channel = MagicMock()
    member.voice.channel.id = 444444444
    member.voice.channel.name = "Lounge"
    interaction.user = member

    return interaction


@pytest.fixture
def events(mock_bot, mock_container):
    return EventCog(mock_bot, mock_container)


@pytest.fixture
def jukebox(mock_bot, mock_container):
    return JukeboxCog(mock_bot, mock_container)


def _member(member_id: int = 5, *, bot: bool = False, guild_id: int = GUILD_ID) -> MagicMock:
    member = MagicMock(spec=discord.Member)
    member.id = member_id
    member.bot = bot
    member.guild = MagicMock()
    member.guild.id = guild_id
    return member


def _state(channel_id: int | None) -> MagicMock:
    state = MagicMock(spec=discord.VoiceState)
    if channel_id is None:
        state.channel = None
    else:
        state.channel = MagicMock()
        state.channel.id = channel_id
    return state


def _sent_message(interaction) -> str:
    """Text of the single ephemeral reply, whichever path sent it."""
    if interaction.followup.send.await_count:
        return interaction.followup.send.call_args[0][0]
    return interaction.response.send_message.call_args[0][0]


# =============================================================================
# EventCog: voice state translation
# =============================================================================


class TestVoiceStateTranslation:
    def test_enter(self, events):
        event = events._translate(_member(), _state(None), _state(10))

        assert isinstance(event, MemberEnteredChannel)
        assert (event.member_id, event.channel_id) == (5, 10)

    def test_leave(self, events):
        event = events._translate(_member(), _state(10), _state(None))

        assert isinstance(event, MemberLeftChannel)
        assert event.channel_id == 10

    def test_move(self, events):
        event = events._translate(_member(), _state(10), _state(20))

        assert isinstance(event, MemberMovedChannel)
        assert (event.source_channel_id, event.target_channel_id) == (10, 20)

    def test_same_channel_is_ignored(self, events):
        """Mute and deafen updates keep the channel."""
        assert events._translate(_member(), _state(10), _state(10)) is None

    def test_other_bots_are_ignored(self, events):
        assert events._translate(_member(77, bot=True), _state(None), _state(10)) is None

    def test_own_bot_is_translated(self, events):
        event = events._translate(_member(BOT_ID, bot=True), _state(10), _state(20))

        assert isinstance(event, MemberMovedChannel)

    def test_other_guild_is_ignored(self, events):
        assert events._translate(_member(guild_id=999), _state(None), _state(10)) is None

    def test_any_guild_when_unconfigured(self, events, mock_container):
        mock_container.settings.discord.guild_id = None

        assert events._translate(_member(guild_id=999), _state(None), _state(10)) is not None


class TestEventCogListeners:
    @pytest.mark.asyncio
    async def test_voice_update_publishes(self, events, mock_container):
        await events.on_voice_state_update(_member(), _state(None), _state(10))

        mock_container.event_bus.publish.assert_awaited_once()
        published = mock_container.event_bus.publish.call_args[0][0]
        assert isinstance(published, MemberEnteredChannel)

    @pytest.mark.asyncio
    async def test_irrelevant_update_not_published(self, events, mock_container):
        await events.on_voice_state_update(_member(), _state(10), _state(10))

        mock_container.event_bus.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_ready_resyncs(self, events, mock_container):
        await events.on_ready()

        mock_container.presence_tracker.resync.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_resumed_resyncs_every_time(self, events, mock_container):
        await events.on_resumed()
        await events.on_resumed()

        assert mock_container.presence_tracker.resync.await_count == 2
        assert events._resumed_logged_once


# =============================================================================
# JukeboxCog: queueing commands
# =============================================================================


class TestQueueCommands:
    @pytest.mark.asyncio
    async def test_play(self, jukebox, mock_service, mock_interaction):
        await jukebox.play.callback(jukebox, mock_interaction, "yt never gonna")

        mock_interaction.response.defer.assert_awaited_once_with(ephemeral=True, thinking=True)
        mock_service.play_text.assert_awaited_once_with(
            "yt never gonna", QueueConstants.TRACK_COMMAND_TOKENS
        )
        mock_service.run.assert_awaited_once()
        assert _sent_message(mock_interaction) == DiscordUIMessages.SUCCESS_PREFIX.format(
            message="done"
        )

    @pytest.mark.asyncio
    async def test_add(self, jukebox, mock_service, mock_interaction):
        await jukebox.add.callback(jukebox, mock_interaction, "wy song")

        mock_service.add_text.assert_awaited_once_with(
            "wy song", QueueConstants.TRACK_COMMAND_TOKENS
        )

    @pytest.mark.asyncio
    async def test_playlist_append(self, jukebox, mock_service, mock_interaction):
        await jukebox.playlist.callback(jukebox, mock_interaction, "wy 10 chill", True)

        mock_service.playlist_text.assert_awaited_once_with("wy 10 chill", append=True)

    @pytest.mark.asyncio
    async def test_album(self, jukebox, mock_service, mock_interaction):
        await jukebox.album.callback(jukebox, mock_interaction, "hits", False)

        mock_service.album_text.assert_awaited_once_with("hits", append=False)

    @pytest.mark.asyncio
    async def test_clear(self, jukebox, mock_service, mock_interaction):
        await jukebox.clear.callback(jukebox, mock_interaction)

        mock_service.clear_playlist.assert_awaited_once()
        mock_interaction.response.defer.assert_awaited_once_with(ephemeral=True)
        mock_interaction.followup.send.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_error_result_uses_error_prefix(self, jukebox, mock_service, mock_interaction):
        mock_service.play_text.return_value = CommandResult.error(
            CommandStatus.NOT_FOUND, "nothing found"
        )

        await jukebox.play.callback(jukebox, mock_interaction, "zzz")

        assert _sent_message(mock_interaction) == DiscordUIMessages.ERROR_PREFIX.format(
            message="nothing found"
        )


# =============================================================================
# JukeboxCog: playback commands
# =============================================================================


class TestPlaybackCommands:
    @pytest.mark.asyncio
    async def test_mode(self, jukebox, mock_service, mock_interaction):
        choice = app_commands.Choice(name="Random", value=2)

        await jukebox.mode.callback(jukebox, mock_interaction, choice)

        mock_service.set_mode.assert_awaited_once_with(2)
        mock_interaction.response.defer.assert_awaited_once_with(ephemeral=True)
        mock_interaction.followup.send.assert_awaited_once()
        mock_interaction.response.send_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_next(self, jukebox, mock_service, mock_interaction):
        await jukebox.next_track.callback(jukebox, mock_interaction)

        mock_service.play_next_music.assert_awaited_once()
        mock_interaction.followup.send.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_start(self, jukebox, mock_service, mock_interaction):
        await jukebox.start.callback(jukebox, mock_interaction)

        mock_service.start_playback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_stop(self, jukebox, mock_service, mock_interaction):
        await jukebox.stop.callback(jukebox, mock_interaction)

        mock_service.stop.assert_awaited_once()
        mock_interaction.response.defer.assert_awaited_once_with(ephemeral=True)
        mock_interaction.followup.send.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("command", "paused"), [("pause", True), ("resume", False)])
    async def test_pause_and_resume(self, jukebox, mock_service, mock_interaction, command, paused):
        handler = getattr(jukebox, command)

        await handler.callback(jukebox, mock_interaction)

        mock_service.set_paused.assert_awaited_once_with(paused)
        mock_interaction.response.defer.assert_awaited_once_with(ephemeral=True)
        mock_interaction.followup.send.assert_awaited_once()


# =============================================================================
# JukeboxCog: information commands
# =============================================================================


class TestInformationCommands:
    @pytest.mark.asyncio
    async def test_status_embed(self, jukebox, mock_service, mock_interaction):
        mock_service.get_status = MagicMock(
            return_value=PlaybackStatus(
                current=TrackInfo(id="1", name="Hello", author="Band", provider="netease"),
                upcoming=[TrackInfo(id="2", name="Next", author="", provider="netease")],
                mode="Random",
                mode_value=2,
                paused=True,
                listeners=3,
            )
        )

        await jukebox.status.callback(jukebox, mock_interaction)

        embed = mock_interaction.response.send_message.call_args.kwargs["embed"]
        fields = {field.name: field.value for field in embed.fields}
        assert fields[DiscordUIMessages.FIELD_NOW_PLAYING] == "Hello - Band"
        assert fields[DiscordUIMessages.FIELD_UP_NEXT] == "1. Next"
        assert fields[DiscordUIMessages.FIELD_MODE] == "Random"
        assert fields[DiscordUIMessages.FIELD_PAUSED] == "yes"
        assert fields[DiscordUIMessages.FIELD_LISTENERS] == "3"

    @pytest.mark.asyncio
    async def test_status_idle(self, jukebox, mock_service, mock_interaction):
        mock_service.get_status = MagicMock(
            return_value=PlaybackStatus(mode="Sequential", mode_value=0)
        )

        await jukebox.status.callback(jukebox, mock_interaction)

        embed = mock_interaction.response.send_message.call_args.kwargs["embed"]
        fields = {field.name: field.value for field in embed.fields}
        now_playing = fields[DiscordUIMessages.FIELD_NOW_PLAYING]
        assert now_playing == DiscordUIMessages.STATE_NOTHING_PLAYING
        assert DiscordUIMessages.FIELD_UP_NEXT not in fields

    @pytest.mark.asyncio
    async def test_list_empty(self, jukebox, mock_service, mock_interaction):
        mock_service.playlist_summary = MagicMock(return_value="")

        await jukebox.list_playlist.callback(jukebox, mock_interaction)

        assert _sent_message(mock_interaction) == DiscordUIMessages.STATE_PLAYLIST_EMPTY

    @pytest.mark.asyncio
    async def test_list_embed(self, jukebox, mock_service, mock_interaction):
        mock_service.playlist_summary = MagicMock(return_value="Chill Mix\n1. a")

        await jukebox.list_playlist.callback(jukebox, mock_interaction)

        embed = mock_interaction.response.send_message.call_args.kwargs["embed"]
        assert embed.description == "Chill Mix\n1. a"

    @pytest.mark.asyncio
    async def test_providers_embed(self, jukebox, mock_service, mock_interaction):
        mock_service.get_provider_statuses.return_value = [
            ProviderStatus(
                tag="netease",
                name="NetEase",
                enabled=True,
                aliases=["wy", "netease"],
                server="https://api.test",
                user_name="alice",
            ),
            ProviderStatus(tag="youtube", name="YouTube", enabled=False),
        ]

        await jukebox.providers.callback(jukebox, mock_interaction)

        embed = mock_interaction.followup.send.call_args.kwargs["embed"]
        first, second = embed.fields
        assert first.name == "NetEase (netease)"
        assert "enabled" in first.value and "alice" in first.value
        assert "disabled" in second.value
        assert DiscordUIMessages.NOT_LOGGED_IN in second.value


# =============================================================================
# JukeboxCog: administration commands
# =============================================================================


class TestAdministrationCommands:
    @pytest.mark.asyncio
    async def test_login_splits_args(self, jukebox, mock_service, mock_interaction):
        await jukebox.login.callback(jukebox, mock_interaction, "wy", "phone 123 secret")

        mock_service.login.assert_awaited_once_with("wy", ["phone", "123", "secret"])

    @pytest.mark.asyncio
    async def test_here_moves_to_member_channel(self, jukebox, mock_service, mock_interaction):
        await jukebox.here.callback(jukebox, mock_interaction)

        mock_service.move_to.assert_awaited_once_with(444444444, "Lounge")

    @pytest.mark.asyncio
    async def test_here_requires_voice(self, jukebox, mock_service, mock_interaction):
        mock_interaction.user.voice = None

        await jukebox.here.callback(jukebox, mock_interaction)

        mock_service.move_to.assert_not_called()
        assert _sent_message(mock_interaction) == DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE

    @pytest.mark.asyncio
    async def test_reload(self, jukebox, mock_service, mock_interaction):
        await jukebox.reload.callback(jukebox, mock_interaction)

        mock_service.reload.assert_awaited_once()


# =============================================================================
# setup()
# =============================================================================


class TestSetup:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("module", "cog_type"), [(event_cog, EventCog), (jukebox_cog, JukeboxCog)]
    )
    async def test_setup_adds_cog(self, mock_bot, mock_container, module, cog_type):
        mock_bot.container = mock_container

        await module.setup(mock_bot)

        mock_bot.add_cog.assert_awaited_once()
        assert isinstance(mock_bot.add_cog.call_args[0][0], cog_type)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("module", [event_cog, jukebox_cog])
    async def test_setup_without_container(self, module):
        bot = MagicMock(spec=[])

        with pytest.raises(RuntimeError, match=ErrorMessages.CONTAINER_NOT_FOUND):
            await module.setup(bot)
