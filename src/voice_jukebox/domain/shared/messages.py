"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Command / Resolver Errors
    EMPTY_COMMAND = "Invalid arguments: nothing to play"
    MISSING_QUERY = "Missing query"
    UNKNOWN_CONTENT_TYPE = "Unknown content type: {name}"
    DEFAULT_PROVIDER_MISSING = "Default provider '{tag}' is not available"
    UNKNOWN_PROVIDER_TAG = "Unknown provider tag: {tag}"

    # Reference / Mode Validation Errors
    REFERENCE_ID_REQUIRED = "A typed content reference needs an id"
    REFERENCE_ID_WITHOUT_TYPE = "A plain-text reference cannot carry an id"
    INVALID_PLAY_MODE = "Invalid play mode: {value}. Must be one of {valid}"

    # Provider Errors
    LOGIN_NOT_SUPPORTED = "{provider} does not support login"
    LOGIN_USAGE_NETEASE = "Usage: login cookie <cookie> | login phone <number> <password>"
    LOGIN_FAILED = "Login failed: {reason}"
    PROVIDER_REQUEST_FAILED = "{provider} request failed: {error}"

    # HTTP Boundary Errors
    UNAUTHORIZED = "Unauthorized"
    UNKNOWN_CONTROL_ACTION = "Unknown action: {action}"
    UNKNOWN_COMMAND_TYPE = "Unknown command type: {type}"
    UNKNOWN_SEARCH_TYPE = "Unknown search type: {type}"
    INVALID_JSON_BODY = "Request body must be a JSON object"
    ROUTE_NOT_FOUND = "Not found: {path}"
    INVALID_INTEGER = "'{name}' must be an integer"

    # Generic
    UNEXPECTED = "An unexpected error occurred, see logs for details"

    # Settings Validation Errors
    INVALID_DATABASE_URL = "Database URL must start with sqlite://"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    DUPLICATE_PROVIDER_ENTRY = "Provider '{tag}' is configured more than once"

    # Startup Errors
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    INVALID_SETTINGS = "Invalid settings:\n{error}"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"


class ResultMessages:
    """Human-readable results shared by the chat and HTTP front-ends."""

    NOW_PLAYING = "Now playing: {track}"
    QUEUED_NEXT = "Queued next: {track}"
    COLLECTION_PLAYING = "Playing {name} ({count} tracks)"
    COLLECTION_QUEUED = "Queued {count} tracks from {name}"
    COLLECTION_EMPTY = "{name} has no playable tracks"
    START_FAILED = "Could not start {track}"
    QUEUE_EMPTY = "The playlist is empty"
    ALREADY_PLAYING = "Already playing"
    NOTHING_PLAYING = "Nothing is playing"
    NO_CHANNEL = "Not connected to a voice channel"
    MODE_SET = "Play mode set to {mode}"
    STOPPED = "Playback stopped"
    CLEARED = "Playlist cleared"
    PAUSED = "Playback paused"
    RESUMED = "Playback resumed"
    RELOADED = "Configuration reloaded"
    MOVED_HERE = "Joined {channel}"

    # Status text shown on the bot's presence
    STATUS_IDLE = "No song playing"
    STATUS_PLAYING = "{track}"
    STATUS_START_FAILED = "Failed to play {track}"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters.
    """

    # Database Lifecycle
    DATABASE_INITIALIZED = "Database initialized at %s"
    DATABASE_CLOSED = "Database manager closed"

    # Preferences
    PREFERENCE_SAVED = "Saved preference %s"
    PREFERENCE_LOAD_FAILED = "Failed to load preference %s: %s"

    # Resolver
    RESOLVER_RESOLVED = "Resolved %r -> provider=%s reference=%s limit=%s"
    RESOLVER_URL_MATCH = "URL fragment %r matched provider %s"
    RESOLVER_CLASSIFIER_MATCH = "Provider %s classified input as %s"
    RESOLVER_CLASSIFIER_FAILED = "Classifier of provider %s failed: %r"

    # Queue Engine
    QUEUE_REPLACED = "Playlist replaced with %s tracks (%s)"
    QUEUE_EXTENDED = "Appended %s tracks to playlist"
    QUEUE_ENQUEUED = "Enqueued '%s' at position %s (next=%s)"
    QUEUE_CLEARED = "Cleared %s tracks from playlist"
    QUEUE_EMPTY = "Playlist empty under mode %s"
    QUEUE_MODE_CHANGED = "Play mode changed to %s"
    QUEUE_FINISHED_IGNORED = "Track finished with empty playlist, going idle"
    QUEUE_FINISHED_STALE = "Dropping track-finished notification: issued at start %d, now %d"

    # Playback
    PLAYBACK_STARTED = "Started playing '%s'"
    PLAYBACK_STARTED_PAUSED = "Started '%s' paused"
    PLAYBACK_START_FAILED = "Failed to start '%s'"
    PLAYBACK_STOPPED = "Stopped playback"
    PLAYBACK_PAUSED = "Paused playback"
    PLAYBACK_RESUMED = "Resumed playback"
    PLAYBACK_ERROR = "Playback error: %s"
    PLAYBACK_NOT_CONNECTED = "Not connected to a voice channel"
    PLAYBACK_NO_STREAM_URL = "No stream URL for '%s'"
    PLAYBACK_STALE_FINISH = "Ignoring finish of superseded track (generation %s, current %s)"
    PLAYBACK_NO_CALLBACK = "No track finished callback set"
    PLAYBACK_CALLBACK_ERROR = "Error in track finished callback: %s"
    PLAYBACK_STOP_TASK_FAILED = "Stop after clear failed: %r"

    # Presence
    PRESENCE_RESYNCED = "Presence resynced for channel %s: %s members"
    PRESENCE_ENTERED = "Member %s entered channel %s (%s present)"
    PRESENCE_LEFT = "Member %s left channel %s (%s present)"
    PRESENCE_STALE_EVENT = "Ignoring presence event for channel %s (own channel %s)"
    PRESENCE_AUTO_PAUSE = "Channel empty, requesting pause"
    PRESENCE_AUTO_RESUME = "Listeners present, requesting resume"
    PRESENCE_AUTO_PAUSE_TOGGLED = "Auto-pause %s"

    # Orchestrator
    COMMAND_FAILED = "Command %s failed: %s"
    COMMAND_UNEXPECTED = "Unexpected error in command %s"
    CONFIG_RELOADED = "Configuration reloaded (%s providers enabled)"
    STATUS_UPDATE_FAILED = "Failed to update status text: %r"

    # Providers
    PROVIDER_REGISTERED = "Registered provider %s (aliases=%s, enabled=%s)"
    PROVIDER_CLOSED = "Closed provider %s"
    PROVIDER_CLOSE_FAILED = "Failed to close provider %s: %r"
    PROVIDER_SEARCH_FAILED = "Search on provider %s failed: %r"
    PROVIDER_USER_LOOKUP_FAILED = "Failed to look up current user on %s: %r"
    PROVIDER_LOGGED_IN = "Logged in to %s as %s"
    NETEASE_REQUEST = "NetEase request %s %s"
    NETEASE_API_ERROR = "NetEase API %s returned code %s"
    YTDLP_NO_URL_IN_INFO_DICT = "No URL found in info dict"
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info from %s"
    YTDLP_FAILED_SEARCH = "Failed to search for %r"
    YTDLP_FAILED_EXTRACT_PLAYLIST = "Failed to extract playlist from %s"
    CACHE_HIT_URL = "Cache hit for URL: %s"
    CACHE_EXPIRED_CLEANED = "Cleaned %d expired cache entries"

    # Voice
    VOICE_CONNECTED = "Connected to voice channel %s"
    VOICE_MOVED = "Moved to voice channel %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting: %r"
    CHANNEL_NOT_VOICE = "Channel %s is not a voice channel"
    CHANNEL_NOT_FOUND = "Channel %s not found"

    # Web
    WEB_STARTED = "HTTP API listening on http://%s:%s"
    WEB_STOPPED = "HTTP API stopped"
    WEB_UNAUTHORIZED = "Rejected unauthorized request to %s from %s"
    WEB_HANDLER_ERROR = "Unhandled error serving %s"

    # Application Lifecycle
    BOT_STARTING = "Starting voice jukebox in {environment} mode"
    BOT_CONFIG_LINE = "  %s"
    LOGGING_CONFIG_FALLBACK = "Could not load %s (%s), falling back to basic config"
    BOT_SETUP = "Setting up bot..."
    BOT_CONTAINER_INITIALIZED = "Container initialized successfully"
    BOT_CONTAINER_INIT_FAILED = "Failed to initialize container: %s"
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_STARTING_RUN = "Starting bot..."
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %ss"
    BOT_CONTAINER_SHUTDOWN = "Container shutdown complete"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error during container shutdown: %s"
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_COGS_LOADED_SUMMARY = "Cogs loaded: %s success, %s failed"
    BOT_SYNCED_GUILD = "Synced %s commands to guild %s"
    BOT_SYNCED_GLOBAL = "Synced %s commands globally"
    BOT_SYNC_FAILED = "Failed to sync commands: %s"
    BOT_AUTO_JOIN_FAILED = "Failed to join configured voice channel %s"
    BOT_SLASH_COMMAND_ERROR = "Slash command error in '%s': %s"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Failed to send error message to user"
    BOT_WEB_START_FAILED = "Failed to start HTTP API: %s"


class DiscordUIMessages:
    """User-facing Discord messages and responses."""

    SUCCESS_PREFIX = "✅ {message}"
    ERROR_PREFIX = "❌ {message}"
    ERROR_OCCURRED = "❌ An error occurred: {error}"

    STATE_SERVER_ONLY = "This command can only be used in a server."
    STATE_NEED_TO_BE_IN_VOICE = "You need to be in a voice channel first."
    STATE_VERIFY_VOICE_FAILED = "Could not verify your voice state."
    STATE_NOTHING_PLAYING = "Nothing is playing."
    STATE_PLAYLIST_EMPTY = "The playlist is empty."

    EMBED_STATUS = "🎵 Jukebox Status"
    EMBED_PLAYLIST = "📋 Playlist"
    EMBED_PROVIDERS = "🔌 Providers"
    FIELD_NOW_PLAYING = "Now playing"
    FIELD_UP_NEXT = "Up next"
    FIELD_MODE = "Mode"
    FIELD_PAUSED = "Paused"
    FIELD_LISTENERS = "Listeners"
    NOT_LOGGED_IN = "not logged in"
