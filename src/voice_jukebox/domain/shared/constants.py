"""Centralized constants for limits, database schema, and other shared values."""

from __future__ import annotations


class QueueConstants:
    """Limits used by the resolver and the queue engine."""

    DEFAULT_RESULT_LIMIT = 100
    UNLIMITED = 0
    STATUS_UPCOMING_COUNT = 50
    SUMMARY_MAX_LINES = 10

    # Tokens accepted by the chat front-end for single-track and collection commands
    TRACK_COMMAND_TOKENS = 2
    COLLECTION_COMMAND_TOKENS = 3


class SearchConstants:
    """Bounds for the multi-provider search endpoint."""

    DEFAULT_LIMIT = 10
    MIN_LIMIT = 1
    MAX_LIMIT = 50


class DatabaseTables:
    """Database table names."""

    PREFERENCES = "preferences"


class PreferenceKeys:
    """Keys stored in the preferences table."""

    PLAY_MODE = "play_mode"
    PROVIDER_STATE = "provider_state:{tag}"


class SQLPragmas:
    """SQLite PRAGMA statements applied to each connection."""

    JOURNAL_MODE_WAL = "PRAGMA journal_mode=WAL"
    BUSY_TIMEOUT = "PRAGMA busy_timeout={timeout}"


class HttpHeaders:
    """Header names used by the HTTP front-end."""

    AUTH_TOKEN = "X-Jukebox-Token"
    AUTH_QUERY_PARAM = "token"
