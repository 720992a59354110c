"""Centralized constants for database schema and other shared values."""

from __future__ import annotations


class DatabaseTables:
    """Database table names."""

    AUDIO_FILES = "audio_files"
    COLLECTIONS = "collections"
    COLLECTION_TRACKS = "collection_tracks"


class SQLPragmas:
    """SQLite PRAGMA statements for database configuration.

    These pragmas are applied to each connection to ensure consistent behavior.
    """

    JOURNAL_MODE_WAL = "PRAGMA journal_mode=WAL"
    FOREIGN_KEYS_ON = "PRAGMA foreign_keys=ON"
    BUSY_TIMEOUT = "PRAGMA busy_timeout={timeout}"
