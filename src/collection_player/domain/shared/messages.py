"""Centralized message constants for error messages, validation, and log output."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Ordering Errors
    DUPLICATE_TRACK_REF_IDS = "Ordering contains duplicate track reference ids: {ids}"
    DUPLICATE_POSITIONS = "Ordering contains duplicate positions: {positions}"
    FOREIGN_TRACK_REF = "Track reference '{track_ref_id}' belongs to collection '{other}'"
    TRACK_REF_ALREADY_PRESENT = "Track reference '{track_ref_id}' is already in the ordering"

    # Collection Rules
    DUPLICATE_AUDIO = "This track is already in the collection"
    COLLECTION_FULL = "Collection is full (max {max_tracks} tracks)"

    # Time/Date Validation Errors
    TIMEZONE_REQUIRED_UTC_DATETIME = "UtcDateTime requires a timezone-aware datetime"

    # Configuration Errors
    INVALID_DATABASE_URL = "Database URL must start with sqlite://"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"

    # Session Errors
    SESSION_NOT_OPEN = "Collection session '{collection_id}' has not been opened"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Database Lifecycle
    DATABASE_INITIALIZED = "Database initialized at %s"
    DATABASE_CLOSED = "Database manager closed"

    # Ledger Operations
    LEDGER_LOADED = "Loaded %d tracks into ordering"
    LEDGER_HEALED = "Healed %d duplicate positions at load; %d corrective writes"
    LEDGER_INSERTED = "Inserted track ref %s at index %d (%d writes)"
    LEDGER_REMOVED = "Removed track ref %s from index %d"
    LEDGER_REORDERED = "Moved track ref %s from index %d to %d (%d writes)"

    # Track Store Operations
    STORE_TRACKS_LOADED = "Loaded %d track refs for collection %s"
    STORE_WRITES_APPLIED = "Applied %d position writes to collection %s"
    STORE_TRACK_INSERTED = "Inserted track ref %s (audio %s) at position %d in collection %s"
    STORE_TRACK_DELETED = "Deleted track ref %s"

    # Session Operations
    SESSION_OPENED = "Opened collection %s with %d tracks"
    SESSION_RELOADED = "Reloaded collection %s after write failure"
    SESSION_WRITES_FAILED = "%d of %d position writes failed for collection %s"
    SESSION_TRACK_ADDED = "Added audio %s to collection %s at index %d"
    SESSION_TRACK_REMOVED = "Removed track ref %s from collection %s"
    SESSION_TRACK_MOVED = "Moved track ref %s to index %d in collection %s"

    # Playback Operations
    PLAYBACK_SELECTED = "Selected index %d (track ref %s)"
    PLAYBACK_STATUS = "Playback status %s -> %s"
    PLAYBACK_STALE_SIGNAL = "Ignoring stale %s signal for index %s (active %s)"
    PLAYBACK_IGNORED = "Ignoring %s in status %s"
    PLAYBACK_FINISHED = "Collection playback finished at index %d"
    PLAYBACK_RESELECTED = "Active track ref %s removed; reselecting index %d"
    PLAYBACK_MEDIA_ERROR = "Media backend reported error for track ref %s"
    PLAYBACK_STALE_REQUEST = "Dropping %s signal for superseded load request %d"

    # Event Bus
    EVENT_HANDLER_ERROR = "Error in handler for %s: %s"
