"""
Configuration key constants.

Using constants instead of string literals provides:
- IDE autocomplete
- Typo protection (caught at import time)
- Single source of truth for key names
"""
from __future__ import annotations


class ConfigKey:
    """All configuration keys used in guild configs."""

    # Identity
    GUILD_ID = "guild_id"

    # Top-level sections
    HANDLERS = "handlers"
    COMMANDS = "commands"

    # Handler declaration
    KIND = "kind"

    # Triggers
    USER_MESSAGE = "user_message"
    USER_MENTIONED = "user_mentioned"
    MESSAGE_MATCHES = "message_matches"

    # Filters
    IGNORE_CHANNELS = "ignore_channels"
    ONLY_IN_CHANNELS = "only_in_channels"
    COOLDOWN = "cooldown"

    # Actions
    REPLY_MESSAGES = "reply_messages"
    TWEMOJIS = "twemojis"
    COUNTER = "counter"

    # Named-channel deny lists (ack, verbal morality)
    DENY_CHANNELS = "deny_channels"

    # Role wizard
    ALLOWED_ROLE_GRANTS = "allowed_role_grants"
    ALLOWED_ROLE_REVOKE = "allowed_role_revoke"
    KEYWORD = "keyword"

    # Word watcher
    WATCHED_WORDS = "watched_words"
    SUGGEST_CHANNEL = "suggest_channel"

    # Verbal morality
    BAD_WORDS = "bad_words"
    ALLOW_USERS_BY_TAG = "allow_users_by_tag"
    WARNING_MESSAGE = "warning_message"

    # Slash commands
    ALIAS = "alias"
    DESCRIPTION = "description"
    COUNTER_LEADERBOARD = "counter_leaderboard"


class HandlerKind:
    """Kind tags for configured message handlers."""
    ACK = "ack"
    ROLE_WIZARD = "role_wizard"
    WORD_WATCH = "word_watch"
    VERBAL_MORALITY = "verbal_morality"
    AUTORESPONDER = "autoresponder"

    ALL = (ACK, ROLE_WIZARD, WORD_WATCH, VERBAL_MORALITY, AUTORESPONDER)


class TriggerKind:
    """Matching modes for handler triggers."""
    USER_MESSAGE = "user_message"
    USER_MENTIONED = "user_mentioned"
    MESSAGE_MATCHES = "message_matches"

    ALL = (USER_MESSAGE, USER_MENTIONED, MESSAGE_MATCHES)


DEFAULT_ACK_REPLY = "I don't know about that"
DEFAULT_ROLE_KEYWORD = "!role"
DEFAULT_INFRACTION_COUNTER = "infractions"
LEADERBOARD_SIZE = 10


# Shorthand alias for cleaner imports
K = ConfigKey
