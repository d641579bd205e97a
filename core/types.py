"""
Type definitions and dataclasses for the bot.

Inbound events are produced by the gateway client; configuration values are
produced by core.config. Both are read-only to the responders.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class InboundMessage:
    """Immutable view of a message-create event."""
    message_id: int
    guild_id: Optional[int]
    channel_id: int
    author_id: int
    author_name: str
    content: str
    clean_content: str = ""
    author_display_name: str = ""
    author_tag: str = ""
    mentions: frozenset[int] = frozenset()
    raw: Any = field(default=None, compare=False, repr=False)

    def mentions_user(self, user_id: int) -> bool:
        return user_id in self.mentions

    @property
    def sanitized_text(self) -> str:
        """Message text with mention syntax resolved to display names."""
        return self.clean_content or self.content


@dataclass(frozen=True)
class InboundInteraction:
    """Immutable view of an application-command interaction."""
    interaction_id: int
    guild_id: Optional[int]
    channel_id: Optional[int]
    user_id: int
    user_name: str
    command_name: str
    raw: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class TriggerSpec:
    """One of: exact-user, mentions-user, regex-match."""
    kind: str
    user_ids: frozenset[int] = frozenset()
    patterns: tuple[re.Pattern[str], ...] = ()


@dataclass(frozen=True)
class ChannelFilterSpec:
    """Channel gating. None means no restriction from that list."""
    ignore_channels: Optional[frozenset[int]] = None
    only_in_channels: Optional[frozenset[int]] = None
    cooldown_seconds: float = 0.0


@dataclass(frozen=True)
class ActionSpec:
    reply_messages: tuple[str, ...] = ()
    twemojis: tuple[str, ...] = ()
    counters: tuple[str, ...] = ()
    role_grants: tuple[str, ...] = ()
    role_revokes: tuple[str, ...] = ()
    suggest_channel: str = ""
    warning_message: str = ""


@dataclass(frozen=True)
class HandlerConfig:
    """Declarative description of one handler instance."""
    kind: str
    trigger: Optional[TriggerSpec] = None
    channel_filter: ChannelFilterSpec = field(default_factory=ChannelFilterSpec)
    action: ActionSpec = field(default_factory=ActionSpec)
    # Lowercased words for word_watch / verbal_morality
    words: tuple[str, ...] = ()
    # Lowercased user tags exempt from verbal_morality
    exempt_user_tags: frozenset[str] = frozenset()
    # Channel names resolved against the guild at evaluation time
    deny_channel_names: tuple[str, ...] = ()
    keyword: str = ""


@dataclass(frozen=True)
class CommandConfig:
    """A guild slash command."""
    alias: str
    description: str
    reply_messages: tuple[str, ...] = ()
    counter_leaderboard: Optional[str] = None


@dataclass(frozen=True)
class GuildConfig:
    guild_id: int
    handlers: tuple[HandlerConfig, ...] = ()
    commands: tuple[CommandConfig, ...] = ()


@dataclass
class BotConfig:
    """All guild configs loaded at startup, keyed by guild id."""
    guilds: dict[int, GuildConfig] = field(default_factory=dict)

    def get(self, guild_id: Optional[int]) -> Optional[GuildConfig]:
        if guild_id is None:
            return None
        return self.guilds.get(guild_id)
