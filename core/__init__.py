"""
Core utilities and infrastructure for the bot.

This package contains:
- config: Guild configuration loading and validation
- constants: Configuration keys and kind tags
- counter_storage: SQLite-backed per-user counters
- emoji_cache: Per-guild emoji cache with expiry
- io_utils: File I/O helpers
- paths: Path resolution
- platform: Outbound action interface
- types: Dataclasses and type definitions
- utils: General utilities
"""
from .constants import ConfigKey, HandlerKind, K, TriggerKind
from .types import (
    ActionSpec,
    BotConfig,
    ChannelFilterSpec,
    CommandConfig,
    GuildConfig,
    HandlerConfig,
    InboundInteraction,
    InboundMessage,
    TriggerSpec,
)

__all__ = [
    # Constants
    "ConfigKey",
    "HandlerKind",
    "K",
    "TriggerKind",
    # Types
    "ActionSpec",
    "BotConfig",
    "ChannelFilterSpec",
    "CommandConfig",
    "GuildConfig",
    "HandlerConfig",
    "InboundInteraction",
    "InboundMessage",
    "TriggerSpec",
]
