"""Bot package - Discord client, platform adapter and event conversion."""
from .client import MysteriousBot
from .platform import DiscordPlatform

__all__ = ["MysteriousBot", "DiscordPlatform"]
