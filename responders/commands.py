"""
Slash command responders.

A configured command can echo one of its reply messages, post a counter
leaderboard, or both (reply first).
"""
from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Tuple

from core.constants import LEADERBOARD_SIZE
from core.counter_storage import CounterError, CounterStore
from core.platform import Platform, PlatformError
from core.types import BotConfig, CommandConfig, InboundInteraction

logger = logging.getLogger("mysteriousbot.commands")


class CommandResponder:
    def __init__(
        self,
        config: CommandConfig,
        platform: Platform,
        counters: Optional[CounterStore] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config
        self.platform = platform
        self.counters = counters
        self.rng = rng or random.Random()

    async def handle(self, interaction: InboundInteraction) -> None:
        if self.config.reply_messages:
            await self._reply_message(interaction)
        if self.config.counter_leaderboard:
            await self._counter_leaderboard(interaction, self.config.counter_leaderboard)

    async def _reply_message(self, interaction: InboundInteraction) -> None:
        content = self.rng.choice(self.config.reply_messages)
        try:
            await self.platform.respond(interaction, content=content)
        except PlatformError as exc:
            logger.error("Failed to respond to /%s: %s", self.config.alias, exc)

    async def _counter_leaderboard(self, interaction: InboundInteraction, name: str) -> None:
        if interaction.guild_id is None:
            logger.warning("Leaderboard /%s used outside a guild, aborting", self.config.alias)
            return
        if self.counters is None:
            logger.error("Leaderboard /%s has no counter store", self.config.alias)
            return

        try:
            standings = await self.counters.counter(name).standings(
                interaction.user_id, LEADERBOARD_SIZE
            )
        except CounterError as exc:
            logger.error("Failed to read top counts for counter %s: %s", name, exc)
            return

        rows: List[Tuple[str, str]] = []
        for user_id, count in standings:
            try:
                display = await self.platform.display_name(interaction.guild_id, user_id)
            except PlatformError as exc:
                logger.error("Failed to get user info for user %s: %s", user_id, exc)
                continue
            if display is None:
                continue
            rows.append((display, str(count)))

        try:
            await self.platform.respond(interaction, fields=rows)
        except PlatformError as exc:
            logger.error("Failed to publish leaderboard for %s: %s", name, exc)


class CommandRouter:
    """Finds the configured command for an interaction and runs it."""

    def __init__(
        self,
        config: BotConfig,
        platform: Platform,
        counters: Optional[CounterStore] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.responders: Dict[int, Dict[str, CommandResponder]] = {
            guild_id: {
                command.alias: CommandResponder(command, platform, counters, rng)
                for command in guild_config.commands
            }
            for guild_id, guild_config in config.guilds.items()
        }

    def commands_for(self, guild_id: int) -> List[CommandConfig]:
        return [responder.config for responder in self.responders.get(guild_id, {}).values()]

    async def on_interaction(self, interaction: InboundInteraction) -> bool:
        if interaction.guild_id is None:
            return False
        responder = self.responders.get(interaction.guild_id, {}).get(interaction.command_name)
        if responder is None:
            return False
        try:
            await responder.handle(interaction)
        except Exception as e:
            logger.error("Command /%s failed: %s", interaction.command_name, e)
        return True
