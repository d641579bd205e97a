"""
Discord bot client - lean event handling and command registration.

Business logic is delegated to the responders: every inbound message becomes
one task that walks the guild's handler chain.
"""
from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Sequence

import discord
from discord import app_commands

from core.counter_storage import CounterStore
from core.emoji_cache import EmojiCache
from core.types import BotConfig, CommandConfig
from responders import CommandRouter, Dispatcher, HandlerServices, build_dispatcher

from .events import interaction_to_event, message_to_event
from .platform import DiscordPlatform

logger = logging.getLogger("mysteriousbot")


class MysteriousBot(discord.Client):
    """
    Main Discord bot client.

    Handles:
    - Discord events (on_ready, on_message)
    - Guild slash command registration
    - One dispatch task per inbound message
    """

    def __init__(self, config: BotConfig, counters: CounterStore) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True
        intents.guilds = True
        super().__init__(intents=intents)

        self.config = config
        self.counters = counters
        self.tree = app_commands.CommandTree(self)
        self.platform = DiscordPlatform(self)
        self.emoji_cache = EmojiCache(self.platform.fetch_emojis)

        rng = random.Random()
        services = HandlerServices(
            platform=self.platform,
            counters=counters,
            emojis=self.emoji_cache,
            rng=rng,
        )
        self.dispatcher: Dispatcher = build_dispatcher(config, services)
        self.commands = CommandRouter(config, self.platform, counters, rng)
        self.ready_once = False
        self._tasks: set[asyncio.Task[Any]] = set()

    # ─── Lifecycle ────────────────────────────────────────────────────────────

    async def on_ready(self) -> None:
        """Called when the bot is ready."""
        if self.ready_once:
            return
        self.ready_once = True
        logger.info("%s is connected!", self.user)

        # Commands are guild scoped only
        self.tree.clear_commands(guild=None)
        try:
            await self.tree.sync()
        except discord.DiscordException as e:
            logger.error("Failed clearing global commands: %s", e)

        for guild in self.guilds:
            if self.config.get(guild.id) is None:
                logger.info("Connected to guild %s which has no associated config", guild.id)
                continue
            await self._register_guild_commands(guild.id)

    async def close(self) -> None:
        """Cleanup when shutting down."""
        for task in list(self._tasks):
            task.cancel()
        await super().close()
        self.counters.close()

    def _spawn(self, coro: Any) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def on_guild_join(self, guild: discord.Guild) -> None:
        """Called when the bot joins a guild."""
        if self.config.get(guild.id) is not None:
            await self._register_guild_commands(guild.id)

    async def on_guild_emojis_update(
        self,
        guild: discord.Guild,
        before: Sequence[discord.Emoji],
        after: Sequence[discord.Emoji],
    ) -> None:
        """Drop the cached emoji list so the next reaction lookup refetches."""
        self.emoji_cache.invalidate(guild.id)

    # ─── Message Events ───────────────────────────────────────────────────────

    async def on_message(self, message: discord.Message) -> None:
        """Handle incoming messages."""
        if message.author.bot:
            return
        if message.guild is None:
            return
        if self.dispatcher.chain_for(message.guild.id) is None:
            return

        self._spawn(self.dispatcher.on_event(message_to_event(message)))

    # ─── Commands ─────────────────────────────────────────────────────────────

    def _make_command(self, command_config: CommandConfig) -> app_commands.Command:
        async def callback(interaction: discord.Interaction) -> None:
            await self.commands.on_interaction(interaction_to_event(interaction))

        return app_commands.Command(
            name=command_config.alias,
            description=command_config.description,
            callback=callback,
        )

    async def _register_guild_commands(self, guild_id: int) -> None:
        """Register slash commands for one configured guild."""
        guild = discord.Object(id=guild_id)
        self.tree.clear_commands(guild=guild)
        for command_config in self.commands.commands_for(guild_id):
            self.tree.add_command(self._make_command(command_config), guild=guild)

        logger.info("Setting application commands on guild %s", guild_id)
        try:
            await self.tree.sync(guild=guild)
        except discord.DiscordException as e:
            logger.error("Failed setting commands for guild %s: %s", guild_id, e)
            return
        logger.info("Application commands for guild %s set", guild_id)
