"""
Main entry point for the Discord bot.

Loads configuration from environment, validates every guild config and starts
the bot. Configuration problems stop the process before it connects.
"""
from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from discord.errors import LoginFailure, PrivilegedIntentsRequired

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)

# Import bot after .env is loaded so modules can read env vars at import time.
from bot import MysteriousBot
from core.config import ConfigError, load_bot_config
from core.counter_storage import CounterError, CounterStore
from core.paths import counter_db_path, guild_config_dir

# Get configuration from environment
BOT_TOKEN = os.getenv("DISCORD_BOT_TOKEN") or os.getenv("DISCORD_TOKEN")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("mysteriousbot")
logging.getLogger("discord").setLevel(getattr(logging, LOG_LEVEL.upper(), logging.INFO))

# Suppress verbose gateway logs unless LOG_LEVEL is DEBUG
if LOG_LEVEL.upper() != "DEBUG":
    logging.getLogger("discord.gateway").setLevel(logging.WARNING)
    logging.getLogger("discord.http").setLevel(logging.WARNING)


async def main() -> int:
    token = BOT_TOKEN
    if not token:
        logger.error("Missing bot token. Set DISCORD_BOT_TOKEN in .env or environment.")
        return 1

    try:
        config = await load_bot_config(guild_config_dir())
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    counters = CounterStore(counter_db_path())
    try:
        await asyncio.to_thread(counters.open)
    except CounterError as e:
        logger.error("Failed to open counter store: %s", e)
        return 1

    bot = MysteriousBot(config, counters)
    try:
        await bot.start(token)
    except PrivilegedIntentsRequired:
        logger.error(
            "Privileged intents required. Enable MESSAGE CONTENT and SERVER MEMBERS intents "
            "in the Discord developer portal."
        )
        await bot.close()
        return 1
    except LoginFailure as e:
        logger.error("Token is invalid: %s", e)
        await bot.close()
        return 1
    finally:
        if not bot.is_closed():
            await bot.close()
    return 0


def run() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
