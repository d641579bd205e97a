"""Tests for gateway client event wiring."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from bot.client import MysteriousBot
from core.emoji_cache import EmojiCache
from core.types import BotConfig

from helpers import GUILD_ID, make_emoji


@pytest.mark.asyncio
async def test_emoji_update_invalidates_cached_guild():
    bot = MysteriousBot(BotConfig(), MagicMock())
    fetch = AsyncMock(return_value=[make_emoji("fish")])
    bot.emoji_cache = EmojiCache(fetch)

    await bot.emoji_cache.get_emojis(GUILD_ID)
    await bot.emoji_cache.get_emojis(GUILD_ID)
    assert fetch.await_count == 1

    await bot.on_guild_emojis_update(MagicMock(id=GUILD_ID), [], [])
    await bot.emoji_cache.get_emojis(GUILD_ID)

    assert fetch.await_count == 2
