"""Tests for the per-guild emoji cache."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from core.emoji_cache import EmojiCache

from helpers import FakeClock, make_emoji


def _fetcher():
    return AsyncMock(side_effect=lambda guild_id: [make_emoji(f"e{guild_id}")])


@pytest.mark.asyncio
async def test_second_lookup_within_ttl_is_cached():
    fetch = _fetcher()
    clock = FakeClock(0.0)
    cache = EmojiCache(fetch, ttl=100, clock=clock)

    await cache.get_emojis(1)
    clock.now = 99.0
    await cache.get_emojis(1)

    assert fetch.await_count == 1


@pytest.mark.asyncio
async def test_expired_entry_is_refetched():
    fetch = _fetcher()
    clock = FakeClock(0.0)
    cache = EmojiCache(fetch, ttl=100, clock=clock)

    await cache.get_emojis(1)
    clock.now = 100.0
    await cache.get_emojis(1)

    assert fetch.await_count == 2


@pytest.mark.asyncio
async def test_least_recently_used_guild_is_evicted():
    fetch = _fetcher()
    cache = EmojiCache(fetch, max_guilds=2, clock=FakeClock())

    await cache.get_emojis(1)
    await cache.get_emojis(2)
    await cache.get_emojis(1)
    await cache.get_emojis(3)
    assert fetch.await_count == 3

    await cache.get_emojis(1)
    assert fetch.await_count == 3
    await cache.get_emojis(2)
    assert fetch.await_count == 4


@pytest.mark.asyncio
async def test_concurrent_misses_fetch_once():
    started = asyncio.Event()
    release = asyncio.Event()

    async def slow_fetch(guild_id):
        started.set()
        await release.wait()
        return [make_emoji("fish")]

    fetch = AsyncMock(side_effect=slow_fetch)
    cache = EmojiCache(fetch, clock=FakeClock())

    tasks = [asyncio.create_task(cache.get_emojis(1)) for _ in range(5)]
    await started.wait()
    release.set()
    results = await asyncio.gather(*tasks)

    assert fetch.await_count == 1
    assert all(result == results[0] for result in results)


@pytest.mark.asyncio
async def test_resolve_by_exact_name():
    fish = make_emoji("fish")
    cache = EmojiCache(AsyncMock(return_value=[make_emoji("cat"), fish]), clock=FakeClock())

    assert await cache.resolve(1, "fish") is fish
    assert await cache.resolve(1, "Fish") is None
    assert await cache.resolve(1, "dog") is None


@pytest.mark.asyncio
async def test_invalidate_forces_refetch():
    fetch = _fetcher()
    cache = EmojiCache(fetch, clock=FakeClock())

    await cache.get_emojis(1)
    cache.invalidate(1)
    await cache.get_emojis(1)

    assert fetch.await_count == 2
