"""
Emoji cache - per-guild custom emoji lists with time-based expiry.

Hitting the platform's emoji endpoint on every matching message would be
wasteful, so each guild's list is kept for `ttl` seconds. Only the most
recently used guilds are retained.
"""
from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Optional, Sequence

logger = logging.getLogger("mysteriousbot.emoji")

EmojiFetcher = Callable[[int], Awaitable[Sequence[Any]]]

DEFAULT_TTL_SECONDS = 24 * 60 * 60
DEFAULT_MAX_GUILDS = 5


class EmojiCache:
    def __init__(
        self,
        fetch: EmojiFetcher,
        ttl: float = DEFAULT_TTL_SECONDS,
        max_guilds: int = DEFAULT_MAX_GUILDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetch = fetch
        self.ttl = ttl
        self.max_guilds = max_guilds
        self._clock = clock
        # guild_id -> (inserted_at, emojis)
        self._entries: OrderedDict[int, tuple[float, tuple[Any, ...]]] = OrderedDict()
        self._fetch_locks: dict[int, asyncio.Lock] = {}

    def _fresh(self, guild_id: int) -> Optional[tuple[Any, ...]]:
        entry = self._entries.get(guild_id)
        if entry is None:
            return None
        inserted_at, emojis = entry
        if self._clock() - inserted_at >= self.ttl:
            return None
        self._entries.move_to_end(guild_id)
        return emojis

    def _store(self, guild_id: int, emojis: tuple[Any, ...]) -> None:
        self._entries[guild_id] = (self._clock(), emojis)
        self._entries.move_to_end(guild_id)
        while len(self._entries) > self.max_guilds:
            evicted, _ = self._entries.popitem(last=False)
            self._fetch_locks.pop(evicted, None)

    async def get_emojis(self, guild_id: int) -> tuple[Any, ...]:
        cached = self._fresh(guild_id)
        if cached is not None:
            return cached

        lock = self._fetch_locks.setdefault(guild_id, asyncio.Lock())
        async with lock:
            # Another task may have filled the entry while we waited
            cached = self._fresh(guild_id)
            if cached is not None:
                return cached
            emojis = tuple(await self._fetch(guild_id))
            self._store(guild_id, emojis)
            logger.debug("Cached %d emojis for guild %s", len(emojis), guild_id)
            return emojis

    async def resolve(self, guild_id: int, name: str) -> Optional[Any]:
        """Return the guild emoji called `name`, or None."""
        for emoji in await self.get_emojis(guild_id):
            if getattr(emoji, "name", None) == name:
                return emoji
        return None

    def invalidate(self, guild_id: int) -> None:
        self._entries.pop(guild_id, None)
