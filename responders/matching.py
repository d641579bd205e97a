"""
Trigger matching and filter checks for handlers.

Triggers decide relevance from author, mentions or text; filters restrict
applicability by channel and cooldown. Neither ever raises.
"""
from __future__ import annotations

import asyncio
import time
from typing import Callable, Optional

from core.constants import TriggerKind
from core.types import ChannelFilterSpec, InboundMessage, TriggerSpec


class Trigger:
    """Predicate over an inbound message built from a TriggerSpec."""

    def __init__(self, spec: TriggerSpec) -> None:
        self.spec = spec

    def evaluate(self, event: InboundMessage) -> bool:
        kind = self.spec.kind
        if kind == TriggerKind.USER_MESSAGE:
            return event.author_id in self.spec.user_ids
        if kind == TriggerKind.USER_MENTIONED:
            return any(event.mentions_user(user_id) for user_id in self.spec.user_ids)
        if kind == TriggerKind.MESSAGE_MATCHES:
            text = event.sanitized_text
            return any(pattern.search(text) for pattern in self.spec.patterns)
        return False

    def __repr__(self) -> str:
        return f"Trigger({self.spec.kind})"


class ChannelFilter:
    """
    Channel allow/deny gating.

    An absent or empty list restricts nothing. The ignore list is consulted
    first, so a channel present in both lists is denied.
    """

    def __init__(self, spec: ChannelFilterSpec) -> None:
        self.ignore_channels = spec.ignore_channels
        self.only_in_channels = spec.only_in_channels

    def permits(self, event: InboundMessage) -> bool:
        channel_id = event.channel_id
        if self.ignore_channels and channel_id in self.ignore_channels:
            return False
        if self.only_in_channels and channel_id not in self.only_in_channels:
            return False
        return True


class Cooldown:
    """
    Per-handler cooldown gate.

    try_acquire() checks the elapsed time and records the new trigger time
    under one lock, so two concurrent events cannot both pass.
    """

    def __init__(
        self,
        seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.seconds = seconds
        self._clock = clock
        self._last_triggered: Optional[float] = None
        self._lock = asyncio.Lock()

    @property
    def last_triggered(self) -> Optional[float]:
        return self._last_triggered

    async def try_acquire(self) -> bool:
        if self.seconds <= 0:
            return True
        async with self._lock:
            now = self._clock()
            last = self._last_triggered
            if last is not None and now - last < self.seconds:
                return False
            self._last_triggered = now
            return True


def strip_mention_prefix(content: str, user_id: Optional[int]) -> str:
    """Remove a leading <@id> / <@!id> mention of user_id from content."""
    stripped = content.lstrip()
    if user_id is None:
        return stripped
    for token in (f"<@{user_id}>", f"<@!{user_id}>"):
        if stripped.startswith(token):
            return stripped[len(token):].lstrip()
    return stripped


def contains_any(haystack: str, needles: tuple[str, ...]) -> bool:
    """Case-insensitive substring check; needles are expected lowercased."""
    lowered = haystack.lower()
    return any(needle in lowered for needle in needles)
