"""Shared fakes for responder tests."""
from __future__ import annotations

import random
from typing import Iterable, Optional
from unittest.mock import AsyncMock, MagicMock

from core.types import InboundInteraction, InboundMessage
from responders.handlers import HandlerServices

BOT_ID = 999
GUILD_ID = 111
CHANNEL_ID = 200
OTHER_CHANNEL_ID = 300
AUTHOR_ID = 1234


def make_event(
    content: str = "",
    *,
    author_id: int = AUTHOR_ID,
    author_name: str = "joe",
    author_tag: Optional[str] = None,
    channel_id: int = CHANNEL_ID,
    guild_id: Optional[int] = GUILD_ID,
    mentions: Iterable[int] = (),
    clean_content: Optional[str] = None,
    message_id: int = 5000,
) -> InboundMessage:
    return InboundMessage(
        message_id=message_id,
        guild_id=guild_id,
        channel_id=channel_id,
        author_id=author_id,
        author_name=author_name,
        author_display_name=author_name.capitalize(),
        author_tag=author_tag or author_name,
        content=content,
        clean_content=clean_content if clean_content is not None else content,
        mentions=frozenset(mentions),
    )


def make_interaction(
    command_name: str,
    *,
    user_id: int = AUTHOR_ID,
    guild_id: Optional[int] = GUILD_ID,
) -> InboundInteraction:
    return InboundInteraction(
        interaction_id=7000,
        guild_id=guild_id,
        channel_id=CHANNEL_ID,
        user_id=user_id,
        user_name="joe",
        command_name=command_name,
    )


def make_platform() -> MagicMock:
    """A platform whose every outbound call is an AsyncMock."""
    platform = MagicMock()
    platform.current_user_id = AsyncMock(return_value=BOT_ID)
    platform.channel_id_from_name = AsyncMock(return_value=None)
    platform.send_message = AsyncMock()
    platform.reply = AsyncMock()
    platform.add_reaction = AsyncMock()
    platform.fetch_emojis = AsyncMock(return_value=[])
    platform.find_role = AsyncMock(return_value=None)
    platform.grant_role = AsyncMock()
    platform.revoke_role = AsyncMock()
    platform.display_name = AsyncMock(return_value=None)
    platform.respond = AsyncMock()
    return platform


def make_role(role_id: int, name: str) -> MagicMock:
    role = MagicMock()
    role.id = role_id
    role.name = name
    return role


def make_emoji(name: str) -> MagicMock:
    emoji = MagicMock()
    emoji.name = name
    return emoji


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_services(platform=None, counters=None, emojis=None, clock=None) -> HandlerServices:
    return HandlerServices(
        platform=platform or make_platform(),
        counters=counters,
        emojis=emojis,
        clock=clock or FakeClock(),
        rng=random.Random(0),
    )
