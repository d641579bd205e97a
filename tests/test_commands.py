"""Tests for slash command responders and routing."""

import random
from unittest.mock import AsyncMock

import pytest

from core.platform import PlatformError
from core.types import BotConfig, CommandConfig, GuildConfig
from responders.commands import CommandResponder, CommandRouter

from helpers import AUTHOR_ID, GUILD_ID, make_interaction, make_platform

HELLO = CommandConfig(alias="hello", description="Say hello", reply_messages=("hi", "hey"))
FISHBOARD = CommandConfig(alias="fishboard", description="Fish", counter_leaderboard="fish")


def _names(mapping):
    return AsyncMock(side_effect=lambda guild_id, user_id: mapping.get(user_id))


@pytest.mark.asyncio
async def test_reply_command_responds_with_configured_message():
    platform = make_platform()
    responder = CommandResponder(HELLO, platform, rng=random.Random(0))
    interaction = make_interaction("hello")

    await responder.handle(interaction)

    platform.respond.assert_awaited_once()
    assert platform.respond.await_args.args == (interaction,)
    assert platform.respond.await_args.kwargs["content"] in ("hi", "hey")


@pytest.mark.asyncio
async def test_leaderboard_lists_display_names_in_order(counter_store):
    counter = counter_store.counter("fish")
    await counter.set(1, 3)
    await counter.set(2, 8)
    await counter.set(AUTHOR_ID, 5)
    platform = make_platform()
    platform.display_name = _names({1: "One", 2: "Two", AUTHOR_ID: "Joe"})

    await CommandResponder(FISHBOARD, platform, counter_store).handle(make_interaction("fishboard"))

    platform.respond.assert_awaited_once()
    assert platform.respond.await_args.kwargs["fields"] == [
        ("Two", "8"),
        ("Joe", "5"),
        ("One", "3"),
    ]


@pytest.mark.asyncio
async def test_leaderboard_includes_caller_outside_top(counter_store):
    counter = counter_store.counter("fish")
    await counter.set(1, 3)
    platform = make_platform()
    platform.display_name = _names({1: "One", AUTHOR_ID: "Joe"})

    await CommandResponder(FISHBOARD, platform, counter_store).handle(make_interaction("fishboard"))

    assert platform.respond.await_args.kwargs["fields"] == [("One", "3"), ("Joe", "0")]


@pytest.mark.asyncio
async def test_leaderboard_skips_unresolvable_users(counter_store):
    counter = counter_store.counter("fish")
    await counter.set(1, 3)
    await counter.set(2, 2)
    platform = make_platform()

    async def display_name(guild_id, user_id):
        if user_id == 1:
            raise PlatformError("fetch_user")
        return None if user_id == 2 else "Joe"

    platform.display_name = AsyncMock(side_effect=display_name)

    await CommandResponder(FISHBOARD, platform, counter_store).handle(make_interaction("fishboard"))

    assert platform.respond.await_args.kwargs["fields"] == [("Joe", "0")]


@pytest.mark.asyncio
async def test_reply_and_leaderboard_reply_first(counter_store):
    both = CommandConfig(
        alias="both", description="x", reply_messages=("hi",), counter_leaderboard="fish"
    )
    platform = make_platform()
    platform.display_name = _names({AUTHOR_ID: "Joe"})

    await CommandResponder(both, platform, counter_store).handle(make_interaction("both"))

    first, second = platform.respond.await_args_list
    assert first.kwargs == {"content": "hi"}
    assert second.kwargs == {"fields": [("Joe", "0")]}


@pytest.mark.asyncio
async def test_router_dispatches_by_guild_and_alias(counter_store):
    platform = make_platform()
    config = BotConfig(guilds={GUILD_ID: GuildConfig(guild_id=GUILD_ID, commands=(HELLO,))})
    router = CommandRouter(config, platform, counter_store, random.Random(0))

    assert [command.alias for command in router.commands_for(GUILD_ID)] == ["hello"]
    assert router.commands_for(GUILD_ID + 1) == []

    assert await router.on_interaction(make_interaction("hello"))
    assert not await router.on_interaction(make_interaction("nope"))
    assert not await router.on_interaction(make_interaction("hello", guild_id=None))
    assert platform.respond.await_count == 1


@pytest.mark.asyncio
async def test_router_contains_responder_failures():
    platform = make_platform()
    platform.respond = AsyncMock(side_effect=RuntimeError("boom"))
    config = BotConfig(guilds={GUILD_ID: GuildConfig(guild_id=GUILD_ID, commands=(HELLO,))})
    router = CommandRouter(config, platform)

    assert await router.on_interaction(make_interaction("hello"))
