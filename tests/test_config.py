"""Tests for guild configuration loading and validation."""

import json

import pytest

from core.config import (
    ConfigError,
    load_bot_config,
    load_guild_config,
    parse_command,
    parse_handler,
    validate_guild_config,
)
from core.constants import DEFAULT_ACK_REPLY, DEFAULT_ROLE_KEYWORD, HandlerKind, TriggerKind
from core.paths import resolve_repo_path
from responders.handlers import WordWatchHandler

from helpers import make_event, make_services

EXAMPLE_GUILD_ID = 499363186957352970


def _write(directory, name, payload):
    path = directory / name
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


@pytest.mark.asyncio
async def test_example_directory_loads():
    config = await load_bot_config(resolve_repo_path("config.guild.example"))

    guild = config.get(EXAMPLE_GUILD_ID)
    assert guild is not None
    kinds = [handler.kind for handler in guild.handlers]
    assert kinds == [
        HandlerKind.ROLE_WIZARD,
        HandlerKind.ACK,
        HandlerKind.WORD_WATCH,
        HandlerKind.VERBAL_MORALITY,
        HandlerKind.AUTORESPONDER,
        HandlerKind.AUTORESPONDER,
    ]
    assert [command.alias for command in guild.commands] == ["fishboard", "hello"]


@pytest.mark.asyncio
async def test_missing_directory_yields_empty_config(tmp_path):
    config = await load_bot_config(tmp_path / "nope")
    assert config.guilds == {}


def test_single_value_and_list_are_equivalent():
    single = parse_handler(
        {"kind": "autoresponder", "user_mentioned": 42, "twemojis": "pingsock"}, "h"
    )
    many = parse_handler(
        {"kind": "autoresponder", "user_mentioned": [42], "twemojis": ["pingsock"]}, "h"
    )
    assert single.trigger == many.trigger
    assert single.action.twemojis == many.action.twemojis == ("pingsock",)
    assert single.trigger.kind == TriggerKind.USER_MENTIONED
    assert single.trigger.user_ids == frozenset({42})


def test_string_ids_are_accepted():
    handler = parse_handler(
        {"kind": "autoresponder", "user_message": "42", "reply_messages": "hi"}, "h"
    )
    assert handler.trigger.user_ids == frozenset({42})


def test_bad_regex_is_rejected():
    with pytest.raises(ConfigError, match="does not compile"):
        parse_handler(
            {"kind": "autoresponder", "message_matches": "(unclosed", "reply_messages": "x"},
            "h",
        )


def test_unknown_kind_is_rejected():
    with pytest.raises(ConfigError, match="kind must be one of"):
        parse_handler({"kind": "teleporter"}, "h")


def test_autoresponder_without_trigger_is_rejected():
    with pytest.raises(ConfigError, match="exactly one"):
        parse_handler({"kind": "autoresponder", "reply_messages": "x"}, "h")


def test_autoresponder_with_two_triggers_is_rejected():
    with pytest.raises(ConfigError, match="exactly one"):
        parse_handler(
            {
                "kind": "autoresponder",
                "user_message": 1,
                "message_matches": "x",
                "reply_messages": "x",
            },
            "h",
        )


def test_autoresponder_without_action_is_rejected():
    with pytest.raises(ConfigError, match="needs reply_messages"):
        parse_handler({"kind": "autoresponder", "user_message": 1}, "h")


def test_unknown_key_is_rejected():
    with pytest.raises(ConfigError, match="unknown key"):
        parse_handler({"kind": "ack", "reply_mesages": "typo"}, "h")


def test_negative_cooldown_is_rejected():
    with pytest.raises(ConfigError, match="non-negative"):
        parse_handler(
            {"kind": "autoresponder", "user_message": 1, "reply_messages": "x", "cooldown": -1},
            "h",
        )


def test_role_wizard_requires_both_allow_lists():
    with pytest.raises(ConfigError, match="allowed_role_revoke"):
        parse_handler({"kind": "role_wizard", "allowed_role_grants": ["Helper"]}, "h")


def test_defaults_are_applied():
    ack = parse_handler({"kind": "ack"}, "h")
    assert ack.action.reply_messages == (DEFAULT_ACK_REPLY,)

    wizard = parse_handler(
        {"kind": "role_wizard", "allowed_role_grants": [], "allowed_role_revoke": []}, "h"
    )
    assert wizard.keyword == DEFAULT_ROLE_KEYWORD


def test_watch_words_and_exempt_tags_are_lowercased():
    handler = parse_handler(
        {
            "kind": "verbal_morality",
            "bad_words": ["HECK"],
            "allow_users_by_tag": ["Skorpion"],
            "warning_message": "hey {{user}}",
        },
        "h",
    )
    assert handler.words == ("heck",)
    assert handler.exempt_user_tags == frozenset({"skorpion"})


def test_channel_filter_lists():
    handler = parse_handler(
        {"kind": "ack", "ignore_channels": 5, "only_in_channels": [6, 7], "cooldown": 2.5},
        "h",
    )
    assert handler.channel_filter.ignore_channels == frozenset({5})
    assert handler.channel_filter.only_in_channels == frozenset({6, 7})
    assert handler.channel_filter.cooldown_seconds == 2.5


def test_command_alias_must_be_valid_slash_name():
    with pytest.raises(ConfigError, match="not a valid slash command name"):
        parse_command({"alias": "Fish Board", "description": "x", "reply_messages": "y"}, "c")


def test_command_needs_an_action():
    with pytest.raises(ConfigError, match="needs reply_messages or counter_leaderboard"):
        parse_command({"alias": "fish", "description": "x"}, "c")


def test_duplicate_command_aliases_are_rejected():
    command = {"alias": "fish", "description": "x", "reply_messages": "y"}
    with pytest.raises(ConfigError, match="unique"):
        validate_guild_config({"guild_id": 1, "commands": [command, command]})


@pytest.mark.asyncio
async def test_guild_id_must_match_file_name(tmp_path):
    path = _write(tmp_path, "123.json", {"guild_id": 456})
    with pytest.raises(ConfigError, match="does not match"):
        await load_guild_config(path)


@pytest.mark.asyncio
async def test_invalid_json_is_config_error(tmp_path):
    path = tmp_path / "123.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="not valid JSON"):
        await load_guild_config(path)


@pytest.mark.asyncio
async def test_directory_with_one_bad_file_fails(tmp_path):
    _write(tmp_path, "1.json", {"guild_id": 1, "handlers": [{"kind": "ack"}]})
    _write(tmp_path, "2.json", {"guild_id": 2, "handlers": [{"kind": "bogus"}]})
    with pytest.raises(ConfigError, match="2.json"):
        await load_bot_config(tmp_path)


@pytest.mark.parametrize("cooldown", [float("nan"), float("inf")])
def test_non_finite_cooldown_is_rejected(cooldown):
    with pytest.raises(ConfigError, match="non-negative"):
        parse_handler(
            {"kind": "autoresponder", "user_message": 1, "reply_messages": "x", "cooldown": cooldown},
            "h",
        )


@pytest.mark.asyncio
async def test_nan_cooldown_in_json_file_is_rejected(tmp_path):
    path = tmp_path / "123.json"
    path.write_text(
        '{"guild_id": 123, "handlers": [{"kind": "ack", "cooldown": NaN}]}', encoding="utf-8"
    )
    with pytest.raises(ConfigError, match="non-negative"):
        await load_guild_config(path)


@pytest.mark.asyncio
async def test_empty_only_in_channels_does_not_silence_handler():
    config = parse_handler(
        {
            "kind": "word_watch",
            "watched_words": ["unity"],
            "suggest_channel": "engines",
            "only_in_channels": [],
            "ignore_channels": [],
        },
        "h",
    )
    handler = WordWatchHandler(config, make_services())

    assert await handler.should_handle(make_event("I love unity"))
