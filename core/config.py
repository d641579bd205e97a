"""
Guild configuration loading and validation.

Handles loading, validating, and normalizing guild-specific configuration files
into the typed values the responders consume. Any problem is a ConfigError and
is fatal at startup.
"""
from __future__ import annotations

import logging
import math
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .constants import (
    DEFAULT_ACK_REPLY,
    DEFAULT_INFRACTION_COUNTER,
    DEFAULT_ROLE_KEYWORD,
    HandlerKind,
    K,
    TriggerKind,
)
from .io_utils import list_json_files, read_json
from .types import (
    ActionSpec,
    BotConfig,
    ChannelFilterSpec,
    CommandConfig,
    GuildConfig,
    HandlerConfig,
    TriggerSpec,
)
from .utils import is_int, is_valid_id, one_or_many, safe_int

logger = logging.getLogger("mysteriousbot.config")

TRIGGER_SCHEMA: Dict[str, Tuple[str, bool]] = {
    K.USER_MESSAGE: ("ids", False),
    K.USER_MENTIONED: ("ids", False),
    K.MESSAGE_MATCHES: ("patterns", False),
}

FILTER_SCHEMA: Dict[str, Tuple[str, bool]] = {
    K.IGNORE_CHANNELS: ("ids", False),
    K.ONLY_IN_CHANNELS: ("ids", False),
    K.COOLDOWN: ("nonneg_number", False),
}

ACTION_SCHEMAS: Dict[str, Dict[str, Tuple[str, bool]]] = {
    HandlerKind.ACK: {
        K.REPLY_MESSAGES: ("strs", False),
        K.DENY_CHANNELS: ("strs", False),
    },
    HandlerKind.ROLE_WIZARD: {
        K.ALLOWED_ROLE_GRANTS: ("strs", True),
        K.ALLOWED_ROLE_REVOKE: ("strs", True),
        K.KEYWORD: ("str", False),
    },
    HandlerKind.WORD_WATCH: {
        K.WATCHED_WORDS: ("strs", True),
        K.SUGGEST_CHANNEL: ("str", True),
    },
    HandlerKind.VERBAL_MORALITY: {
        K.BAD_WORDS: ("strs", True),
        K.ALLOW_USERS_BY_TAG: ("strs", False),
        K.DENY_CHANNELS: ("strs", False),
        K.WARNING_MESSAGE: ("str", True),
        K.COUNTER: ("str", False),
    },
    HandlerKind.AUTORESPONDER: {
        K.REPLY_MESSAGES: ("strs", False),
        K.TWEMOJIS: ("strs", False),
        K.COUNTER: ("strs", False),
    },
}

COMMAND_SCHEMA: Dict[str, Tuple[str, bool]] = {
    K.ALIAS: ("str", True),
    K.DESCRIPTION: ("str", True),
    K.REPLY_MESSAGES: ("strs", False),
    K.COUNTER_LEADERBOARD: ("str", False),
}

SLASH_NAME_RE = re.compile(r"^[-_a-z0-9]{1,32}$")


class ConfigError(RuntimeError):
    pass


def _normalize_value(
    key: str,
    type_name: str,
    value: Any,
    errors: List[str],
    where: str,
) -> Any:
    if type_name == "ids":
        items = one_or_many(value)
        ids: List[int] = []
        for item in items:
            parsed = safe_int(item)
            if parsed is None or not is_valid_id(parsed):
                errors.append(f"{where}: {key} must be an ID or a list of IDs")
                return None
            ids.append(parsed)
        return frozenset(ids)
    if type_name == "strs":
        items = one_or_many(value)
        if any(not isinstance(item, str) for item in items):
            errors.append(f"{where}: {key} must be a string or a list of strings")
            return None
        return tuple(items)
    if type_name == "str":
        if not isinstance(value, str):
            errors.append(f"{where}: {key} must be a string")
            return None
        return value
    if type_name == "nonneg_number":
        if (
            not (is_int(value) or isinstance(value, float))
            or not math.isfinite(value)
            or value < 0
        ):
            errors.append(f"{where}: {key} must be a non-negative number of seconds")
            return None
        return float(value)
    if type_name == "patterns":
        items = one_or_many(value)
        patterns: List[re.Pattern[str]] = []
        for item in items:
            if not isinstance(item, str):
                errors.append(f"{where}: {key} must be a pattern or a list of patterns")
                return None
            try:
                patterns.append(re.compile(item))
            except re.error as exc:
                errors.append(f"{where}: {key} pattern {item!r} does not compile: {exc}")
                return None
        return tuple(patterns)
    errors.append(f"{where}: unknown config type for {key}")
    return None


def _apply_schema(
    data: Dict[str, Any],
    schema: Dict[str, Tuple[str, bool]],
    errors: List[str],
    where: str,
) -> Dict[str, Any]:
    normalized: Dict[str, Any] = {}
    for key, (type_name, required) in schema.items():
        if key not in data:
            if required:
                errors.append(f"{where}: missing required key {key}")
            continue
        value = _normalize_value(key, type_name, data[key], errors, where)
        if value is not None:
            normalized[key] = value
    return normalized


def _build_trigger(
    kind: str,
    values: Dict[str, Any],
    errors: List[str],
    where: str,
) -> Optional[TriggerSpec]:
    present = [key for key in TriggerKind.ALL if key in values]
    if kind == HandlerKind.AUTORESPONDER and len(present) != 1:
        errors.append(
            f"{where}: autoresponder needs exactly one of "
            f"{', '.join(TriggerKind.ALL)}"
        )
        return None
    if len(present) > 1:
        errors.append(f"{where}: at most one trigger may be configured")
        return None
    if not present:
        return None
    trigger_kind = present[0]
    if trigger_kind == TriggerKind.MESSAGE_MATCHES:
        return TriggerSpec(kind=trigger_kind, patterns=values[trigger_kind])
    return TriggerSpec(kind=trigger_kind, user_ids=values[trigger_kind])


def parse_handler(data: Any, where: str) -> HandlerConfig:
    """Validate one handler declaration; raises ConfigError."""
    if not isinstance(data, dict):
        raise ConfigError(f"{where}: handler must be a JSON object")

    kind = data.get(K.KIND)
    if kind not in HandlerKind.ALL:
        raise ConfigError(
            f"{where}: kind must be one of {', '.join(HandlerKind.ALL)} (got {kind!r})"
        )

    errors: List[str] = []
    trigger_values = _apply_schema(data, TRIGGER_SCHEMA, errors, where)
    filter_values = _apply_schema(data, FILTER_SCHEMA, errors, where)
    action_values = _apply_schema(data, ACTION_SCHEMAS[kind], errors, where)

    known = {K.KIND} | set(TRIGGER_SCHEMA) | set(FILTER_SCHEMA) | set(ACTION_SCHEMAS[kind])
    for key in data:
        if key not in known:
            errors.append(f"{where}: unknown key {key} for kind {kind}")

    trigger = _build_trigger(kind, trigger_values, errors, where)

    if kind == HandlerKind.AUTORESPONDER and not any(
        action_values.get(key) for key in (K.REPLY_MESSAGES, K.TWEMOJIS, K.COUNTER)
    ):
        errors.append(f"{where}: autoresponder needs reply_messages, twemojis or counter")

    if errors:
        raise ConfigError("; ".join(errors))

    channel_filter = ChannelFilterSpec(
        ignore_channels=filter_values.get(K.IGNORE_CHANNELS),
        only_in_channels=filter_values.get(K.ONLY_IN_CHANNELS),
        cooldown_seconds=filter_values.get(K.COOLDOWN, 0.0),
    )

    if kind == HandlerKind.ACK:
        return HandlerConfig(
            kind=kind,
            trigger=trigger,
            channel_filter=channel_filter,
            action=ActionSpec(
                reply_messages=action_values.get(K.REPLY_MESSAGES) or (DEFAULT_ACK_REPLY,),
            ),
            deny_channel_names=action_values.get(K.DENY_CHANNELS, ()),
        )

    if kind == HandlerKind.ROLE_WIZARD:
        keyword = action_values.get(K.KEYWORD, DEFAULT_ROLE_KEYWORD).strip()
        if not keyword:
            raise ConfigError(f"{where}: keyword must not be empty")
        return HandlerConfig(
            kind=kind,
            trigger=trigger,
            channel_filter=channel_filter,
            action=ActionSpec(
                role_grants=action_values[K.ALLOWED_ROLE_GRANTS],
                role_revokes=action_values[K.ALLOWED_ROLE_REVOKE],
            ),
            keyword=keyword,
        )

    if kind == HandlerKind.WORD_WATCH:
        return HandlerConfig(
            kind=kind,
            trigger=trigger,
            channel_filter=channel_filter,
            action=ActionSpec(suggest_channel=action_values[K.SUGGEST_CHANNEL]),
            words=tuple(word.lower() for word in action_values[K.WATCHED_WORDS] if word),
        )

    if kind == HandlerKind.VERBAL_MORALITY:
        return HandlerConfig(
            kind=kind,
            trigger=trigger,
            channel_filter=channel_filter,
            action=ActionSpec(
                warning_message=action_values[K.WARNING_MESSAGE],
                counters=(action_values.get(K.COUNTER, DEFAULT_INFRACTION_COUNTER),),
            ),
            words=tuple(word.lower() for word in action_values[K.BAD_WORDS] if word),
            exempt_user_tags=frozenset(
                tag.lower() for tag in action_values.get(K.ALLOW_USERS_BY_TAG, ())
            ),
            deny_channel_names=action_values.get(K.DENY_CHANNELS, ()),
        )

    return HandlerConfig(
        kind=kind,
        trigger=trigger,
        channel_filter=channel_filter,
        action=ActionSpec(
            reply_messages=action_values.get(K.REPLY_MESSAGES, ()),
            twemojis=action_values.get(K.TWEMOJIS, ()),
            counters=action_values.get(K.COUNTER, ()),
        ),
    )


def parse_command(data: Any, where: str) -> CommandConfig:
    """Validate one slash command declaration; raises ConfigError."""
    if not isinstance(data, dict):
        raise ConfigError(f"{where}: command must be a JSON object")

    errors: List[str] = []
    values = _apply_schema(data, COMMAND_SCHEMA, errors, where)
    for key in data:
        if key not in COMMAND_SCHEMA:
            errors.append(f"{where}: unknown key {key}")

    alias = values.get(K.ALIAS)
    if alias is not None and not SLASH_NAME_RE.match(alias):
        errors.append(f"{where}: alias {alias!r} is not a valid slash command name")
    if not values.get(K.REPLY_MESSAGES) and not values.get(K.COUNTER_LEADERBOARD):
        errors.append(f"{where}: command needs reply_messages or counter_leaderboard")

    if errors:
        raise ConfigError("; ".join(errors))

    return CommandConfig(
        alias=values[K.ALIAS],
        description=values[K.DESCRIPTION],
        reply_messages=values.get(K.REPLY_MESSAGES, ()),
        counter_leaderboard=values.get(K.COUNTER_LEADERBOARD),
    )


def validate_guild_config(data: Dict[str, Any]) -> GuildConfig:
    if not isinstance(data, dict):
        raise ConfigError("Guild config must be a JSON object")

    guild_id = data.get(K.GUILD_ID)
    if not is_valid_id(guild_id):
        raise ConfigError("guild_id must be set to a valid guild ID")

    raw_handlers = data.get(K.HANDLERS, [])
    raw_commands = data.get(K.COMMANDS, [])
    if not isinstance(raw_handlers, list):
        raise ConfigError("handlers must be a list")
    if not isinstance(raw_commands, list):
        raise ConfigError("commands must be a list")

    handlers = tuple(
        parse_handler(item, f"guild {guild_id} handlers[{index}]")
        for index, item in enumerate(raw_handlers)
    )
    commands = tuple(
        parse_command(item, f"guild {guild_id} commands[{index}]")
        for index, item in enumerate(raw_commands)
    )

    aliases = [command.alias for command in commands]
    if len(aliases) != len(set(aliases)):
        raise ConfigError(f"guild {guild_id}: command aliases must be unique")

    return GuildConfig(guild_id=int(guild_id), handlers=handlers, commands=commands)


async def load_guild_config(path: Path) -> GuildConfig:
    try:
        data = await read_json(path, default=None)
    except ValueError as exc:
        raise ConfigError(f"{path.name}: not valid JSON: {exc}") from exc
    if data is None:
        raise ConfigError(f"Missing guild config: {path}")
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name}: guild config must be a JSON object")
    try:
        config = validate_guild_config(data)
    except ConfigError as exc:
        raise ConfigError(f"{path.name}: {exc}") from exc
    if str(config.guild_id) != path.stem:
        raise ConfigError(f"{path.name}: guild_id does not match config file name")
    return config


async def load_bot_config(directory: Path) -> BotConfig:
    """Load every <guild_id>.json under directory."""
    paths = await list_json_files(directory)
    if not paths:
        logger.warning("No guild configs found in %s", directory)

    config = BotConfig()
    for path in paths:
        guild_config = await load_guild_config(path)
        config.guilds[guild_config.guild_id] = guild_config
        logger.info(
            "Loaded guild %s: %d handlers, %d commands",
            guild_config.guild_id,
            len(guild_config.handlers),
            len(guild_config.commands),
        )
    return config
