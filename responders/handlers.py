"""
Message handlers.

Each handler pairs a predicate (should_handle) with an action (on_message).
The predicate is the AND of the channel filter, the optional configured
trigger, the kind's own check and, last, the cooldown gate. Platform and
counter failures are raised as HandlerError for the dispatcher to log.
"""
from __future__ import annotations

import logging
import random
import re
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from core.constants import HandlerKind
from core.counter_storage import CounterError, CounterStore
from core.emoji_cache import EmojiCache
from core.platform import Platform, PlatformError
from core.types import HandlerConfig, InboundMessage

from .matching import ChannelFilter, Cooldown, Trigger, contains_any, strip_mention_prefix

logger = logging.getLogger("mysteriousbot.handlers")


class HandlerError(RuntimeError):
    """A dependency call failed while a handler was evaluating or acting."""

    def __init__(self, kind: str, operation: str, cause: BaseException) -> None:
        self.kind = kind
        self.operation = operation
        self.cause = cause
        super().__init__(f"{kind} {operation}: {cause}")


@dataclass
class HandlerServices:
    """Collaborators shared by every handler of the process."""
    platform: Platform
    counters: Optional[CounterStore] = None
    emojis: Optional[EmojiCache] = None
    clock: Callable[[], float] = time.monotonic
    rng: random.Random = field(default_factory=random.Random)


class BaseHandler:
    kind = ""
    exclusive = False

    def __init__(self, config: HandlerConfig, services: HandlerServices) -> None:
        self.config = config
        self.services = services
        self.platform = services.platform
        self.trigger = Trigger(config.trigger) if config.trigger is not None else None
        self.channel_filter = ChannelFilter(config.channel_filter)
        self.cooldown = Cooldown(config.channel_filter.cooldown_seconds, services.clock)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind})"

    def is_exclusive(self) -> bool:
        return self.exclusive

    async def should_handle(self, event: InboundMessage) -> bool:
        if not self.channel_filter.permits(event):
            return False
        if self.trigger is not None and not self.trigger.evaluate(event):
            return False
        try:
            if not await self.wants(event):
                return False
            if await self._in_denied_channel(event):
                return False
        except PlatformError as exc:
            raise HandlerError(self.kind, "should_handle", exc) from exc
        return await self.cooldown.try_acquire()

    async def on_message(self, event: InboundMessage) -> None:
        try:
            await self.act(event)
        except (PlatformError, CounterError) as exc:
            raise HandlerError(self.kind, "on_message", exc) from exc

    async def wants(self, event: InboundMessage) -> bool:
        """Kind-specific predicate, evaluated after the configured trigger."""
        return True

    async def act(self, event: InboundMessage) -> None:
        raise NotImplementedError

    # ─── Shared helpers ───────────────────────────────────────────────────────

    async def _in_denied_channel(self, event: InboundMessage) -> bool:
        names = self.config.deny_channel_names
        if not names or event.guild_id is None:
            return False
        for name in names:
            channel_id = await self.platform.channel_id_from_name(event.guild_id, name)
            if channel_id is not None and channel_id == event.channel_id:
                return True
        return False

    def _choose(self, options: tuple[str, ...]) -> Optional[str]:
        if not options:
            return None
        return self.services.rng.choice(options)

    async def _bump_counters(self, event: InboundMessage, names: tuple[str, ...]) -> None:
        store = self.services.counters
        if store is None:
            if names:
                logger.warning("%s: no counter store configured, skipping %s", self.kind, names)
            return
        for name in names:
            try:
                count = await store.counter(name).increment(event.author_id)
            except CounterError as exc:
                logger.error(
                    "Failed to increment counter %s for user %s: %s",
                    name,
                    event.author_id,
                    exc,
                )
                continue
            logger.debug("Counter %s for user %s is now %s", name, event.author_id, count)


class AckHandler(BaseHandler):
    """Replies with a little something whenever the bot is mentioned."""

    kind = HandlerKind.ACK

    async def wants(self, event: InboundMessage) -> bool:
        bot_id = await self.platform.current_user_id()
        return event.mentions_user(bot_id)

    async def act(self, event: InboundMessage) -> None:
        text = self._choose(self.config.action.reply_messages)
        if text is not None:
            await self.platform.send_message(event.channel_id, text)


class WordWatchHandler(BaseHandler):
    """Points people at a better channel when they use a watched word."""

    kind = HandlerKind.WORD_WATCH

    async def wants(self, event: InboundMessage) -> bool:
        return contains_any(event.content, self.config.words)

    async def act(self, event: InboundMessage) -> None:
        await self.platform.send_message(
            event.channel_id,
            f"Hey, that sounds like it may be best taken to #{self.config.action.suggest_channel}.",
        )


class VerbalMoralityHandler(BaseHandler):
    """Nudges users who say a bad word and counts their infractions."""

    kind = HandlerKind.VERBAL_MORALITY

    def _is_exempt(self, event: InboundMessage) -> bool:
        exempt = self.config.exempt_user_tags
        return bool(exempt) and (
            event.author_tag.lower() in exempt or event.author_name.lower() in exempt
        )

    async def wants(self, event: InboundMessage) -> bool:
        if self._is_exempt(event):
            return False
        return contains_any(event.content, self.config.words)

    async def act(self, event: InboundMessage) -> None:
        await self._bump_counters(event, self.config.action.counters)
        user = event.author_display_name or event.author_name
        warning = self.config.action.warning_message.replace("{{user}}", user)
        await self.platform.send_message(event.channel_id, warning)


class AutoResponderHandler(BaseHandler):
    """Counts, reacts and replies when its trigger fires."""

    kind = HandlerKind.AUTORESPONDER

    async def act(self, event: InboundMessage) -> None:
        action = self.config.action
        await self._bump_counters(event, action.counters)
        for name in action.twemojis:
            await self._react(event, name)

        text = self._choose(action.reply_messages)
        if text is not None:
            await self.platform.reply(event, text)

    async def _react(self, event: InboundMessage, name: str) -> None:
        cache = self.services.emojis
        if cache is None or event.guild_id is None:
            return
        try:
            emoji = await cache.resolve(event.guild_id, name)
        except PlatformError as exc:
            logger.error("Failed to look up emojis for guild %s: %s", event.guild_id, exc)
            return
        if emoji is None:
            logger.warning("Unknown twemoji %s for guild %s", name, event.guild_id)
            return
        try:
            await self.platform.add_reaction(event, emoji)
        except PlatformError as exc:
            logger.error("Failed to react to message %s with %s: %s", event.message_id, name, exc)


GRANT = "grant"
REVOKE = "revoke"


class RoleWizardHandler(BaseHandler):
    """
    Grants and revokes public roles on request.

    Accepts "<keyword> grant <role>" or "<keyword> revoke <role>", optionally
    prefixed with a mention of the bot. Each invocation runs to completion;
    nothing is remembered between messages.
    """

    kind = HandlerKind.ROLE_WIZARD
    exclusive = True

    USAGE = "The format for this command is {keyword} <grant|revoke> <role name>"
    NO_SUCH_ROLE = "No such role by that name, bud."
    CANNOT_MANAGE = "I'm sorry, I cannot manage that role"
    DONE = "you got it."
    FAILED = "there was a problem modifying your roles."

    def __init__(self, config: HandlerConfig, services: HandlerServices) -> None:
        super().__init__(config, services)
        self.keyword = config.keyword
        self.command_re = re.compile(
            rf"^{re.escape(config.keyword)}\s+({GRANT}|{REVOKE})\s+(.+?)\s*$",
            re.IGNORECASE | re.DOTALL,
        )
        self.allowed = {
            GRANT: {name.casefold() for name in config.action.role_grants},
            REVOKE: {name.casefold() for name in config.action.role_revokes},
        }

    async def _command_text(self, event: InboundMessage) -> str:
        bot_id = await self.platform.current_user_id()
        return strip_mention_prefix(event.content, bot_id)

    async def wants(self, event: InboundMessage) -> bool:
        text = await self._command_text(event)
        head = text[: len(self.keyword)]
        if head.casefold() != self.keyword.casefold():
            return False
        rest = text[len(self.keyword):]
        return not rest or rest[0].isspace()

    async def act(self, event: InboundMessage) -> None:
        match = self.command_re.match(await self._command_text(event))
        if match is None:
            await self._say(event, self.USAGE.format(keyword=self.keyword))
            return

        operation = match.group(1).lower()
        role_name = match.group(2)

        if event.guild_id is None:
            return

        try:
            role = await self.platform.find_role(event.guild_id, role_name)
        except PlatformError as exc:
            logger.error("Role lookup for %r failed: %s", role_name, exc)
            await self._say(event, self.FAILED)
            return

        if role is None:
            await self._say(event, self.NO_SUCH_ROLE)
            return

        if role.name.casefold() not in self.allowed[operation]:
            await self._say(event, self.CANNOT_MANAGE)
            return

        try:
            if operation == GRANT:
                await self.platform.grant_role(event.guild_id, event.author_id, role.id)
            else:
                await self.platform.revoke_role(event.guild_id, event.author_id, role.id)
        except PlatformError as exc:
            logger.error(
                "Failed to %s role %s for user %s: %s",
                operation,
                role.id,
                event.author_id,
                exc,
            )
            await self._say(event, self.FAILED)
            return

        logger.info("Role %s: %s for user %s", operation, role.name, event.author_id)
        await self._say(event, self.DONE)

    async def _say(self, event: InboundMessage, text: str) -> None:
        await self.platform.send_message(event.channel_id, text)
