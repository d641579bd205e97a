"""
Dispatch engine - runs inbound messages through each guild's handler chain.

Handlers run strictly in configured order for one event. A failing handler is
logged and skipped; an exclusive handler that matched ends the walk. Separate
events are dispatched independently by the caller (one task per event).
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from core.types import InboundMessage

from .handlers import BaseHandler

logger = logging.getLogger("mysteriousbot.dispatch")


class HandlerChain:
    """Ordered, immutable sequence of handlers for one guild."""

    def __init__(self, handlers: Iterable[BaseHandler] = ()) -> None:
        self._handlers: tuple[BaseHandler, ...] = tuple(handlers)

    def __iter__(self) -> Iterator[BaseHandler]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    def __repr__(self) -> str:
        return "[" + ", ".join(repr(handler) for handler in self._handlers) + "]"

    async def run(self, event: InboundMessage) -> List[BaseHandler]:
        """
        Evaluate every handler against the event.

        Returns the handlers whose action ran (successfully or not), in order.
        """
        handled: List[BaseHandler] = []
        for handler in self._handlers:
            try:
                matched = await handler.should_handle(event)
            except Exception as e:
                logger.warning(
                    "Handler %s failed to evaluate message %s: %s",
                    handler.kind,
                    event.message_id,
                    e,
                )
                continue

            if not matched:
                continue

            handled.append(handler)
            try:
                await handler.on_message(event)
            except Exception as e:
                logger.error(
                    "Handler %s failed on message %s: %s",
                    handler.kind,
                    event.message_id,
                    e,
                )

            if handler.is_exclusive():
                break
        return handled


class Dispatcher:
    """
    Routes inbound message events to the chain of their guild.

    Events without a guild, or from a guild with no configuration, are
    ignored.
    """

    def __init__(self, chains: Optional[Dict[int, HandlerChain]] = None) -> None:
        self.chains: Dict[int, HandlerChain] = dict(chains or {})

    def chain_for(self, guild_id: Optional[int]) -> Optional[HandlerChain]:
        if guild_id is None:
            return None
        return self.chains.get(guild_id)

    async def on_event(self, event: InboundMessage) -> None:
        chain = self.chain_for(event.guild_id)
        if chain is None:
            return
        try:
            handled = await chain.run(event)
        except Exception:
            logger.exception("Dispatch failed for message %s", event.message_id)
            return
        if handled:
            logger.debug(
                "Message %s handled by %s",
                event.message_id,
                ", ".join(handler.kind for handler in handled),
            )
