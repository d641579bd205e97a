"""
Handler construction from validated guild configuration.

Maps each HandlerConfig kind tag to its handler class and builds one chain
per guild, in configuration file order.
"""
from __future__ import annotations

import logging
from typing import Dict, Type

from core.config import ConfigError
from core.constants import HandlerKind
from core.types import BotConfig, GuildConfig, HandlerConfig

from .engine import Dispatcher, HandlerChain
from .handlers import (
    AckHandler,
    AutoResponderHandler,
    BaseHandler,
    HandlerServices,
    RoleWizardHandler,
    VerbalMoralityHandler,
    WordWatchHandler,
)

logger = logging.getLogger("mysteriousbot.config")

HANDLER_TYPES: Dict[str, Type[BaseHandler]] = {
    HandlerKind.ACK: AckHandler,
    HandlerKind.ROLE_WIZARD: RoleWizardHandler,
    HandlerKind.WORD_WATCH: WordWatchHandler,
    HandlerKind.VERBAL_MORALITY: VerbalMoralityHandler,
    HandlerKind.AUTORESPONDER: AutoResponderHandler,
}


def build_handler(config: HandlerConfig, services: HandlerServices) -> BaseHandler:
    handler_type = HANDLER_TYPES.get(config.kind)
    if handler_type is None:
        raise ConfigError(f"No handler registered for kind {config.kind!r}")
    return handler_type(config, services)


def build_chain(guild_config: GuildConfig, services: HandlerServices) -> HandlerChain:
    return HandlerChain(
        build_handler(handler_config, services) for handler_config in guild_config.handlers
    )


def build_dispatcher(config: BotConfig, services: HandlerServices) -> Dispatcher:
    """One chain per configured guild; handler instances live as long as the process."""
    chains = {
        guild_id: build_chain(guild_config, services)
        for guild_id, guild_config in config.guilds.items()
    }
    for guild_id, chain in chains.items():
        logger.info("Guild %s handler chain: %s", guild_id, chain)
    return Dispatcher(chains)
