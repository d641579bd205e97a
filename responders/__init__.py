"""
Message handling pipeline.

Triggers and filters decide whether a handler applies; the engine walks each
guild's handler chain; commands answers slash-command interactions.
"""
from .commands import CommandResponder, CommandRouter
from .config_loader import build_chain, build_dispatcher, build_handler
from .engine import Dispatcher, HandlerChain
from .handlers import BaseHandler, HandlerError, HandlerServices
from .matching import ChannelFilter, Cooldown, Trigger

__all__ = [
    "BaseHandler",
    "ChannelFilter",
    "CommandResponder",
    "CommandRouter",
    "Cooldown",
    "Dispatcher",
    "HandlerChain",
    "HandlerError",
    "HandlerServices",
    "Trigger",
    "build_chain",
    "build_dispatcher",
    "build_handler",
]
