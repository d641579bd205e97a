"""
Outbound action interface.

Responders talk to the chat platform only through this interface so that the
dispatch pipeline can be exercised without a gateway connection. The concrete
implementation lives in bot.platform.
"""
from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .types import InboundInteraction, InboundMessage


class PlatformError(RuntimeError):
    """An outbound platform call failed (network, rate limit, permissions)."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None) -> None:
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{operation} failed{detail}")


class RoleRef(Protocol):
    id: int
    name: str


class Platform(Protocol):
    async def current_user_id(self) -> int: ...

    async def channel_id_from_name(self, guild_id: int, name: str) -> Optional[int]: ...

    async def send_message(self, channel_id: int, text: str) -> None: ...

    async def reply(self, message: InboundMessage, text: str) -> None: ...

    async def add_reaction(self, message: InboundMessage, emoji: Any) -> None: ...

    async def fetch_emojis(self, guild_id: int) -> Sequence[Any]: ...

    async def find_role(self, guild_id: int, name: str) -> Optional[RoleRef]: ...

    async def grant_role(self, guild_id: int, user_id: int, role_id: int) -> None: ...

    async def revoke_role(self, guild_id: int, user_id: int, role_id: int) -> None: ...

    async def display_name(self, guild_id: int, user_id: int) -> Optional[str]: ...

    async def respond(
        self,
        interaction: InboundInteraction,
        content: Optional[str] = None,
        fields: Optional[Sequence[tuple[str, str]]] = None,
    ) -> None: ...
