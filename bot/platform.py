"""
discord.py implementation of the outbound action interface.

Every call that reaches Discord is wrapped so that a discord.DiscordException
surfaces as a PlatformError naming the failing operation.
"""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Optional, Sequence, TypeVar

import discord

from core.platform import PlatformError
from core.types import InboundInteraction, InboundMessage
from core.utils import sanitize_text

logger = logging.getLogger("mysteriousbot.platform")

T = TypeVar("T")


async def _guard(operation: str, awaitable: Awaitable[T]) -> T:
    try:
        return await awaitable
    except discord.DiscordException as exc:
        raise PlatformError(operation, exc) from exc


class DiscordPlatform:
    """Outbound calls against a connected discord.Client."""

    def __init__(self, client: discord.Client) -> None:
        self.client = client

    async def _guild(self, guild_id: int) -> discord.Guild:
        guild = self.client.get_guild(guild_id)
        if guild is None:
            guild = await _guard("fetch_guild", self.client.fetch_guild(guild_id))
        return guild

    async def _member(self, guild: discord.Guild, user_id: int) -> discord.Member:
        member = guild.get_member(user_id)
        if member is None:
            member = await _guard("fetch_member", guild.fetch_member(user_id))
        return member

    async def current_user_id(self) -> int:
        user = self.client.user
        if user is None:
            raise PlatformError("current_user")
        return user.id

    async def channel_id_from_name(self, guild_id: int, name: str) -> Optional[int]:
        guild = await self._guild(guild_id)
        channels: Sequence[Any] = guild.channels
        if not channels:
            channels = await _guard("fetch_channels", guild.fetch_channels())
        channel = discord.utils.get(channels, name=name)
        return channel.id if channel is not None else None

    async def send_message(self, channel_id: int, text: str) -> None:
        channel = self.client.get_channel(channel_id)
        if channel is None:
            channel = await _guard("fetch_channel", self.client.fetch_channel(channel_id))
        await _guard(
            "send_message",
            channel.send(text, allowed_mentions=discord.AllowedMentions.none()),
        )

    async def reply(self, message: InboundMessage, text: str) -> None:
        raw = message.raw
        if not isinstance(raw, discord.Message):
            await self.send_message(message.channel_id, text)
            return
        await _guard(
            "reply",
            raw.reply(text, allowed_mentions=discord.AllowedMentions.none()),
        )

    async def add_reaction(self, message: InboundMessage, emoji: Any) -> None:
        raw = message.raw
        if not isinstance(raw, discord.Message):
            channel = self.client.get_channel(message.channel_id)
            if channel is None:
                channel = await _guard(
                    "fetch_channel", self.client.fetch_channel(message.channel_id)
                )
            raw = channel.get_partial_message(message.message_id)
        await _guard("add_reaction", raw.add_reaction(emoji))

    async def fetch_emojis(self, guild_id: int) -> Sequence[Any]:
        guild = await self._guild(guild_id)
        return await _guard("fetch_emojis", guild.fetch_emojis())

    async def find_role(self, guild_id: int, name: str) -> Optional[discord.Role]:
        guild = await self._guild(guild_id)
        roles: Sequence[discord.Role] = guild.roles
        if not roles:
            roles = await _guard("fetch_roles", guild.fetch_roles())
        wanted = name.casefold()
        for role in roles:
            if role.name.casefold() == wanted:
                return role
        return None

    async def grant_role(self, guild_id: int, user_id: int, role_id: int) -> None:
        guild = await self._guild(guild_id)
        member = await self._member(guild, user_id)
        await _guard(
            "grant_role",
            member.add_roles(discord.Object(id=role_id), reason="role wizard grant"),
        )

    async def revoke_role(self, guild_id: int, user_id: int, role_id: int) -> None:
        guild = await self._guild(guild_id)
        member = await self._member(guild, user_id)
        await _guard(
            "revoke_role",
            member.remove_roles(discord.Object(id=role_id), reason="role wizard revoke"),
        )

    async def display_name(self, guild_id: int, user_id: int) -> Optional[str]:
        guild = await self._guild(guild_id)
        member = guild.get_member(user_id)
        if member is not None:
            return member.display_name
        try:
            member = await guild.fetch_member(user_id)
            return member.display_name
        except discord.NotFound:
            pass
        except discord.DiscordException as exc:
            raise PlatformError("fetch_member", exc) from exc
        # Users who left the guild still show up on leaderboards
        user = await _guard("fetch_user", self.client.fetch_user(user_id))
        return user.name if user is not None else None

    async def respond(
        self,
        interaction: InboundInteraction,
        content: Optional[str] = None,
        fields: Optional[Sequence[tuple[str, str]]] = None,
    ) -> None:
        raw: discord.Interaction = interaction.raw
        embed = None
        if fields is not None:
            embed = discord.Embed()
            for name, value in fields:
                embed.add_field(name=sanitize_text(name), value=value, inline=False)

        if raw.response.is_done():
            send = raw.followup.send(
                content=content or discord.utils.MISSING,
                embed=embed if embed is not None else discord.utils.MISSING,
                allowed_mentions=discord.AllowedMentions.none(),
            )
        else:
            send = raw.response.send_message(
                content=content,
                embed=embed,
                allowed_mentions=discord.AllowedMentions.none(),
            )
        await _guard("respond", send)
