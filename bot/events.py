"""
Conversion of discord.py gateway objects into inbound event views.
"""
from __future__ import annotations

import discord

from core.types import InboundInteraction, InboundMessage


def message_to_event(message: discord.Message) -> InboundMessage:
    author = message.author
    return InboundMessage(
        message_id=message.id,
        guild_id=message.guild.id if message.guild is not None else None,
        channel_id=message.channel.id,
        author_id=author.id,
        author_name=author.name,
        author_display_name=getattr(author, "display_name", author.name),
        author_tag=str(author),
        content=message.content or "",
        clean_content=message.clean_content or "",
        mentions=frozenset(user.id for user in message.mentions),
        raw=message,
    )


def interaction_to_event(interaction: discord.Interaction) -> InboundInteraction:
    command = interaction.command
    name = command.name if command is not None else ""
    if not name and isinstance(interaction.data, dict):
        name = str(interaction.data.get("name", ""))
    return InboundInteraction(
        interaction_id=interaction.id,
        guild_id=interaction.guild_id,
        channel_id=interaction.channel_id,
        user_id=interaction.user.id,
        user_name=interaction.user.name,
        command_name=name,
        raw=interaction,
    )
