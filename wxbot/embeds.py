#!/usr/bin/env python3
"""
Conversion of display payloads into Discord embeds
"""

import discord

from .models import DisplayPayload

# Discord hard limits
MAX_TITLE_LENGTH = 256
MAX_DESCRIPTION_LENGTH = 4096
MAX_FIELDS = 25
MAX_FIELD_NAME_LENGTH = 256
MAX_FIELD_VALUE_LENGTH = 1024
MAX_FOOTER_LENGTH = 2048


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - 1] + '…'


def to_embed(payload: DisplayPayload) -> discord.Embed:
    """Build a discord.Embed from a DisplayPayload, clipping to Discord's limits."""
    embed = discord.Embed(
        title=_truncate(payload.title, MAX_TITLE_LENGTH) if payload.title else None,
        description=_truncate(payload.description, MAX_DESCRIPTION_LENGTH) if payload.description else None,
        color=payload.color,
        timestamp=payload.timestamp,
    )
    for field in payload.fields[:MAX_FIELDS]:
        embed.add_field(
            name=_truncate(field.name, MAX_FIELD_NAME_LENGTH),
            value=_truncate(field.value, MAX_FIELD_VALUE_LENGTH),
            inline=field.inline,
        )
    if payload.thumbnail_url:
        embed.set_thumbnail(url=payload.thumbnail_url)
    if payload.footer:
        embed.set_footer(text=_truncate(payload.footer, MAX_FOOTER_LENGTH))
    return embed
