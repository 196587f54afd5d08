#!/usr/bin/env python3
"""
Surface-specific response adapters for the Weather Bot
Commands reply through a Responder without knowing whether the request came
from a slash command (interaction) or a prefixed text message.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import discord

from .embeds import to_embed
from .models import DisplayPayload

MAX_CONTENT_LENGTH = 2000


def _reply_kwargs(content: Optional[str], payload: Optional[DisplayPayload]) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {}
    if payload is not None:
        kwargs['embed'] = to_embed(payload)
        kwargs['content'] = content[:MAX_CONTENT_LENGTH] if content else None
    else:
        kwargs['content'] = (content or '')[:MAX_CONTENT_LENGTH]
    return kwargs


class Responder(ABC):
    """Reply capability handed to commands.

    Every operation returns True on success and False after logging a Discord
    error. No operation raises discord.HTTPException.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('WeatherBot.responder')

    @abstractmethod
    async def defer(self, loading_text: str) -> bool:
        """Acknowledge the request before slow work starts."""

    @abstractmethod
    async def reply(self, content: Optional[str] = None, payload: Optional[DisplayPayload] = None) -> bool:
        """Send the final response, replacing the deferred/loading state if any."""

    @abstractmethod
    async def send_followup(self, content: str) -> bool:
        """Post an additional plain message to the originating channel."""


class MessageResponder(Responder):
    """Responder for prefix commands: a loading reply that is later edited."""

    def __init__(self, message: discord.Message, logger: Optional[logging.Logger] = None):
        super().__init__(logger)
        self.message = message
        self.loading_message: Optional[discord.Message] = None

    async def defer(self, loading_text: str) -> bool:
        try:
            self.loading_message = await self.message.reply(loading_text)
            return True
        except discord.HTTPException as e:
            self.logger.error(f"Failed to send loading message: {e}")
            return False

    async def reply(self, content: Optional[str] = None, payload: Optional[DisplayPayload] = None) -> bool:
        kwargs = _reply_kwargs(content, payload)
        try:
            if self.loading_message is not None:
                await self.loading_message.edit(**kwargs)
            else:
                await self.message.reply(**kwargs)
            return True
        except discord.HTTPException as e:
            self.logger.error(f"Failed to send reply: {e}")
            return False

    async def send_followup(self, content: str) -> bool:
        try:
            await self.message.channel.send(content[:MAX_CONTENT_LENGTH])
            return True
        except discord.HTTPException as e:
            self.logger.error(f"Failed to send follow-up message: {e}")
            return False


class InteractionResponder(Responder):
    """Responder for slash commands: deferred acknowledgment, then edit."""

    def __init__(self, interaction: discord.Interaction, logger: Optional[logging.Logger] = None):
        super().__init__(logger)
        self.interaction = interaction
        self.deferred = False

    async def defer(self, loading_text: str) -> bool:
        # Interactions show Discord's own "thinking" state, loading_text is unused
        try:
            await self.interaction.response.defer()
            self.deferred = True
            return True
        except discord.HTTPException as e:
            self.logger.error(f"Failed to defer interaction: {e}")
            return False

    async def reply(self, content: Optional[str] = None, payload: Optional[DisplayPayload] = None) -> bool:
        kwargs = _reply_kwargs(content, payload)
        try:
            if self.deferred or self.interaction.response.is_done():
                await self.interaction.edit_original_response(**kwargs)
            else:
                await self.interaction.response.send_message(**kwargs)
            return True
        except discord.HTTPException as e:
            self.logger.error(f"Failed to respond to interaction: {e}")
            return False

    async def send_followup(self, content: str) -> bool:
        channel = self.interaction.channel
        if channel is None:
            self.logger.warning("Interaction has no channel; follow-up message skipped")
            return False
        try:
            await channel.send(content[:MAX_CONTENT_LENGTH])
            return True
        except discord.HTTPException as e:
            self.logger.error(f"Failed to send follow-up message: {e}")
            return False
