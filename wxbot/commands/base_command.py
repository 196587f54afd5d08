#!/usr/bin/env python3
"""
Base command class for all Weather Bot commands
Provides common functionality and interface for command implementations
"""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from ..models import CommandRequest, SURFACE_SLASH

# How a command treats its single location argument
ARGUMENT_NONE = 'none'
ARGUMENT_OPTIONAL = 'optional'
ARGUMENT_REQUIRED = 'required'


class BaseCommand(ABC):
    """Base class for all bot commands - Plugin Interface.

    Commands are discovered by the PluginLoader and dispatched by the
    CommandManager from both the slash and the prefix surface. This class
    provides configuration loading, per-user cooldowns, admin checks and
    the shared location-store helpers.
    """

    # Plugin metadata - to be overridden by subclasses
    name: str = ""
    keywords: List[str] = []  # Prefix trigger words (including name and aliases)
    description: str = ""
    category: str = "weather"
    cooldown_seconds: int = 0

    # Slash surface: None keeps the command prefix-only
    slash_name: Optional[str] = None
    argument: str = ARGUMENT_NONE
    argument_description: str = "The location"
    missing_argument_message: str = "Please provide a location."

    # Documentation fields
    usage: str = ""  # Usage syntax without prefix, e.g. "forecast <location>"

    def __init__(self, bot):
        self.bot = bot
        self.logger = bot.logger

        # Per-user cooldown tracking
        self._user_cooldowns: Dict[str, float] = {}

        section = self._derive_config_section_name()
        self.enabled = self.get_config_value(section, 'enabled', fallback=True, value_type='bool')
        configured_cooldown = self.get_config_value(section, 'cooldown_seconds', fallback=None, value_type='int')
        if configured_cooldown is not None:
            self.cooldown_seconds = max(0, configured_cooldown)

        self._command_prefix = self._load_command_prefix()

    def get_config_value(self, section: str, key: str, fallback: Any = None, value_type: str = 'str') -> Any:
        """Read a typed config value.

        Args:
            section: Config section name.
            key: Config key name.
            fallback: Default value if not found or not convertible.
            value_type: Type of value ('str', 'bool', 'int', 'float', 'list').

        Returns:
            Any: Config value of appropriate type, or fallback if not found.
        """
        config = self.bot.config
        if not config.has_section(section) or not config.has_option(section, key):
            return fallback
        try:
            if value_type == 'bool':
                return config.getboolean(section, key)
            if value_type == 'int':
                return config.getint(section, key)
            if value_type == 'float':
                return config.getfloat(section, key)
            raw_value = config.get(section, key)
            if value_type == 'list':
                return [item.strip() for item in raw_value.split(',') if item.strip()]
            return raw_value
        except (ValueError, TypeError) as e:
            self.logger.warning(f"Invalid value for {section}.{key}, using default {fallback!r}: {e}")
            return fallback

    @abstractmethod
    async def execute(self, request: CommandRequest) -> bool:
        """Execute the command for the given request.

        Args:
            request: The inbound command (either surface).

        Returns:
            bool: True if execution was successful, False otherwise.
        """
        pass

    def get_help_text(self) -> str:
        return self.description or "No help available for this command."

    def _derive_config_section_name(self) -> str:
        """Derive config section name from command name.

        "forecast" -> "Forecast_Command", "addlocation" -> "Addlocation_Command"
        """
        return f"{self.name.title()}_Command"

    def _load_command_prefix(self) -> str:
        prefix = self.bot.config.get('Bot', 'command_prefix', fallback='!')
        return prefix.strip() or '!'

    def format_usage(self, surface: str) -> str:
        """Usage string for the given surface, e.g. '`!forecast <location>`'."""
        if surface == SURFACE_SLASH and self.slash_name:
            usage = self.usage.replace(self.name, self.slash_name, 1) if self.usage else self.slash_name
            return f"`/{usage}`"
        return f"`{self._command_prefix}{self.usage or self.name}`"

    def command_hint(self, request: CommandRequest, command_name: str) -> str:
        """How to invoke another command on the request's surface ('/weather' or '!weather')."""
        if request.is_slash:
            return f"/{command_name}"
        return f"{self._command_prefix}{command_name}"

    def get_metadata(self) -> Dict[str, Any]:
        """Get plugin metadata for discovery and registration."""
        return {
            'name': self.name,
            'keywords': self.keywords,
            'description': self.description,
            'slash_name': self.slash_name,
            'argument': self.argument,
            'cooldown_seconds': self.cooldown_seconds,
            'category': self.category,
            'usage': self.usage,
            'class_name': self.__class__.__name__,
            'module_name': self.__class__.__module__
        }

    def check_cooldown(self, user_id: Optional[str] = None) -> Tuple[bool, float]:
        """Check if user is on cooldown.

        Args:
            user_id: User ID to check. Requests without one share a single slot.

        Returns:
            Tuple[bool, float]: (can_execute, remaining_seconds).
        """
        if self.cooldown_seconds <= 0:
            return True, 0.0

        last_exec = self._user_cooldowns.get(user_id or '', 0)
        remaining = self.cooldown_seconds - (time.time() - last_exec)
        if remaining > 0:
            return False, remaining
        return True, 0.0

    def record_execution(self, user_id: Optional[str] = None) -> None:
        """Record command execution for cooldown tracking."""
        if self.cooldown_seconds <= 0:
            return
        current_time = time.time()
        self._user_cooldowns[user_id or ''] = current_time

        # Drop stale entries so the map does not grow without bound
        if len(self._user_cooldowns) > 1000:
            cutoff = current_time - (self.cooldown_seconds * 2)
            self._user_cooldowns = {
                k: v for k, v in self._user_cooldowns.items()
                if v > cutoff
            }

    def get_remaining_cooldown(self, user_id: Optional[str] = None) -> int:
        """Remaining cooldown in whole seconds, rounded up."""
        _, remaining = self.check_cooldown(user_id)
        return max(0, int(remaining + 0.999))

    def requires_admin_access(self) -> bool:
        """Check if this command is listed in [Admin_ACL] admin_commands."""
        if not self.bot.config.has_section('Admin_ACL'):
            return False
        admin_commands = self.bot.config.get('Admin_ACL', 'admin_commands', fallback='')
        admin_command_list = [cmd.strip() for cmd in admin_commands.split(',') if cmd.strip()]
        return self.name in admin_command_list

    def _check_admin_access(self, request: CommandRequest) -> bool:
        """Check the sender's Discord user id against [Admin_ACL] admin_users."""
        if not self.bot.config.has_section('Admin_ACL'):
            return False

        admin_users = self.bot.config.get('Admin_ACL', 'admin_users', fallback='')
        admin_ids = {uid.strip() for uid in admin_users.split(',') if uid.strip()}
        if not admin_ids:
            self.logger.warning("No admin users configured in [Admin_ACL]")
            return False

        if not request.sender_id:
            self.logger.warning(f"Admin command '{self.name}' requested without a sender id - access denied")
            return False

        is_admin = str(request.sender_id) in admin_ids
        if is_admin:
            self.logger.info(f"Admin access granted for {request.sender_name} ({request.sender_id})")
        else:
            self.logger.warning(f"Access denied for {request.sender_name} ({request.sender_id}) - not in admin ACL")
        return is_admin

    async def load_locations(self) -> List[str]:
        """Load saved locations without blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.bot.location_store.load)

    async def save_locations(self, locations: List[str]) -> bool:
        """Persist saved locations without blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.bot.location_store.save, locations)

    async def send_response(self, request: CommandRequest, content: Optional[str] = None, payload=None) -> bool:
        """Reply through the request's responder.

        Args:
            request: The request to respond to.
            content: Plain text content.
            payload: Optional DisplayPayload rendered as an embed.

        Returns:
            bool: True if the response was sent successfully, False otherwise.
        """
        return await request.responder.reply(content=content, payload=payload)
