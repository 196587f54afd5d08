#!/usr/bin/env python3
"""
Command management functionality for the Weather Bot
Routes slash commands and prefixed messages to command plugins
"""

import asyncio
from typing import Any, Coroutine, Dict, Optional, Set, Tuple

import discord
from discord import app_commands

from .commands.base_command import ARGUMENT_NONE, ARGUMENT_REQUIRED, BaseCommand
from .models import CommandRequest, SURFACE_PREFIX, SURFACE_SLASH
from .plugin_loader import PluginLoader
from .responders import InteractionResponder, MessageResponder

APOLOGY_MESSAGE = "Sorry, something went wrong while processing your {command} request. Please try again later."


class CommandManager:
    """Manages all bot commands using dynamic plugin loading.

    Parses prefixed messages, builds slash-command definitions from plugin
    metadata, enforces enabled/admin/cooldown/argument checks and runs the
    command. Unexpected exceptions inside a command are logged and turned
    into an apology reply. Follow-up tasks started by commands are tracked
    here so they can be cancelled at shutdown.
    """

    def __init__(self, bot):
        self.bot = bot
        self.logger = bot.logger

        self.command_prefix = self.load_command_prefix()

        # Initialize plugin loader and load all plugins
        self.plugin_loader = PluginLoader(bot)
        self.commands: Dict[str, BaseCommand] = self.plugin_loader.load_all_plugins()

        self._followup_tasks: Set[asyncio.Task] = set()

        self.logger.info(f"CommandManager initialized with {len(self.commands)} plugins")

    def load_command_prefix(self) -> str:
        prefix = self.bot.config.get('Bot', 'command_prefix', fallback='!')
        return prefix.strip() or '!'

    def parse_prefix_message(self, content: str) -> Optional[Tuple[str, str]]:
        """Split a prefixed message into (keyword, argument).

        The first whitespace-separated token after the prefix is the
        lower-cased keyword; the remaining tokens joined by single spaces
        form the argument.

        Returns:
            Optional[Tuple[str, str]]: None if the message does not start with
            the prefix or has no keyword.
        """
        content = content.strip()
        if not content.startswith(self.command_prefix):
            return None
        tokens = content[len(self.command_prefix):].split()
        if not tokens:
            return None
        return tokens[0].lower(), ' '.join(tokens[1:])

    async def handle_message(self, message: discord.Message) -> bool:
        """Handle a text message from the gateway.

        Returns:
            bool: True if a command was dispatched, False if the message was ignored.
        """
        if message.author.bot:
            return False

        parsed = self.parse_prefix_message(message.content or '')
        if parsed is None:
            return False
        keyword, argument = parsed

        command = self.plugin_loader.get_plugin_by_keyword(keyword)
        if command is None:
            return False

        self.logger.info(f"Processing command: {keyword} with args: {argument}")
        request = CommandRequest(
            command=keyword,
            argument=argument,
            sender_id=str(message.author.id),
            sender_name=getattr(message.author, 'display_name', str(message.author)),
            channel=getattr(message.channel, 'name', None),
            guild_id=message.guild.id if message.guild else None,
            surface=SURFACE_PREFIX,
            responder=MessageResponder(message, self.logger),
        )
        await self.dispatch(command, request)
        return True

    async def handle_interaction(self, interaction: discord.Interaction, command: BaseCommand,
                                 argument: Optional[str] = None) -> bool:
        """Handle an application-command invocation."""
        self.logger.info(f"Slash command: /{command.slash_name} with args: {argument or ''}")
        request = CommandRequest(
            command=command.slash_name,
            argument=(argument or '').strip(),
            sender_id=str(interaction.user.id),
            sender_name=getattr(interaction.user, 'display_name', str(interaction.user)),
            channel=getattr(interaction.channel, 'name', None),
            guild_id=interaction.guild_id,
            surface=SURFACE_SLASH,
            responder=InteractionResponder(interaction, self.logger),
        )
        return await self.dispatch(command, request)

    async def dispatch(self, command: BaseCommand, request: CommandRequest) -> bool:
        """Run pre-execution checks, then execute the command.

        Args:
            command: The command plugin to run.
            request: The inbound request.

        Returns:
            bool: The command's result, or False if it was rejected or failed.
        """
        if not command.enabled:
            self.logger.debug(f"Command '{command.name}' is disabled")
            if request.is_slash:
                await request.responder.reply(f"The {command.name} command is disabled.")
            return False

        if command.requires_admin_access() and not command._check_admin_access(request):
            await request.responder.reply(f"Access denied: {command.name} is an admin-only command.")
            return False

        if command.argument == ARGUMENT_REQUIRED and not request.argument:
            await request.responder.reply(
                f"{command.missing_argument_message} Usage: {command.format_usage(request.surface)}"
            )
            return False

        can_execute, _ = command.check_cooldown(request.sender_id)
        if not can_execute:
            seconds = max(1, command.get_remaining_cooldown(request.sender_id))
            await request.responder.reply(
                f"Please wait {seconds} more second{'s' if seconds != 1 else ''} before using {command.name} again."
            )
            return False

        command.record_execution(request.sender_id)
        try:
            return await command.execute(request)
        except Exception as e:
            self.logger.error(f"Error executing command '{command.name}': {e}", exc_info=True)
            await request.responder.reply(APOLOGY_MESSAGE.format(command=command.name))
            return False

    def _build_slash_callback(self, command: BaseCommand):
        manager = self

        if command.argument == ARGUMENT_NONE:
            async def callback(interaction: discord.Interaction):
                await manager.handle_interaction(interaction, command)
        elif command.argument == ARGUMENT_REQUIRED:
            async def callback(interaction: discord.Interaction, location: str):
                await manager.handle_interaction(interaction, command, location)
            callback = app_commands.describe(location=command.argument_description)(callback)
        else:
            async def callback(interaction: discord.Interaction, location: Optional[str] = None):
                await manager.handle_interaction(interaction, command, location)
            callback = app_commands.describe(location=command.argument_description)(callback)

        return callback

    def build_slash_commands(self) -> Dict[str, app_commands.Command]:
        """Create one application command per enabled plugin that exposes a slash name."""
        slash_commands = {}
        for command in self.commands.values():
            if not command.slash_name or not command.enabled:
                continue
            slash_commands[command.slash_name] = app_commands.Command(
                name=command.slash_name,
                description=(command.description or command.slash_name)[:100],
                callback=self._build_slash_callback(command),
            )
        return slash_commands

    def register_slash_commands(self, tree: app_commands.CommandTree) -> int:
        """Add the slash commands to the tree as global commands.

        Returns:
            int: Number of commands registered.
        """
        slash_commands = self.build_slash_commands()
        for slash_command in slash_commands.values():
            tree.add_command(slash_command, override=True)
        self.logger.info(f"Registered {len(slash_commands)} slash commands: {sorted(slash_commands)}")
        return len(slash_commands)

    def schedule_followup(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Run a follow-up coroutine as an independent, cancelable task."""
        task = asyncio.create_task(coro)
        self._followup_tasks.add(task)
        task.add_done_callback(self._followup_done)
        return task

    def _followup_done(self, task: asyncio.Task) -> None:
        self._followup_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.logger.error(f"Follow-up task failed: {exc}")

    @property
    def pending_followups(self) -> int:
        return len(self._followup_tasks)

    async def cancel_followups(self) -> None:
        """Cancel every pending follow-up task and wait for them to finish."""
        tasks = list(self._followup_tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            self.logger.info(f"Cancelled {len(tasks)} pending follow-up task(s)")

    def get_plugin_by_keyword(self, keyword: str) -> Optional[BaseCommand]:
        return self.plugin_loader.get_plugin_by_keyword(keyword)

    def get_plugin_by_name(self, name: str) -> Optional[BaseCommand]:
        return self.plugin_loader.get_plugin_by_name(name)
